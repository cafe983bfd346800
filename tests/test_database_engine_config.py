def test_get_engine_kwargs_sqlite_has_check_same_thread(monkeypatch):
    # Import lazily so monkeypatch can affect env usage deterministically.
    from allfreedo.database import database as db

    kwargs = db.get_engine_kwargs("sqlite:///./allfreedo.db")
    assert "connect_args" in kwargs
    assert kwargs["connect_args"]["check_same_thread"] is False
    # SQLite should not require pool sizing knobs.
    assert "pool_size" not in kwargs
    assert "max_overflow" not in kwargs
    assert kwargs["pool_pre_ping"] is True


def test_get_engine_kwargs_postgres_has_conservative_pooling(monkeypatch):
    from allfreedo.database import database as db

    monkeypatch.setenv("DB_POOL_SIZE", "3")
    monkeypatch.setenv("DB_MAX_OVERFLOW", "2")
    monkeypatch.setenv("DB_POOL_TIMEOUT_SEC", "15")

    kwargs = db.get_engine_kwargs("postgresql+psycopg://u:p@localhost:5432/db")
    assert "connect_args" not in kwargs
    assert kwargs["pool_pre_ping"] is True
    assert kwargs["pool_size"] == 3
    assert kwargs["max_overflow"] == 2
    assert kwargs["pool_timeout"] == 15


def test_debug_enables_echo(monkeypatch):
    from allfreedo.database import database as db

    monkeypatch.setenv("DEBUG", "true")
    assert db.get_engine_kwargs("sqlite:///./allfreedo.db")["echo"] is True
    monkeypatch.setenv("DEBUG", "false")
    assert db.get_engine_kwargs("sqlite:///./allfreedo.db")["echo"] is False


def test_sqlite_pragmas_listener_is_guarded():
    from allfreedo.database import database as db

    assert db._is_sqlite_url("sqlite:///./allfreedo.db") is True
    assert db._is_sqlite_url("postgresql+psycopg://u:p@localhost/db") is False


def test_schema_check_reports_missing_tables(tmp_path):
    """The migration runner only stamps head when every expected table is present."""
    from sqlalchemy import create_engine, text
    from allfreedo.database.database import Base
    from allfreedo.database import models  # noqa: F401
    from allfreedo.database.migrate_runner import missing_requirements

    url = f"sqlite:///{tmp_path / 'partial.db'}"
    engine = create_engine(url)
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE users (id VARCHAR PRIMARY KEY)"))
        missing = missing_requirements(conn)
    assert "missing table: rooms" in missing
    assert "missing column: task_templates.last_assigned_roomie_id" in missing

    full = create_engine(f"sqlite:///{tmp_path / 'full.db'}")
    Base.metadata.create_all(bind=full)
    with full.begin() as conn:
        assert missing_requirements(conn) == []
