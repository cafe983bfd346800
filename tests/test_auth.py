"""Tests for JWT sessions, Google sign-in and the auth dependencies."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from allfreedo.auth.dependencies import get_current_roomie, get_current_user
from allfreedo.auth.jwt import create_access_token, decode_access_token, get_user_id_from_token
from allfreedo.database.roomie_repository import RoomieRepository


class TestJwt:
    def test_round_trip_subject(self):
        token = create_access_token("google-sub-1")
        assert get_user_id_from_token(token) == "google-sub-1"
        assert decode_access_token(token)["sub"] == "google-sub-1"

    def test_expired_token_is_rejected(self):
        token = create_access_token("google-sub-1", expires_in=timedelta(seconds=-10))
        assert decode_access_token(token) is None
        assert get_user_id_from_token(token) is None

    def test_garbage_token_is_rejected(self):
        assert get_user_id_from_token("not-a-jwt") is None


class TestVerifyGoogleToken:
    def test_valid_token_returns_user_info(self):
        from allfreedo.auth import google_oauth

        idinfo = {"iss": "accounts.google.com", "sub": "123", "email": "a@example.com", "name": "A"}
        with patch.object(google_oauth.id_token, "verify_oauth2_token", return_value=idinfo):
            assert google_oauth.verify_google_token("tok") == {"id": "123", "email": "a@example.com", "name": "A"}

    def test_wrong_issuer_is_rejected(self):
        from allfreedo.auth import google_oauth

        idinfo = {"iss": "evil.example.com", "sub": "123", "email": "a@example.com"}
        with patch.object(google_oauth.id_token, "verify_oauth2_token", return_value=idinfo):
            assert google_oauth.verify_google_token("tok") is None

    def test_invalid_token_is_rejected(self):
        from allfreedo.auth import google_oauth

        with patch.object(google_oauth.id_token, "verify_oauth2_token", side_effect=ValueError("bad")):
            assert google_oauth.verify_google_token("tok") is None


class TestDependencies:
    def test_missing_credentials_is_401(self, db_session):
        with pytest.raises(HTTPException) as excinfo:
            get_current_user(credentials=None, db=db_session)
        assert excinfo.value.status_code == 401

    def test_invalid_token_is_401(self, db_session):
        creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials="nope")
        with pytest.raises(HTTPException) as excinfo:
            get_current_user(credentials=creds, db=db_session)
        assert excinfo.value.detail == "Invalid or expired token"

    def test_unknown_user_is_401(self, db_session):
        creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials=create_access_token("ghost"))
        with pytest.raises(HTTPException) as excinfo:
            get_current_user(credentials=creds, db=db_session)
        assert excinfo.value.detail == "User not found"

    def test_valid_token_returns_user(self, db_session, test_user_id):
        creds = HTTPAuthorizationCredentials(scheme="Bearer", credentials=create_access_token(test_user_id))
        assert get_current_user(credentials=creds, db=db_session).id == test_user_id

    def test_user_without_profile_is_403(self, db_session, test_user):
        with pytest.raises(HTTPException) as excinfo:
            get_current_roomie(current_user=test_user, db=db_session)
        assert excinfo.value.status_code == 403
        assert excinfo.value.detail == "Roomie profile required"

    def test_user_with_profile_gets_roomie(self, db_session, test_user):
        roomie = RoomieRepository(db_session).create(test_user.id, "Tess")
        assert get_current_roomie(current_user=test_user, db=db_session).id == roomie.id
