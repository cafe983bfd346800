"""Rating aggregation."""

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Optional


def average_rating(ratings: Iterable[int]) -> Optional[float]:
    """Mean of the given star ratings rounded half up to one decimal, or None if there are none."""
    values = list(ratings)
    if not values:
        return None
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))
