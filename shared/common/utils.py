# shared/common/utils.py
"""
Common utility functions used by services.
"""

from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Union

from dateutil.relativedelta import relativedelta
from django.utils import timezone


# =============================================================================
# DATE/TIME UTILITIES
# =============================================================================

def utc_now() -> datetime:
    """Get current UTC datetime"""
    return timezone.now()


def start_of_day(dt: datetime = None) -> datetime:
    """Get start of day for given datetime"""
    dt = dt or utc_now()
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def start_of_month(dt: datetime = None) -> datetime:
    """Get start of month for given datetime"""
    dt = dt or utc_now()
    return start_of_day(dt.replace(day=1))


def months_back(count: int, dt: datetime = None) -> datetime:
    """Start of the month ``count - 1`` months before ``dt``, so the window holds ``count`` months"""
    return start_of_month(dt) - relativedelta(months=count - 1)


def month_keys(count: int, dt: datetime = None) -> List[str]:
    """Ordered ``YYYY-MM`` keys for the last ``count`` months, oldest first"""
    first = months_back(count, dt)
    return [(first + relativedelta(months=i)).strftime('%Y-%m') for i in range(count)]


# =============================================================================
# NUMBER UTILITIES
# =============================================================================

def round_decimal(value: Union[Decimal, float, int], places: int = 2) -> Decimal:
    """Round to specified decimal places"""
    if not isinstance(value, Decimal):
        value = Decimal(str(value))
    return value.quantize(Decimal(10) ** -places, rounding=ROUND_HALF_UP)


def percentage(part: Union[Decimal, float, int], whole: Union[Decimal, float, int]) -> float:
    """Calculate percentage rounded to two places"""
    if not whole:
        return 0.0
    return round(float(part) / float(whole) * 100, 2)


# =============================================================================
# DICT UTILITIES
# =============================================================================

def merge_dicts(base: Dict, patch: Dict) -> Dict[str, Any]:
    """Shallow merge returning a new dict, ``patch`` wins"""
    merged = dict(base or {})
    merged.update(patch or {})
    return merged
