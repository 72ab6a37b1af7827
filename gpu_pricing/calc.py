# gpu_pricing/calc.py
"""
Small price arithmetic shared by the registry and the DB-backed endpoints.

Every helper returns None instead of dividing by zero.
"""

from decimal import Decimal
from typing import Optional, Union

Number = Union[int, float, Decimal]


def change_percent(old_price: float, new_price: float) -> Optional[float]:
    if old_price == 0:
        return None
    return (new_price - old_price) / old_price * 100


def price_per_gpu(price_amount: Optional[Number], gpu_count: Optional[int]) -> Optional[float]:
    if price_amount is None or not gpu_count:
        return None
    return round(float(price_amount) / gpu_count, 2)


def per_unit(amount: Optional[Number], units: Optional[Number]) -> Optional[float]:
    """Unrounded amount / units, for comparison ratios."""
    if amount is None or not units:
        return None
    return float(amount) / float(units)
