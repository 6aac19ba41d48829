"""
Loyalty points: earned on prepaid orders, redeemed 1:1 against a subtotal.
"""

import math

RUPEES_PER_POINT = 20


def points_earned(amount_paid: float) -> int:
    """1 point for every full 20 paid; nothing for zero or negative amounts."""
    if amount_paid <= 0:
        return 0
    return int(math.floor(amount_paid / RUPEES_PER_POINT))


def redeemable_discount(subtotal: float, available_points: int) -> float:
    """Points redeemable against `subtotal`, capped so the order never goes negative."""
    return max(0, min(subtotal, available_points))
