"""
Khata (store credit) gate.

Khata unlocks once a customer has placed KHATA_UNLOCK_PREPAID_ORDERS prepaid
orders. That count is the only gate: the credit limit is shown to the
customer but never checked, and the used balance only ever grows.
"""

import logging

from schemas import CustomerAccount

logger = logging.getLogger(__name__)

KHATA_UNLOCK_PREPAID_ORDERS = 5
DISPLAY_CREDIT_LIMIT = 1000


def khata_eligible(user: CustomerAccount) -> bool:
    return user.prepaid_count >= KHATA_UNLOCK_PREPAID_ORDERS


def on_threshold_crossed(user: CustomerAccount) -> bool:
    """
    Set the display credit limit the first time the customer is eligible.

    Safe to call any number of times; only an unset limit is filled in.
    Returns True when the record was changed.
    """
    if not khata_eligible(user) or user.credit_limit:
        return False
    user.credit_limit = DISPLAY_CREDIT_LIMIT
    if user.used_credit is None:
        user.used_credit = 0.0
    logger.info("Khata unlocked for user %s", user.id)
    return True


def apply_khata_charge(user: CustomerAccount, subtotal: float) -> None:
    user.used_credit = (user.used_credit or 0.0) + subtotal


def khata_note(user: CustomerAccount) -> str:
    if khata_eligible(user):
        return "Khata available. It will use your running khata balance."
    return (
        f"Khata unlocks after {KHATA_UNLOCK_PREPAID_ORDERS} prepaid orders. "
        f"You have {user.prepaid_count}."
    )
