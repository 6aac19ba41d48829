import pytest

from khata import (
    DISPLAY_CREDIT_LIMIT,
    apply_khata_charge,
    khata_eligible,
    khata_note,
    on_threshold_crossed,
)
from loyalty import points_earned, redeemable_discount
from schemas import CustomerAccount


def make_customer(**fields):
    return CustomerAccount(id="c1", name="Asha", email="a@x.com", password="secret1", **fields)


@pytest.mark.parametrize("amount,points", [(0, 0), (19, 0), (20, 1), (39, 1), (40, 2), (170, 8), (999.99, 49)])
def test_points_earned(amount, points):
    assert points_earned(amount) == points


def test_no_points_for_negative_amount():
    assert points_earned(-40) == 0


@pytest.mark.parametrize("subtotal,available,expected", [(200, 30, 30), (20, 30, 20), (0, 30, 0), (50, 0, 0)])
def test_redeemable_discount_is_capped_by_subtotal(subtotal, available, expected):
    discount = redeemable_discount(subtotal, available)
    assert discount == expected
    assert 0 <= discount <= subtotal


def test_khata_unlocks_at_five_prepaid_orders():
    assert not khata_eligible(make_customer(prepaid_count=4))
    assert khata_eligible(make_customer(prepaid_count=5))


def test_threshold_sets_display_limit_once():
    user = make_customer(prepaid_count=5, used_credit=None)
    assert on_threshold_crossed(user) is True
    assert user.credit_limit == DISPLAY_CREDIT_LIMIT
    assert user.used_credit == 0

    user.used_credit = 250
    assert on_threshold_crossed(user) is False
    assert user.credit_limit == DISPLAY_CREDIT_LIMIT
    assert user.used_credit == 250


def test_threshold_ignored_below_five():
    user = make_customer(prepaid_count=4)
    assert on_threshold_crossed(user) is False
    assert user.credit_limit is None


def test_khata_charge_is_never_capped():
    user = make_customer(prepaid_count=5, credit_limit=1000, used_credit=900)
    apply_khata_charge(user, 5000)
    assert user.used_credit == 5900


def test_khata_note():
    assert khata_note(make_customer(prepaid_count=2)) == "Khata unlocks after 5 prepaid orders. You have 2."
    assert khata_note(make_customer(prepaid_count=7)).startswith("Khata available.")
