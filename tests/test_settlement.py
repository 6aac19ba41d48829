import pytest

import accounts
import catalog
import settlement
from cart import add_item, load_cart, save_cart
from conftest import FIXED_NOW
from database import ORDERS
from errors import EmptyCartError, IneligibleError, ValidationError
from schemas import Order
from settlement import confirmation_message, order_history, orders_received, settle


def fill_cart(store, user, product, quantity):
    lines = load_cart(store, user.id)
    for _ in range(quantity):
        lines = add_item(lines, product)
    save_cart(store, user.id, lines)


def test_khata_rejected_for_new_customer(store, customer, products):
    fill_cart(store, customer, products["apple"], 10)
    before = store.items.copy()

    with pytest.raises(IneligibleError):
        settle(store, customer, "khata")

    assert store.items == before


def test_prepaid_with_rewards_at_threshold(store, customer, products, set_customer):
    customer = set_customer(prepaid_count=5, reward_points=30, credit_limit=None)
    fill_cart(store, customer, products["apple"], 4)

    result = settle(store, customer, "prepaid", use_rewards=True, payment_method="upi",
                    clock=lambda: FIXED_NOW)

    order = result.order
    assert (order.subtotal, order.discount, order.to_pay) == (200, 30, 170)
    assert order.type == "prepaid"
    assert order.payment_method == "upi"
    assert order.date == "09/03/2024, 14:05:30"

    user = accounts.get_user(store, customer.id)
    assert user == result.user
    assert user.reward_points == 8
    assert isinstance(user.reward_points, int)
    assert user.prepaid_count == 6
    assert user.credit_limit == 1000
    assert user.used_credit == 0
    assert load_cart(store, customer.id) == []


def test_khata_after_unlock_ignores_rewards(store, customer, products, set_customer):
    customer = set_customer(prepaid_count=6, reward_points=8, credit_limit=1000, used_credit=0)
    fill_cart(store, customer, products["apple"], 6)

    order = settle(store, customer, "khata", use_rewards=True, payment_method="card").order

    assert (order.subtotal, order.discount, order.to_pay) == (300, 0, 300)
    assert order.type == "khata"
    assert order.payment_method == "khata"
    user = accounts.get_user(store, customer.id)
    assert user.used_credit == 300
    assert user.reward_points == 8
    assert user.prepaid_count == 6


def test_khata_ignores_credit_limit(store, customer, products, set_customer):
    customer = set_customer(prepaid_count=5, credit_limit=1000, used_credit=990)
    fill_cart(store, customer, products["apple"], 10)

    settle(store, customer, "khata")

    assert accounts.get_user(store, customer.id).used_credit == 1490


def test_empty_cart_rejected(store, customer):
    before = store.items.copy()
    with pytest.raises(EmptyCartError):
        settle(store, customer, "prepaid", payment_method="upi")
    assert store.items == before
    assert store.load_collection(ORDERS) == []


def test_prepaid_requires_payment_method(store, customer, products):
    fill_cart(store, customer, products["milk"], 1)
    with pytest.raises(ValidationError):
        settle(store, customer, "prepaid", payment_method="  ")


def test_unknown_type_rejected(store, customer, products):
    fill_cart(store, customer, products["milk"], 1)
    with pytest.raises(ValidationError):
        settle(store, customer, "cod")


def test_prepaid_without_rewards_keeps_points(store, customer, products, set_customer):
    customer = set_customer(reward_points=12)
    fill_cart(store, customer, products["milk"], 2)

    order = settle(store, customer, "prepaid", use_rewards=False, payment_method="cash").order

    assert order.discount == 0
    assert accounts.get_user(store, customer.id).reward_points == 12 + 3


def test_redeeming_whole_subtotal_keeps_points_whole(store, customer, products, set_customer):
    customer = set_customer(reward_points=30)
    fill_cart(store, customer, products["chips"], 1)

    result = settle(store, customer, "prepaid", use_rewards=True, payment_method="upi")

    assert (result.order.discount, result.order.to_pay) == (20, 0)
    assert result.user.reward_points == 10
    assert isinstance(result.user.reward_points, int)


def test_fifth_prepaid_order_unlocks_khata(store, customer, products, set_customer):
    customer = set_customer(prepaid_count=4, credit_limit=None)
    fill_cart(store, customer, products["chips"], 1)

    user = settle(store, customer, "prepaid", payment_method="upi").user

    assert user.prepaid_count == 5
    assert user.credit_limit == 1000


def test_failed_write_rolls_back_everything(store, customer, products, monkeypatch):
    fill_cart(store, customer, products["apple"], 2)
    before = store.items.copy()

    def broken(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(settlement, "clear_cart", broken)
    with pytest.raises(RuntimeError):
        settle(store, customer, "prepaid", payment_method="upi")

    assert store.items == before


def test_order_amounts_are_consistent(store, customer, products, set_customer):
    customer = set_customer(reward_points=500)
    for product, quantity in [("apple", 3), ("milk", 1), ("chips", 2)]:
        fill_cart(store, customer, products[product], quantity)
        customer = settle(store, customer, "prepaid", use_rewards=True, payment_method="upi").user

    for order in order_history(store, customer.id):
        assert order.to_pay == order.subtotal - order.discount
        assert order.to_pay >= 0


def test_history_and_received_orders_are_newest_first(store, customer, shopkeeper, products):
    other = accounts.create_user(store, "Meena", "meena@example.com", "secret1", "shopkeeper")
    bread = catalog.add_product(store, other, "Bread", 40, "", "Snacks")

    fill_cart(store, customer, products["apple"], 1)
    first = settle(store, customer, "prepaid", payment_method="upi").order
    fill_cart(store, customer, bread, 1)
    second = settle(store, customer, "prepaid", payment_method="upi").order

    assert [o.id for o in order_history(store, customer.id)] == [second.id, first.id]
    assert [o.id for o in orders_received(store, shopkeeper.id)] == [first.id]
    assert [o.id for o in orders_received(store, other.id)] == [second.id]


def test_confirmation_message():
    order = Order(id="o1", user_id="u1", items=[], subtotal=200, discount=30, to_pay=170,
                  type="prepaid", payment_method="upi", date="x")
    assert confirmation_message(order) == "PREPAID order placed! Amount to pay: ₹ 170 (₹30 from reward points)"
    khata = order.model_copy(update={"discount": 0, "to_pay": 200, "type": "khata"})
    assert confirmation_message(khata) == "KHATA order placed! Amount to pay: ₹ 200"
