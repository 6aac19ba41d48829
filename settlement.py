"""
Order settlement.

A checkout either settles completely or is rejected with nothing written:

    cart -> validated -> settled   (user updated, order appended, cart cleared)
                      -> rejected  (no state change)

Prepaid orders may redeem reward points, earn new points on the amount
actually paid and count towards khata. Khata orders never touch points and
charge the full subtotal to the customer's running balance.
"""

import logging
from datetime import datetime
from typing import Callable, List, NamedTuple, Optional

from accounts import update_user
from cart import clear_cart, load_cart, subtotal
from catalog import products_of
from database import ORDERS, RecordStore, create_document, get_documents, new_id
from errors import EmptyCartError, IneligibleError, ValidationError
from khata import apply_khata_charge, khata_eligible, on_threshold_crossed
from loyalty import points_earned, redeemable_discount
from schemas import SETTLEMENT_TYPES, CustomerAccount, Order

logger = logging.getLogger(__name__)

ORDER_DATE_FORMAT = "%d/%m/%Y, %H:%M:%S"
KHATA_PAYMENT_METHOD = "khata"


class Settlement(NamedTuple):
    """Result of a successful checkout."""

    order: Order
    user: CustomerAccount


def settle(
    store: RecordStore,
    user: CustomerAccount,
    settlement_type: str,
    use_rewards: bool = False,
    payment_method: Optional[str] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> Settlement:
    """
    Turn the user's cart into an order.

    Raises:
        ValidationError: unknown settlement type or no payment method for prepaid
        EmptyCartError: nothing in the cart
        IneligibleError: khata before enough prepaid orders
    """
    if settlement_type not in SETTLEMENT_TYPES:
        raise ValidationError(f"Unknown order type: {settlement_type}")
    cart = load_cart(store, user.id)
    if not cart:
        raise EmptyCartError("Your cart is empty.")
    if settlement_type == "khata" and not khata_eligible(user):
        raise IneligibleError("Khata is not yet unlocked.")
    if settlement_type == "prepaid":
        payment_method = (payment_method or "").strip()
        if not payment_method:
            raise ValidationError("Choose a payment method.")
    else:
        payment_method = KHATA_PAYMENT_METHOD

    customer = user.model_copy(deep=True)
    amount = subtotal(cart)
    discount = 0
    if settlement_type == "prepaid" and use_rewards:
        discount = redeemable_discount(amount, customer.reward_points)
        customer.reward_points -= discount
    to_pay = amount - discount

    if settlement_type == "khata":
        apply_khata_charge(customer, amount)
    else:
        customer.prepaid_count += 1
        customer.reward_points += points_earned(to_pay)
        on_threshold_crossed(customer)

    order = Order(
        id=new_id(),
        user_id=customer.id,
        items=cart,
        subtotal=amount,
        discount=discount,
        to_pay=to_pay,
        type=settlement_type,
        payment_method=payment_method,
        date=clock().strftime(ORDER_DATE_FORMAT),
    )

    with store.transaction():
        committed = update_user(store, customer)
        create_document(store, ORDERS, order)
        clear_cart(store, customer.id)

    logger.info(
        "Order %s settled for user %s: type=%s subtotal=%s discount=%s to_pay=%s",
        order.id, customer.id, settlement_type, amount, discount, to_pay,
    )
    return Settlement(order=order, user=committed)


def format_amount(value: float) -> str:
    value = round(float(value), 2)
    return str(int(value)) if value.is_integer() else str(value)


def confirmation_message(order: Order) -> str:
    message = f"{order.type.upper()} order placed! Amount to pay: ₹ {format_amount(order.to_pay)}"
    if order.discount:
        message += f" (₹{format_amount(order.discount)} from reward points)"
    return message


def load_orders(store: RecordStore) -> List[Order]:
    return [Order.model_validate(r) for r in store.load_collection(ORDERS)]


def order_history(store: RecordStore, user_id: str) -> List[Order]:
    """The user's orders, newest first."""
    records = get_documents(store, ORDERS, {"user_id": user_id})
    return [Order.model_validate(r) for r in reversed(records)]


def orders_received(store: RecordStore, shopkeeper_id: str) -> List[Order]:
    """Orders with at least one line for one of the shopkeeper's products, newest first."""
    product_ids = {p.id for p in products_of(store, shopkeeper_id)}
    return [
        o for o in reversed(load_orders(store))
        if any(line.product_id in product_ids for line in o.items)
    ]
