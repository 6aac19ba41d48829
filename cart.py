"""
Per-user cart: line items keyed by product id.

The functions below return new lists and never mutate their input, so a
cart read from the store stays untouched until it is saved back.
"""

from typing import List

from database import RecordStore, cart_key
from schemas import CartLine, Product


def add_item(cart: List[CartLine], product: Product) -> List[CartLine]:
    for i, line in enumerate(cart):
        if line.product_id == product.id:
            updated = list(cart)
            updated[i] = line.model_copy(update={"quantity": line.quantity + 1})
            return updated
    return cart + [CartLine(product_id=product.id, name=product.name, price=product.price, quantity=1)]


def adjust_quantity(cart: List[CartLine], product_id: str, delta: int) -> List[CartLine]:
    """Apply `delta` to one line; lines that drop to zero or below are removed."""
    updated = []
    for line in cart:
        if line.product_id == product_id:
            quantity = line.quantity + delta
            if quantity <= 0:
                continue
            line = line.model_copy(update={"quantity": quantity})
        updated.append(line)
    return updated


def subtotal(cart: List[CartLine]) -> float:
    return sum(line.price * line.quantity for line in cart)


def item_count(cart: List[CartLine]) -> int:
    return sum(line.quantity for line in cart)


def load_cart(store: RecordStore, user_id: str) -> List[CartLine]:
    return [CartLine.model_validate(r) for r in store.load_collection(cart_key(user_id))]


def save_cart(store: RecordStore, user_id: str, cart: List[CartLine]) -> None:
    store.save_collection(cart_key(user_id), [line.model_dump() for line in cart])


def clear_cart(store: RecordStore, user_id: str) -> None:
    save_cart(store, user_id, [])
