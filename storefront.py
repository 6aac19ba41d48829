"""
Command and query surface used by the display layer.

Every method returns a CommandResult. Errors from the core are caught here
and reported as `ok=False` with a message for the user, so nothing raised by
the core crosses this boundary.
"""

import functools
import logging
from typing import Optional

import accounts
import cart
import catalog
import settlement
from errors import NotFoundError, StoreError
from khata import khata_eligible, khata_note, on_threshold_crossed
from loyalty import redeemable_discount
from schemas import ALL_CATEGORIES, CATEGORIES, CartSummary, CommandResult, CustomerAccount
from session import StoreSession

logger = logging.getLogger(__name__)

EMPTY_CART_NOTE = "Add items to place prepaid or khata orders."


def command(method):
    @functools.wraps(method)
    def wrapper(self, *args, **kwargs):
        try:
            return method(self, *args, **kwargs)
        except StoreError as e:
            logger.warning("%s rejected (%s): %s", method.__name__, e.code, e.message)
            return CommandResult(ok=False, message=e.message, code=e.code)
    return wrapper


class Storefront:
    def __init__(self, session: StoreSession):
        self.session = session

    @property
    def store(self):
        return self.session.store

    # Accounts

    @command
    def create_user(self, name: str, email: str, password: str, role: str) -> CommandResult:
        user = accounts.create_user(self.store, name, email, password, role)
        return CommandResult(ok=True, message="Account created!", data=user)

    @command
    def authenticate(self, email: str, password: str, role: str) -> CommandResult:
        user = self.session.login(email, password, role)
        return CommandResult(ok=True, message=f"Welcome, {user.name}!", data=user)

    @command
    def logout(self) -> CommandResult:
        self.session.logout()
        return CommandResult(ok=True, message="Logged out.")

    @command
    def current_user(self) -> CommandResult:
        """The logged-in user; a customer's khata unlock is reconciled on load."""
        user = self.session.require_user()
        if isinstance(user, CustomerAccount):
            reconciled = user.model_copy()
            if on_threshold_crossed(reconciled):
                user = accounts.update_user(self.store, reconciled)
        return CommandResult(ok=True, data=user)

    # Catalog

    @command
    def categories(self) -> CommandResult:
        return CommandResult(ok=True, data=[ALL_CATEGORIES] + CATEGORIES)

    @command
    def products(self, category: Optional[str] = ALL_CATEGORIES, search: Optional[str] = None) -> CommandResult:
        listings = catalog.list_products(self.store, category, search)
        return CommandResult(ok=True, message="" if listings else "No products found.", data=listings)

    @command
    def add_product(self, name: str, price, image_url: Optional[str] = None,
                    category: Optional[str] = None) -> CommandResult:
        owner = self.session.require_shopkeeper()
        product = catalog.add_product(self.store, owner, name, price, image_url, category)
        return CommandResult(ok=True, message="Product added!", data=product)

    @command
    def my_products(self) -> CommandResult:
        owner = self.session.require_shopkeeper()
        return CommandResult(ok=True, data=catalog.products_of(self.store, owner.id))

    @command
    def set_store_status(self, status: str) -> CommandResult:
        owner = self.session.require_shopkeeper()
        owner = accounts.set_store_status(self.store, owner, status)
        return CommandResult(ok=True, message=f"Store is now {owner.store_status}.", data=owner)

    # Cart

    @command
    def add_to_cart(self, product_id: str) -> CommandResult:
        user = self.session.require_customer()
        product = catalog.get_product(self.store, product_id)
        if product is None:
            raise NotFoundError(f"Product {product_id} not found.")
        lines = cart.add_item(cart.load_cart(self.store, user.id), product)
        cart.save_cart(self.store, user.id, lines)
        return CommandResult(ok=True, message=f"Added {product.name}.", data=lines)

    @command
    def adjust_cart_quantity(self, product_id: str, delta: int) -> CommandResult:
        user = self.session.require_customer()
        lines = cart.adjust_quantity(cart.load_cart(self.store, user.id), product_id, delta)
        cart.save_cart(self.store, user.id, lines)
        return CommandResult(ok=True, data=lines)

    @command
    def cart_summary(self, use_rewards: bool = False) -> CommandResult:
        user = self.session.require_customer()
        lines = cart.load_cart(self.store, user.id)
        if not lines:
            return CommandResult(ok=True, data=CartSummary(khata_note=EMPTY_CART_NOTE))
        amount = cart.subtotal(lines)
        discount = redeemable_discount(amount, user.reward_points) if use_rewards else 0
        summary = CartSummary(
            items=lines,
            subtotal=amount,
            item_count=cart.item_count(lines),
            discount=discount,
            total=amount - discount,
            khata_available=khata_eligible(user),
            khata_note=khata_note(user),
        )
        return CommandResult(ok=True, data=summary)

    # Orders

    @command
    def settle(self, settlement_type: str, use_rewards: bool = False,
               payment_method: Optional[str] = None) -> CommandResult:
        user = self.session.require_customer()
        result = settlement.settle(
            self.store, user, settlement_type, use_rewards, payment_method, clock=self.session.clock,
        )
        return CommandResult(
            ok=True,
            message=settlement.confirmation_message(result.order),
            data=result.order,
        )

    @command
    def order_history(self) -> CommandResult:
        user = self.session.require_customer()
        return CommandResult(ok=True, data=settlement.order_history(self.store, user.id))

    @command
    def orders_received(self) -> CommandResult:
        owner = self.session.require_shopkeeper()
        return CommandResult(ok=True, data=settlement.orders_received(self.store, owner.id))
