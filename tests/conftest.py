"""Shared fixtures: a fresh in-memory store and logged-in sessions."""

from datetime import datetime

import pytest

import accounts
import catalog
from database import MemoryRecordStore
from session import StoreSession
from storefront import Storefront

FIXED_NOW = datetime(2024, 3, 9, 14, 5, 30)


@pytest.fixture
def store():
    return MemoryRecordStore()


@pytest.fixture
def shopkeeper(store):
    return accounts.create_user(store, "Ravi Stores", "ravi@example.com", "secret1", "shopkeeper")


@pytest.fixture
def customer(store):
    return accounts.create_user(store, "Asha", "asha@example.com", "secret1", "customer")


@pytest.fixture
def products(store, shopkeeper):
    return {
        "apple": catalog.add_product(store, shopkeeper, "Apple", 50, "", "Fruits"),
        "milk": catalog.add_product(store, shopkeeper, "Milk", 30, "http://img/milk.png", "Milk & Dairy"),
        "chips": catalog.add_product(store, shopkeeper, "Chips", 20, None, "Snacks"),
    }


@pytest.fixture
def customer_front(store, customer):
    return Storefront(StoreSession(store, customer.id, clock=lambda: FIXED_NOW))


@pytest.fixture
def shop_front(store, shopkeeper):
    return Storefront(StoreSession(store, shopkeeper.id, clock=lambda: FIXED_NOW))


@pytest.fixture
def set_customer(store, customer):
    """Overwrite stored customer fields and return the committed record."""
    def update(**fields):
        return accounts.update_user(store, customer.model_copy(update=fields))
    return update
