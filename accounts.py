"""
User records: signup, login matching and commit-then-refresh updates.
"""

import logging
from typing import List, Optional

from database import USERS, RecordStore, create_document, find_document, new_id, replace_document
from errors import AuthenticationError, DuplicateAccountError, NotFoundError, ValidationError
from schemas import ROLES, STORE_STATUSES, CustomerAccount, ShopkeeperAccount, User, user_adapter

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


def load_users(store: RecordStore) -> List[User]:
    return [user_adapter.validate_python(r) for r in store.load_collection(USERS)]


def get_user(store: RecordStore, user_id: Optional[str]) -> Optional[User]:
    if not user_id:
        return None
    record = find_document(store, USERS, user_id)
    return user_adapter.validate_python(record) if record else None


def _same_email(a: str, b: str) -> bool:
    return a.lower() == b.lower()


def create_user(store: RecordStore, name: str, email: str, password: str, role: str) -> User:
    name, email, password = (name or "").strip(), (email or "").strip(), (password or "").strip()
    if not name or not email or not password or not role:
        raise ValidationError("Please fill all fields.")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if role not in ROLES:
        raise ValidationError(f"Unknown role: {role}")

    for existing in load_users(store):
        if existing.role == role and _same_email(existing.email, email):
            raise DuplicateAccountError("Account already exists with this email and role.")

    if role == "customer":
        user = CustomerAccount(id=new_id(), name=name, email=email, password=password)
    else:
        user = ShopkeeperAccount(id=new_id(), name=name, email=email, password=password)
    create_document(store, USERS, user)
    logger.info("Created %s account %s", role, user.id)
    return user


def authenticate(store: RecordStore, email: str, password: str, role: str) -> User:
    email, password = (email or "").strip(), (password or "").strip()
    if not email or not password or not role:
        raise ValidationError("Please fill all fields.")
    for user in load_users(store):
        if user.role == role and user.password == password and _same_email(user.email, email):
            logger.info("User %s logged in as %s", user.id, role)
            return user
    raise AuthenticationError("Invalid email, password, or role.")


def update_user(store: RecordStore, user: User) -> User:
    """Replace the stored record by id and return the record as committed."""
    committed = replace_document(store, USERS, user)
    if committed is None:
        raise NotFoundError(f"User {user.id} not found.")
    return user_adapter.validate_python(committed)


def set_store_status(store: RecordStore, user: ShopkeeperAccount, status: str) -> ShopkeeperAccount:
    if status not in STORE_STATUSES:
        raise ValidationError(f"Store status must be one of: {', '.join(STORE_STATUSES)}.")
    committed = update_user(store, user.model_copy(update={"store_status": status}))
    logger.info("Store %s is now %s", user.id, status)
    return committed
