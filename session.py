"""
StoreSession holds who is logged in for one client, instead of a single
process-wide "current user". Several sessions can share one record store.
"""

import logging
from datetime import datetime
from typing import Callable, Optional

from accounts import authenticate, get_user
from database import RecordStore
from errors import NotLoggedInError, RoleError
from schemas import CustomerAccount, ShopkeeperAccount, User

logger = logging.getLogger(__name__)


class StoreSession:
    def __init__(
        self,
        store: RecordStore,
        user_id: Optional[str] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.store = store
        self.user_id = user_id
        self.clock = clock

    def login(self, email: str, password: str, role: str) -> User:
        user = authenticate(self.store, email, password, role)
        self.user_id = user.id
        return user

    def logout(self) -> None:
        logger.info("User %s logged out", self.user_id)
        self.user_id = None

    def current_user(self) -> Optional[User]:
        return get_user(self.store, self.user_id)

    def require_user(self) -> User:
        user = self.current_user()
        if user is None:
            raise NotLoggedInError("Please log in first.")
        return user

    def require_customer(self) -> CustomerAccount:
        user = self.require_user()
        if not isinstance(user, CustomerAccount):
            raise RoleError("Only customers can do this.")
        return user

    def require_shopkeeper(self) -> ShopkeeperAccount:
        user = self.require_user()
        if not isinstance(user, ShopkeeperAccount):
            raise RoleError("Only shopkeepers can do this.")
        return user
