"""Mock account store: email -> user profile, plus the active-session pointer."""

from __future__ import annotations

import logging

from pydantic import ValidationError

from cv_match.errors import AccountExistsError, StorageCorruption
from cv_match.models.account import User
from cv_match.storage.kv_store import KeyValueStore, decode_json

logger = logging.getLogger(__name__)

USER_KEY_PREFIX = "cv_analyzer_user_"
ACTIVE_USER_KEY = "cv_analyzer_active_user"


class AccountStore:
    """Stores user records and the single active-session pointer.

    There is no password check; accounts exist only so history can be
    partitioned per user.
    """

    def __init__(
        self,
        kv: KeyValueStore,
        *,
        user_prefix: str = USER_KEY_PREFIX,
        active_user_key: str = ACTIVE_USER_KEY,
    ):
        self.kv = kv
        self.user_prefix = user_prefix
        self.active_user_key = active_user_key

    def _user_key(self, email: str) -> str:
        return self.user_prefix + email

    def _read_user(self, key: str) -> User | None:
        raw = self.kv.get(key)
        if raw is None:
            return None
        try:
            return User.model_validate(decode_json(key, raw))
        except (StorageCorruption, ValidationError):
            logger.warning("Ignoring corrupt user record under %s", key)
            return None

    def _activate(self, user: User) -> None:
        self.kv.set(self.active_user_key, user.model_dump_json(by_alias=True))

    def exists(self, email: str) -> bool:
        return self._read_user(self._user_key(email)) is not None

    def login(self, email: str) -> User | None:
        """Activate and return the user for ``email``; None if no such account."""
        user = self._read_user(self._user_key(email))
        if user is None:
            return None
        self._activate(user)
        logger.info("Logged in %s", email)
        return user

    def signup(self, email: str, name: str) -> User:
        """Create (or overwrite) the account for ``email`` and activate it."""
        user = User(email=email, name=name)
        self.kv.set(self._user_key(email), user.model_dump_json(by_alias=True))
        self._activate(user)
        logger.info("Signed up %s", email)
        return user

    def register(self, email: str, name: str) -> User:
        """Like signup, but refuses to replace an existing account."""
        if self.exists(email):
            raise AccountExistsError(email)
        return self.signup(email, name)

    def logout(self) -> None:
        """Clear the active-session pointer. User records are kept."""
        self.kv.delete(self.active_user_key)

    def get_current_user(self) -> User | None:
        return self._read_user(self.active_user_key)
