"""
Mock authentication for user registration, login, and logout.
Accounts live in the local store; no credentials ever leave the device.
"""

import hashlib
import json
import uuid
from typing import Any, Dict, Optional

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from sareestage.config import logger
from sareestage.core.entitlements import EntitlementStore, UserIdentity
from sareestage.core.errors import AuthenticationError, PersistenceError
from sareestage.core.session import Session, User

ACCOUNTS_KEY = "sareestage_mock_accounts"
MIN_PASSWORD_LENGTH = 6
GOOGLE_EMAIL = "user@google.com"
GOOGLE_DISPLAY_NAME = "Google User"
ACCOUNTS_UNREADABLE_MESSAGE = (
    "Saved accounts are unreadable on this device. Please try again later."
)

_email_adapter = TypeAdapter(EmailStr)


def _hash_password(password: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode("utf-8")).hexdigest()


def _validate_credentials(email: str, password: str) -> str:
    try:
        normalized = _email_adapter.validate_python(email)
    except PydanticValidationError:
        raise AuthenticationError()
    if len(password) < MIN_PASSWORD_LENGTH:
        raise AuthenticationError()
    return str(normalized).lower()


class AuthService:
    """Stand-in for a hosted auth provider, returning opaque user ids."""

    def __init__(self, session: Session, entitlements: EntitlementStore):
        self.session = session
        self.entitlements = entitlements

    def _accounts(self) -> Dict[str, Dict[str, Any]]:
        raw = self.session.store.get(ACCOUNTS_KEY)
        if not raw:
            return {}
        try:
            accounts = json.loads(raw)
        except ValueError as exc:
            logger.error(f"Mock account registry is corrupt: {exc}")
            raise PersistenceError(ACCOUNTS_UNREADABLE_MESSAGE) from exc
        if not isinstance(accounts, dict):
            logger.error("Mock account registry is not a JSON object")
            raise PersistenceError(ACCOUNTS_UNREADABLE_MESSAGE)
        return accounts

    def _save_accounts(self, accounts: Dict[str, Dict[str, Any]]) -> None:
        self.session.store.set(ACCOUNTS_KEY, json.dumps(accounts))

    async def signup_with_email(self, email: str, password: str) -> User:
        """
        Create a new account and sign it in.

        Raises:
            AuthenticationError: If the credentials are malformed or the email is taken
        """
        normalized = _validate_credentials(email, password)
        accounts = self._accounts()
        if normalized in accounts:
            logger.warning(f"Signup attempted for existing account: {normalized}")
            raise AuthenticationError("Email already registered")

        salt = uuid.uuid4().hex
        uid = f"mock-uid-{uuid.uuid4().hex}"
        accounts[normalized] = {
            "uid": uid,
            "salt": salt,
            "password_hash": _hash_password(password, salt),
        }
        self._save_accounts(accounts)

        # New accounts start on the free tier with no credits
        self.entitlements.get_balance(UserIdentity(id=uid, is_guest=False))

        user = User(uid=uid, email=normalized)
        self.session.sign_in(user)
        logger.info(f"Successfully created user with ID: {uid}")
        return user

    async def login_with_email(self, email: str, password: str) -> User:
        normalized = _validate_credentials(email, password)
        account = self._accounts().get(normalized)
        if not account or account.get("password_hash") != _hash_password(
            password, account.get("salt", "")
        ):
            logger.warning(f"Authentication failed for user: {normalized}")
            raise AuthenticationError("Invalid email or password.")

        user = User(uid=account["uid"], email=normalized)
        self.session.sign_in(user)
        logger.info(f"Successfully authenticated user: {normalized}")
        return user

    async def login_with_google(self) -> User:
        """Simulate a completed Google OAuth popup for a fixed mock account."""
        accounts = self._accounts()
        account = accounts.get(GOOGLE_EMAIL)
        if account is None:
            account = {"uid": f"mock-google-uid-{uuid.uuid4().hex}", "provider": "google"}
            accounts[GOOGLE_EMAIL] = account
            self._save_accounts(accounts)

        identity = UserIdentity(id=account["uid"], is_guest=False)
        if not self.entitlements.has_record(identity):
            self.entitlements.get_balance(identity)

        user = User(uid=account["uid"], email=GOOGLE_EMAIL, display_name=GOOGLE_DISPLAY_NAME)
        self.session.sign_in(user)
        return user

    async def logout(self) -> None:
        self.session.sign_out()

    def get_current_user(self) -> Optional[User]:
        return self.session.current_user


__all__ = ["AuthService", "ACCOUNTS_KEY", "MIN_PASSWORD_LENGTH"]
