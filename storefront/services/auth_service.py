"""
Account use cases: registration, login, logout and staff user management.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from storefront.core.security import hash_password, verify_password
from storefront.db.models import User
from storefront.domain import accounts
from storefront.repositories.sql_repository import SQLRepository
from storefront.services.session_service import Shopper, delete_session, issue_session

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Base class for authentication-related exceptions."""


class RegistrationError(AuthError):
    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AccountExistsError(AuthError):
    pass


class InvalidCredentialsError(AuthError):
    pass


class UserNotFoundError(AuthError):
    pass


@dataclass
class LoginSuccess:
    user: User
    session_token: str


def user_to_dict(user: User) -> dict:
    return {"id": user.id, "username": user.username, "role": user.role}


@dataclass
class AuthService:
    """Handles registration, login and logout flows."""

    def __post_init__(self):
        self.repository = SQLRepository()

    def register(self, username: str, password: str) -> LoginSuccess:
        name = accounts.normalize_username(username)
        if not accounts.is_valid_username(name):
            raise RegistrationError("Invalid username. Use 3-30 characters [a-z0-9_.-]")
        if len(password or "") < accounts.MIN_PASSWORD_LENGTH:
            raise RegistrationError(
                f"Password too short. Use at least {accounts.MIN_PASSWORD_LENGTH} characters"
            )
        if self.repository.get_user_by_username(name):
            raise AccountExistsError("Username already taken")
        user = self.repository.create_user(name, hash_password(password), accounts.ROLE_CUSTOMER)
        logger.info("Registered user %s", user.id)
        return LoginSuccess(user=user, session_token=issue_session(user.id))

    def authenticate(self, username: str, password: str) -> User:
        user = self.repository.get_user_by_username(accounts.normalize_username(username))
        if not user or not verify_password(password or "", user.password_hash):
            raise InvalidCredentialsError("Invalid username or password")
        return user

    def login(self, username: str, password: str) -> LoginSuccess:
        user = self.authenticate(username, password)
        return LoginSuccess(user=user, session_token=issue_session(user.id))

    def logout(self, token: str | None) -> None:
        if token:
            delete_session(token)

    def _checked_account(self, username: str, password: str, role: str) -> str:
        """Validate a staff-provisioned account (no reserved-name rule). Returns the username."""
        name = accounts.normalize_username(username)
        if role not in accounts.ROLES:
            raise RegistrationError(f"Unknown role: {role}")
        if not accounts.USERNAME_PATTERN.fullmatch(name):
            raise RegistrationError("Invalid username. Use 3-30 characters [a-z0-9_.-]")
        if len(password or "") < accounts.MIN_PASSWORD_LENGTH:
            raise RegistrationError(
                f"Password too short. Use at least {accounts.MIN_PASSWORD_LENGTH} characters"
            )
        return name

    def create_staff(self, username: str, password: str, role: str) -> User:
        """Provision a staff account, promoting it when the name already exists."""
        name = self._checked_account(username, password, role)
        existing = self.repository.get_user_by_username(name)
        if existing:
            self.repository.update_user_role(existing.id, role)
            self.repository.update_user_password(existing.id, hash_password(password))
            return self.repository.get_user(existing.id)
        return self.repository.create_user(name, hash_password(password), role)

    # -------------------------- user management --------------------------
    def list_users(self) -> list[User]:
        return self.repository.list_users()

    def add_user(self, username: str, password: str, role: str) -> User:
        name = self._checked_account(username, password, role)
        if self.repository.get_user_by_username(name):
            raise AccountExistsError("Username already taken")
        user = self.repository.create_user(name, hash_password(password), role)
        logger.info("User %s created with role %s", user.id, role)
        return user

    def change_role(self, actor: User, user_id: int, role: str) -> User:
        if role not in accounts.ROLES:
            raise RegistrationError(f"Unknown role: {role}")
        if actor.id == user_id:
            raise RegistrationError("You cannot change your own role")
        if not self.repository.get_user(user_id):
            raise UserNotFoundError("User not found")
        self.repository.update_user_role(user_id, role)
        logger.info("User %s role set to %s by %s", user_id, role, actor.id)
        return self.repository.get_user(user_id)

    def remove_user(self, actor: User, user_id: int) -> None:
        if actor.id == user_id:
            raise RegistrationError("You cannot remove your own account")
        if not self.repository.delete_user(user_id, Shopper(user_id=user_id).owner_key):
            raise UserNotFoundError("User not found")
        logger.info("User %s removed by %s", user_id, actor.id)
