"""User accounts: sign-up, profile updates, password changes, deletion"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from inkwell.config.database import in_identifier_range
from inkwell.errors import FieldErrors, RecordInvalid, RecordNotFound
from inkwell.models.user import HANDLE_MAX, User
from inkwell.services.passwords import hash_password, verify_password

logger = logging.getLogger(__name__)

PASSWORD_MAX = 72

PW_MISMATCH = "New password and confirm password do not match"
ORIGINAL_PW_INCORRECT = "Current password was incorrect. Enter current password to change it to new password."


class UserService:
    """Account operations on `users`"""

    def __init__(self, db: Session):
        self.db = db

    def list_users(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    def get(self, user_id: int, *, with_articles: bool = False) -> User:
        if not in_identifier_range(user_id):
            raise RecordNotFound("User", user_id)
        query = self.db.query(User).filter(User.id == user_id)
        if with_articles:
            query = query.options(selectinload(User.articles))
        user = query.first()
        if user is None:
            raise RecordNotFound("User", user_id)
        return user

    def find_by_handle(self, handle: str) -> Optional[User]:
        return self.db.query(User).filter(User.handle == handle.strip()).first()

    def authenticate(self, user: Optional[User], password: Optional[str]) -> Optional[User]:
        """Return the user when the password matches, otherwise None"""
        if user is not None and verify_password(user.password_hash, password):
            return user
        return None

    def register(self, handle: str, password: str, *, admin: bool = False) -> User:
        errors = self._handle_errors(handle)
        errors.merge(self._password_errors(password))
        if errors:
            raise RecordInvalid(errors)

        user = User(handle=handle, password_hash=hash_password(password), admin=admin)
        self.db.add(user)
        self._commit(user)
        logger.info(f"Registered user {user.handle} ({user.id})")
        return user

    def update_profile(
        self,
        user: User,
        *,
        handle: Optional[str] = None,
        profile_picture: Optional[str] = None,
    ) -> User:
        """Only the handle and profile picture are user-editable"""
        if handle is not None:
            errors = self._handle_errors(handle, current=user)
            if errors:
                raise RecordInvalid(errors)
            user.handle = handle
        if profile_picture is not None:
            user.profile_picture = profile_picture
        self._commit(user)
        logger.info(f"Updated user {user.id}")
        return user

    def change_password(self, user: User, *, current: str, new: str, confirm: str) -> User:
        """
        Change a password after re-checking the current one

        The new/confirm comparison happens first, so a mismatch never
        touches the stored credential.

        Raises:
            RecordInvalid: mismatch, wrong current password or invalid new password
        """
        if new != confirm:
            raise RecordInvalid({"confirm": [PW_MISMATCH]}, PW_MISMATCH)

        if self.authenticate(user, current) is None:
            logger.warning(f"Password change for user {user.id} failed: wrong current password")
            raise RecordInvalid({"current": [ORIGINAL_PW_INCORRECT]}, ORIGINAL_PW_INCORRECT)

        errors = self._password_errors(new)
        if errors:
            raise RecordInvalid(errors)

        user.password_hash = hash_password(new)
        self._commit(user)
        logger.info(f"Changed password for user {user.id}")
        return user

    def destroy(self, user: User) -> None:
        # Loading the collection lets the ORM null out author_id on each article
        orphaned = len(user.articles)
        self.db.delete(user)
        self.db.commit()
        logger.info(f"Deleted user {user.id}; {orphaned} articles left without author")

    def _handle_errors(self, handle: Optional[str], current: Optional[User] = None) -> FieldErrors:
        errors = FieldErrors()
        handle = (handle or "").strip()
        if not handle:
            errors.add("handle", "can't be blank")
            return errors
        if len(handle) > HANDLE_MAX:
            errors.add("handle", f"is too long (maximum is {HANDLE_MAX} characters)")
        existing = self.find_by_handle(handle)
        if existing is not None and (current is None or existing.id != current.id):
            errors.add("handle", "has already been taken")
        return errors

    @staticmethod
    def _password_errors(password: Optional[str]) -> FieldErrors:
        errors = FieldErrors()
        if not password:
            errors.add("password", "can't be blank")
        elif len(password.encode("utf-8")) > PASSWORD_MAX:
            errors.add("password", f"is too long (maximum is {PASSWORD_MAX} bytes)")
        return errors

    def _commit(self, user: User) -> None:
        try:
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            logger.warning(f"User {user.handle!r} save hit integrity error: {exc.orig}")
            raise RecordInvalid({"handle": ["has already been taken"]}) from exc
