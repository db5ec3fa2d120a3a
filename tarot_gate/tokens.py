"""
tokens.py — Minting, redeeming and listing access tokens.

Tokens are multi-use: redemption only checks that the row exists and never
flips `used`. `mark_token_as_used` is kept for a possible single-use policy
but nothing calls it today.
"""

from __future__ import annotations

import logging
import secrets
import string
from typing import List

from sqlalchemy.exc import SQLAlchemyError

from .admin import AdminCapability
from .config import Settings
from .db import Database
from .errors import DependencyError, ForbiddenError, ValidationError
from .models import AccessToken

logger = logging.getLogger(__name__)

TOKEN_ALPHABET = string.ascii_letters + string.digits


def generate_token(length: int = 16) -> str:
    """Generate an opaque token from the 62-character alphanumeric alphabet."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


def mask_token(token: str) -> str:
    return f"{token[:4]}…" if len(token) > 4 else "…"


def _require_admin(admin: AdminCapability) -> None:
    if not isinstance(admin, AdminCapability):
        raise ForbiddenError("Admin access required")


class TokenService:
    def __init__(self, database: Database, settings: Settings):
        self.database = database
        self.settings = settings

    def _validate_count(self, count) -> int:
        # bool is an int subclass; True must not mint one token
        if isinstance(count, bool) or not isinstance(count, int):
            raise ValidationError("count must be an integer")
        if not 1 <= count <= self.settings.max_token_batch:
            raise ValidationError(
                f"count must be between 1 and {self.settings.max_token_batch}, got {count}"
            )
        return count

    def create_tokens(self, admin: AdminCapability, count: int) -> List[str]:
        """
        Mint `count` new tokens and persist them with used=False.

        The whole batch is written in one transaction, so either every token
        is stored and returned in creation order, or a DependencyError is raised.
        """
        _require_admin(admin)
        count = self._validate_count(count)

        values = [generate_token(self.settings.token_length) for _ in range(count)]
        try:
            with self.database.session() as db:
                db.add_all([AccessToken(token=v, used=False) for v in values])
                db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to store %d token(s): %s", count, e)
            raise DependencyError("Failed to generate tokens") from e

        logger.info("Created %d access token(s) for admin session %s", count, admin.session_id[:8])
        return values

    def create_token(self, admin: AdminCapability) -> str:
        return self.create_tokens(admin, 1)[0]

    def redeem_token(self, token: str) -> bool:
        """Return True when the token was ever issued, whatever its `used` flag."""
        try:
            with self.database.session() as db:
                row = db.query(AccessToken.id).filter(AccessToken.token == token).first()
        except SQLAlchemyError as e:
            logger.error("Token lookup failed: %s", e)
            raise DependencyError("Token store unavailable") from e

        return row is not None

    def list_unused_tokens(self, admin: AdminCapability) -> List[AccessToken]:
        _require_admin(admin)
        try:
            with self.database.session() as db:
                tokens: List[AccessToken] = (
                    db.query(AccessToken)
                    .filter(AccessToken.used.is_(False))
                    .order_by(AccessToken.created_at.desc(), AccessToken.id.desc())
                    .all()
                )
        except SQLAlchemyError as e:
            logger.error("Listing unused tokens failed: %s", e)
            raise DependencyError("Token store unavailable") from e

        return tokens

    def mark_token_as_used(self, token: str) -> bool:
        # Not called by the redemption path (tokens are multi-use for now).
        try:
            with self.database.session() as db:
                updated = (
                    db.query(AccessToken)
                    .filter(AccessToken.token == token)
                    .update({AccessToken.used: True})
                )
                db.commit()
        except SQLAlchemyError as e:
            logger.error("Marking token %s as used failed: %s", mask_token(token), e)
            raise DependencyError("Token store unavailable") from e

        return updated > 0
