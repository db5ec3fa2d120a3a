"""End-user unlock: a token grants access to the reading experience."""

from __future__ import annotations

import logging
from typing import Any

from .errors import AuthError, ValidationError
from .tokens import TokenService, mask_token

logger = logging.getLogger(__name__)


def attempt_unlock(tokens: TokenService, token: Any) -> None:
    """
    Validate an end-user token. Returns None on success.

    The server keeps no state for a successful unlock; remembering it is
    the client's job. Raises ValidationError for a missing/blank token and
    AuthError for one that was never issued.
    """
    if not isinstance(token, str) or not token.strip():
        raise ValidationError("Token is required")

    if not tokens.redeem_token(token):
        logger.info("Unlock refused for token %s", mask_token(token))
        raise AuthError("Invalid token")
