"""
admin.py — Keyword login for the token-management console.

The gate works on any mutable mapping used as a session store: Starlette's
`request.session` in the API, a dict kept in `st.session_state` in the UI.

States:
  LoggedOut --login(keyword)--> LoggedIn   (session regenerated, is_admin=True)
  LoggedIn  --logout()--------> LoggedOut  (session cleared entirely)
"""

from __future__ import annotations

import hmac
import logging
import secrets
import time
from dataclasses import dataclass
from typing import Any, MutableMapping, Optional

from .config import Settings
from .errors import AuthError, ForbiddenError

logger = logging.getLogger(__name__)

SessionStore = MutableMapping[str, Any]


@dataclass(frozen=True)
class AdminCapability:
    """Proof of an admin session; every admin-only token operation takes one."""
    session_id: str
    issued_at: float


class AdminGate:
    def __init__(self, settings: Settings):
        self.settings = settings

    def _keyword_matches(self, keyword: Any) -> bool:
        expected = self.settings.admin_keyword
        if not expected or not isinstance(keyword, str) or not keyword:
            return False
        return hmac.compare_digest(keyword.encode("utf-8"), expected.encode("utf-8"))

    def login(self, session: SessionStore, keyword: Any) -> AdminCapability:
        if not self._keyword_matches(keyword):
            logger.warning("Rejected admin login attempt")
            raise AuthError("Invalid keyword")

        # Drop whatever the anonymous session carried before granting admin
        session.clear()
        sid = secrets.token_urlsafe(24)
        now = time.time()
        session["is_admin"] = True
        session["sid"] = sid
        session["admin_login_time"] = now

        logger.info("Admin session %s established", sid[:8])
        return AdminCapability(session_id=sid, issued_at=now)

    def logout(self, session: SessionStore) -> None:
        sid = session.get("sid")
        session.clear()
        if sid:
            logger.info("Admin session %s closed", sid[:8])

    def is_admin(self, session: SessionStore) -> bool:
        return session.get("is_admin") is True and bool(session.get("sid"))

    def capability(self, session: SessionStore) -> Optional[AdminCapability]:
        if not self.is_admin(session):
            return None
        return AdminCapability(
            session_id=session["sid"],
            issued_at=float(session.get("admin_login_time") or 0.0),
        )

    def require(self, session: SessionStore) -> AdminCapability:
        cap = self.capability(session)
        if cap is None:
            raise ForbiddenError("Admin access required")
        return cap
