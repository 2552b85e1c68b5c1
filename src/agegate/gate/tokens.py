from __future__ import annotations

import secrets

from agegate.session.context import SessionContext

TOKEN_BYTES = 16


class TokenStore:
    """Single-use tokens bound to one session."""

    def __init__(self, session: SessionContext) -> None:
        self.session = session

    def issue(self) -> str:
        token = secrets.token_hex(TOKEN_BYTES)
        self.session.store.add_token(self.session.sid, token)
        return token

    def consume(self, token) -> bool:
        """True and removed iff the token was outstanding for this session."""
        if not isinstance(token, str) or not token:
            return False
        return self.session.store.discard_token(self.session.sid, token)
