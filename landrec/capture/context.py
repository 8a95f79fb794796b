# landrec/capture/context.py
"""
Signed-in state shared by a capture session and a history browser.

``init`` runs after a successful identity exchange; ``teardown`` runs on
sign-out and closes every session registered while signed in.
"""

from typing import Optional

from loguru import logger

from landrec.errors import AuthError
from landrec.schemas.land import Identity


class AuthContext:

    def __init__(self):
        self.identity: Optional[Identity] = None
        self.access_token: Optional[str] = None
        self._sessions = []

    @property
    def signed_in(self) -> bool:
        return self.identity is not None

    def init(self, identity: Identity, access_token: str) -> None:
        if self.signed_in:
            self.teardown()
        self.identity = identity
        self.access_token = access_token
        logger.info(f"Signed in as {identity.email_or_handle or identity.id}")

    def sign_in(self, provider, access_token: str) -> Identity:
        """Exchange ``access_token`` with ``provider`` and init on success."""
        identity = provider.get_user(access_token)
        self.init(identity, access_token)
        return identity

    def teardown(self) -> None:
        for session in list(self._sessions):
            session.close()
        self._sessions.clear()
        if self.identity is not None:
            logger.info(f"Signed out {self.identity.email_or_handle or self.identity.id}")
        self.identity = None
        self.access_token = None

    def require_identity(self) -> Identity:
        if self.identity is None:
            raise AuthError("Not signed in")
        return self.identity

    def require_token(self) -> str:
        if not self.access_token:
            raise AuthError("Not signed in")
        return self.access_token

    def register(self, session) -> None:
        self._sessions.append(session)

    def unregister(self, session) -> None:
        if session in self._sessions:
            self._sessions.remove(session)
