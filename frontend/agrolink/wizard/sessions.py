"""In-process registry of open wizard sessions.

A session is one agronomist working on one draft. Drafts live only here:
they vanish on successful submit, on cancel, or once idle past the TTL.
Sessions are bound to a fingerprint of the bearer token that opened them,
so another caller guessing a session id gets a plain "not found".
"""

import hashlib
import logging
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable

from agrolink.config import settings
from agrolink.middleware.exceptions import SessionNotFoundError
from agrolink.wizard.controller import HarvestScheduleWizard

logger = logging.getLogger(__name__)


def token_fingerprint(token: str) -> str:
    return hashlib.sha256(token.encode()).hexdigest()


@dataclass
class WizardSession:
    wizard: HarvestScheduleWizard
    owner: str
    session_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    last_seen: float = 0.0


class WizardSessionStore:
    def __init__(
        self,
        ttl_seconds: float = settings.wizard_session_ttl_minutes * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._sessions: dict[str, WizardSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self, wizard: HarvestScheduleWizard, token: str) -> WizardSession:
        self.purge_expired()
        session = WizardSession(
            wizard=wizard,
            owner=token_fingerprint(token),
            last_seen=self.clock(),
        )
        self._sessions[session.session_id] = session
        logger.debug("Opened wizard session %s for harvest %s", session.session_id, wizard.harvest_id)
        return session

    def get(self, session_id: str, token: str) -> WizardSession:
        """Return a live session owned by `token`, refreshing its idle timer."""
        session = self._sessions.get(session_id)
        if session is None or session.owner != token_fingerprint(token):
            raise SessionNotFoundError(session_id)
        if self._expired(session):
            self.discard(session_id)
            raise SessionNotFoundError(session_id)
        session.last_seen = self.clock()
        return session

    def discard(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)

    def purge_expired(self) -> int:
        expired = [sid for sid, s in self._sessions.items() if self._expired(s)]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Dropped %d idle wizard sessions", len(expired))
        return len(expired)

    def _expired(self, session: WizardSession) -> bool:
        return self.clock() - session.last_seen > self.ttl_seconds


wizard_sessions = WizardSessionStore()


def get_session_store() -> WizardSessionStore:
    return wizard_sessions
