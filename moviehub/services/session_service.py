"""
Session Service - single source of truth for "may this action proceed"

SessionContext owns the in-memory session and is the only writer of the
durable record; SessionGate answers authentication questions on top of it.
Both are constructed once and shared by reference.
"""
from enum import Enum
from typing import Optional
import json
import logging

from pydantic import ValidationError

from moviehub.errors import AuthenticationRequired
from moviehub.schemas.auth import UserSession
from moviehub.services.storage_service import KeyValueStore

logger = logging.getLogger(__name__)

SESSION_KEY = "userData"
LOGIN_RECOVERY = "navigate_to_login"


class SessionState(str, Enum):
    UNKNOWN = "unknown"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class SessionContext:
    """Holds the current session; reads the durable store once on cold start."""

    def __init__(self, store: KeyValueStore):
        self._store = store
        self._session: Optional[UserSession] = None
        self._state = SessionState.UNKNOWN

    @property
    def state(self) -> SessionState:
        return self._state

    def current(self) -> Optional[UserSession]:
        """The active session, or None when anonymous or not yet loaded"""
        return self._session

    async def load(self) -> SessionState:
        """Read the durable record and settle on Authenticated or Anonymous."""
        raw = await self._store.get_item(SESSION_KEY)
        session = None
        if raw:
            try:
                session = UserSession.model_validate(json.loads(raw))
            except (ValueError, ValidationError) as e:
                logger.warning(f"Ignoring unreadable session record: {str(e)}")

        if session is not None and session.is_complete:
            self._session = session
            self._state = SessionState.AUTHENTICATED
        else:
            self._session = None
            self._state = SessionState.ANONYMOUS
        logger.debug(f"Session loaded: {self._state.value}")
        return self._state

    async def set_session(self, session: UserSession) -> None:
        """Persist a session created by login or registration."""
        await self._store.set_item(SESSION_KEY, session.model_dump_json())
        self._session = session
        self._state = SessionState.AUTHENTICATED if session.is_complete else SessionState.ANONYMOUS
        logger.info(f"Session started for user {session.id}")

    async def clear(self) -> None:
        """Destroy the session (logout, rejected token)."""
        await self._store.remove_item(SESSION_KEY)
        if self._session is not None:
            logger.info(f"Session cleared for user {self._session.id}")
        self._session = None
        self._state = SessionState.ANONYMOUS


class SessionGate:
    """
    Reports authentication state to callers. It never prompts; callers decide
    how to present AuthenticationRequired and its recovery action.
    """

    def __init__(self, context: SessionContext):
        self._context = context

    async def state(self) -> SessionState:
        if self._context.state == SessionState.UNKNOWN:
            return await self._context.load()
        return self._context.state

    async def is_authenticated(self) -> bool:
        return await self.state() == SessionState.AUTHENTICATED

    async def current_session(self) -> Optional[UserSession]:
        await self.state()
        return self._context.current()

    async def require(self, action: str) -> UserSession:
        """
        Return the active session for a gated action.

        Raises:
            AuthenticationRequired: If no complete session exists
        """
        if await self.state() != SessionState.AUTHENTICATED:
            logger.info(f"Blocked '{action}': no active session")
            raise AuthenticationRequired(action, recovery_action=LOGIN_RECOVERY)
        return self._context.current()
