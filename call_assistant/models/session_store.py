"""
In-memory session store for active calls.

This module provides the SessionStore class which tracks one Session per active
call, keyed by the Twilio call identifier. The store handles the session lifecycle:
sessions are created the first time a call id is seen, removed when the call
reaches a terminal status, and swept away by a background task once they have
been idle longer than the configured threshold.

The store lives in a single process and is not shared between server instances.
Every operation is synchronous, so each one is atomic with respect to the asyncio
event loop that runs the webhook handlers and the sweep task.
"""

import asyncio
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional

from call_assistant.config.constants import (
    DEFAULT_MAX_CONVERSATION_LENGTH,
    DEFAULT_SESSION_IDLE_SECONDS,
    DEFAULT_SESSION_SWEEP_SECONDS,
    LOGGER_NAME,
)
from call_assistant.errors import SessionNotFound
from call_assistant.models.session import Session, SessionSummary, utc_now

logger = logging.getLogger(LOGGER_NAME)


class SessionStore:
    """
    Registry of sessions for the calls currently in progress.

    Sessions are only removed by end() (terminal call status) or by sweep()
    (idle expiry); nothing else deletes them.
    """

    def __init__(
        self,
        max_history: int = DEFAULT_MAX_CONVERSATION_LENGTH,
        idle_threshold_seconds: float = DEFAULT_SESSION_IDLE_SECONDS,
        sweep_interval_seconds: float = DEFAULT_SESSION_SWEEP_SECONDS,
    ):
        self.max_history = max_history
        self.idle_threshold_seconds = idle_threshold_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self.sessions: Dict[str, Session] = {}
        self._sweep_task: Optional[asyncio.Task] = None

    def __len__(self) -> int:
        return len(self.sessions)

    def __contains__(self, call_id: str) -> bool:
        return call_id in self.sessions

    def get_or_create(self, call_id: str) -> Session:
        """
        Return the session for a call, creating it if this call id is new.

        Args:
            call_id: Twilio call identifier

        Returns:
            The existing session with a refreshed activity timestamp, or a new one
        """
        session = self.sessions.get(call_id)
        if session is None:
            session = Session(id=call_id, max_history=self.max_history)
            self.sessions[call_id] = session
            logger.info(f"Session created for call: {call_id}")
        else:
            session.touch()
        return session

    def get(self, call_id: str) -> Optional[Session]:
        """Return the session for a call without refreshing it, or None."""
        return self.sessions.get(call_id)

    def require(self, call_id: str) -> Session:
        """
        Return the session for a call without refreshing it.

        Raises:
            SessionNotFound: If no session exists for the call id
        """
        session = self.sessions.get(call_id)
        if session is None:
            raise SessionNotFound(f"No active session for {call_id}")
        return session

    def end(self, call_id: str) -> Optional[Session]:
        """
        Remove the session for a call. Ending an unknown call is a no-op.

        Args:
            call_id: Twilio call identifier

        Returns:
            The removed session, or None if there was none
        """
        session = self.sessions.pop(call_id, None)
        if session is None:
            return None

        metrics = session.metrics
        logger.info(
            f"Session ended for call: {call_id} "
            f"(duration={session.duration_seconds()}s, turns={metrics.turn_count}, "
            f"avg_response={metrics.average_response_time_ms:.0f}ms, "
            f"errors={metrics.error_count})"
        )
        return session

    def sweep(
        self,
        now: Optional[datetime] = None,
        idle_threshold_seconds: Optional[float] = None,
    ) -> int:
        """
        Remove sessions idle for longer than the threshold.

        Args:
            now: Reference time, defaults to the current UTC time
            idle_threshold_seconds: Overrides the store's configured threshold

        Returns:
            Number of sessions removed
        """
        now = now or utc_now()
        threshold = (
            self.idle_threshold_seconds
            if idle_threshold_seconds is None
            else idle_threshold_seconds
        )
        cutoff = now - timedelta(seconds=threshold)

        expired = [
            call_id
            for call_id, session in self.sessions.items()
            if session.last_activity_at < cutoff
        ]
        for call_id in expired:
            del self.sessions[call_id]

        if expired:
            logger.info(f"Cleaned up {len(expired)} idle conversation sessions")
        return len(expired)

    def active_sessions(self) -> List[SessionSummary]:
        """Summaries of every active session, for monitoring."""
        now = utc_now()
        return [session.summary(now) for session in self.sessions.values()]

    async def start(self) -> None:
        """Start the background idle sweep."""
        if self._sweep_task and not self._sweep_task.done():
            return
        self._sweep_task = asyncio.create_task(self._sweep_loop())
        logger.info(
            f"Session sweep started (every {self.sweep_interval_seconds:.0f}s, "
            f"idle threshold {self.idle_threshold_seconds:.0f}s)"
        )

    async def stop(self) -> None:
        """Stop the background idle sweep."""
        if not self._sweep_task:
            return
        self._sweep_task.cancel()
        try:
            await self._sweep_task
        except asyncio.CancelledError:
            logger.debug("Session sweep task cancelled")
        self._sweep_task = None
        logger.info("Session sweep stopped")

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            try:
                self.sweep()
            except Exception as e:
                logger.error(f"Error during session sweep: {e}", exc_info=True)
