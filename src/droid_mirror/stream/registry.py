"""Session registry - tracks live mirroring sessions."""

from __future__ import annotations

import structlog

from droid_mirror.stream.session import MirrorSession

logger = structlog.get_logger()


class SessionRegistry:
    """Keeps the set of running sessions for status and shutdown."""

    def __init__(self) -> None:
        self._sessions: dict[str, MirrorSession] = {}

    async def run(self, session: MirrorSession) -> None:
        """Run a session to completion while it is registered."""
        self._sessions[session.session_id] = session
        logger.info(
            "session_registered",
            session_id=session.session_id,
            device_id=session.device_id,
            active_sessions=len(self._sessions),
        )
        try:
            await session.run()
        finally:
            self._sessions.pop(session.session_id, None)
            logger.info(
                "session_unregistered",
                session_id=session.session_id,
                active_sessions=len(self._sessions),
            )

    async def get_session(self, session_id: str) -> MirrorSession | None:
        """Get session by ID."""
        return self._sessions.get(session_id)

    async def list_sessions(self) -> list[MirrorSession]:
        """List active sessions."""
        return list(self._sessions.values())

    async def stop_all(self) -> int:
        """Ask every live session to stop; return how many were signalled."""
        sessions = list(self._sessions.values())
        for session in sessions:
            session.request_stop()
        if sessions:
            logger.info("sessions_stop_requested", count=len(sessions))
        return len(sessions)
