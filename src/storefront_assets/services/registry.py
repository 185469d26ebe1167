"""Session registry for staged uploads."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from storefront_assets.domain.assets import TempAsset, UploadSession


class SessionRegistry(Protocol):
    """Tracks which staged uploads belong to which form session."""

    def now(self) -> datetime:
        """Return the registry's current time."""

    def touch(self, session_id: str) -> UploadSession:
        """Create the session if needed and refresh its last activity."""

    def add_asset(self, session_id: str, asset: TempAsset) -> None:
        """Append a staged asset to a session."""

    def get_assets(self, session_id: str) -> list[TempAsset]:
        """Return the staged assets of a session."""

    def pop_session(self, session_id: str) -> list[TempAsset]:
        """Remove a session and return the assets it held."""

    def discard_asset(self, key: str) -> bool:
        """Drop every record for a key; return true when one was found."""

    def mark_active(self, session_id: str) -> None:
        """Flag a session as being processed."""

    def mark_inactive(self, session_id: str) -> None:
        """Clear the processing flag of a session."""

    def is_active(self, session_id: str) -> bool:
        """Return true while a session is being processed."""

    def idle_sessions(self, cutoff: datetime) -> list[str]:
        """Return inactive sessions last seen before the cutoff."""

    def expired_sessions(self, cutoff: datetime) -> list[str]:
        """Return inactive sessions holding an asset uploaded before the cutoff."""

    def is_idle(self, session_id: str, cutoff: datetime) -> bool:
        """Return true when a tracked inactive session was last seen before cutoff."""

    def is_expired(self, session_id: str, cutoff: datetime) -> bool:
        """Return true when an inactive session holds an asset older than cutoff."""

    def session_ids(self) -> list[str]:
        """Return every tracked session id."""

    def snapshot(self) -> list[dict[str, object]]:
        """Return a serializable view of the registry."""


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemorySessionRegistry(SessionRegistry):
    """Process-local registry; all state is lost on restart."""

    clock: Callable[[], datetime] = _utc_now
    _sessions: dict[str, UploadSession] = field(default_factory=dict)
    _active: set[str] = field(default_factory=set)

    def now(self) -> datetime:
        return self.clock()

    def touch(self, session_id: str) -> UploadSession:
        """Create the session on first sight and refresh its last activity."""
        session = self._sessions.get(session_id)
        if session is None:
            session = UploadSession(id=session_id, last_activity=self.clock())
            self._sessions[session_id] = session
        else:
            session.last_activity = self.clock()
        return session

    def add_asset(self, session_id: str, asset: TempAsset) -> None:
        """Append an asset; the same key may be recorded more than once."""
        self.touch(session_id).assets.append(asset)

    def get_assets(self, session_id: str) -> list[TempAsset]:
        session = self._sessions.get(session_id)
        if session is None:
            return []
        return list(session.assets)

    def pop_session(self, session_id: str) -> list[TempAsset]:
        """Remove a session and hand its assets to the caller."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return []
        return session.assets

    def discard_asset(self, key: str) -> bool:
        found = False
        for session in self._sessions.values():
            kept = [asset for asset in session.assets if asset.key != key]
            if len(kept) != len(session.assets):
                session.assets = kept
                found = True
        return found

    def mark_active(self, session_id: str) -> None:
        self._active.add(session_id)

    def mark_inactive(self, session_id: str) -> None:
        self._active.discard(session_id)

    def is_active(self, session_id: str) -> bool:
        return session_id in self._active

    def idle_sessions(self, cutoff: datetime) -> list[str]:
        """Return sessions eligible for the inactivity sweep."""
        return [
            session.id
            for session in self._sessions.values()
            if session.last_activity < cutoff and session.id not in self._active
        ]

    def expired_sessions(self, cutoff: datetime) -> list[str]:
        """Return sessions eligible for the asset age sweep."""
        return [
            session.id
            for session in self._sessions.values()
            if session.id not in self._active
            and any(asset.uploaded_at < cutoff for asset in session.assets)
        ]

    def is_idle(self, session_id: str, cutoff: datetime) -> bool:
        session = self._sessions.get(session_id)
        return (
            session is not None
            and session.last_activity < cutoff
            and session_id not in self._active
        )

    def is_expired(self, session_id: str, cutoff: datetime) -> bool:
        session = self._sessions.get(session_id)
        return (
            session is not None
            and session_id not in self._active
            and any(asset.uploaded_at < cutoff for asset in session.assets)
        )

    def session_ids(self) -> list[str]:
        return list(self._sessions)

    def snapshot(self) -> list[dict[str, object]]:
        """Return sessions ordered by most recent activity."""
        sessions = sorted(
            self._sessions.values(),
            key=lambda session: session.last_activity,
            reverse=True,
        )
        return [
            {
                "session_id": session.id,
                "last_activity": session.last_activity.isoformat(),
                "active": session.id in self._active,
                "assets": [
                    {
                        "key": asset.key,
                        "category": asset.category.value,
                        "uploaded_at": asset.uploaded_at.isoformat(),
                        "url": asset.url,
                    }
                    for asset in session.assets
                ],
            }
            for session in sessions
        ]
