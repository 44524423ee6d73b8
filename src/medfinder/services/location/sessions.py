"""Per-client location sessions."""

from __future__ import annotations

import logging
from collections import OrderedDict
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable

from ...config import Settings, settings as default_settings
from .backoff import BackoffPolicy
from .controller import LocationResolutionController
from .device import LocationOptions, ReportedPositionProvider
from .geocoder import ReverseGeocoder, build_reverse_geocoder

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class LocationSession:
    session_id: str
    provider: ReportedPositionProvider
    controller: LocationResolutionController


def options_from_settings(config: Settings) -> LocationOptions:
    return LocationOptions(
        enable_high_accuracy=config.location_high_accuracy,
        timeout_seconds=config.location_timeout_seconds,
        maximum_age_seconds=config.location_maximum_age_seconds,
    )


def backoff_from_settings(config: Settings) -> BackoffPolicy:
    return BackoffPolicy(
        max_attempts=config.location_max_attempts,
        base_delay=config.location_backoff_seconds,
        max_delay=config.location_backoff_max_seconds,
    )


class LocationSessionRegistry:
    """Keeps one provider/controller pair per client session, evicting least recently used."""

    def __init__(
        self,
        *,
        config: Settings | None = None,
        geocoder_factory: Callable[[], ReverseGeocoder] | None = None,
        max_sessions: int | None = None,
    ) -> None:
        self.config = config or default_settings
        self._geocoder_factory = geocoder_factory or (lambda: build_reverse_geocoder(self.config))
        self.max_sessions = max_sessions or self.config.location_max_sessions
        self._sessions: OrderedDict[str, LocationSession] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def get(self, session_id: str) -> LocationSession | None:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def get_or_create(self, session_id: str) -> LocationSession:
        session = self.get(session_id)
        if session is not None:
            return session

        provider = ReportedPositionProvider()
        controller = LocationResolutionController(
            provider,
            self._geocoder_factory(),
            options=options_from_settings(self.config),
            backoff=backoff_from_settings(self.config),
        )
        session = LocationSession(session_id=session_id, provider=provider, controller=controller)
        self._sessions[session_id] = session
        self._evict()
        return session

    def discard(self, session_id: str) -> bool:
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.controller.cancel()
        return True

    def _evict(self) -> None:
        while len(self._sessions) > self.max_sessions:
            session_id, session = self._sessions.popitem(last=False)
            session.controller.cancel()
            logger.debug(f"Evicted location session {session_id}")


@lru_cache()
def get_location_registry() -> LocationSessionRegistry:
    """Get the process-wide session registry."""
    return LocationSessionRegistry()
