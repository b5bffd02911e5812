"""
Dependency injection setup for FastAPI.

This module provides the "container" that wires together all module
implementations. Each module exposes its service through an interface,
and this file creates the concrete implementations.
"""

from typing import TYPE_CHECKING

# Type checking imports for interfaces (avoids circular imports)
if TYPE_CHECKING:
    from modules.debates.interfaces import ILiveDebateService
    from modules.voice.profiles import VoiceProfileResolver


class ServiceContainer:
    """
    Container for all service instances.

    Services are created lazily on first access and cached as singletons
    within the container. Use reset() to clear them for testing.
    """

    def __init__(self) -> None:
        self._live_debate_service: "ILiveDebateService | None" = None
        self._voice_resolver: "VoiceProfileResolver | None" = None

    @property
    def live_debates(self) -> "ILiveDebateService":
        """Get the live debate service instance."""
        if self._live_debate_service is None:
            from modules.debates.service import get_live_debate_service
            self._live_debate_service = get_live_debate_service()
        return self._live_debate_service

    @property
    def voice_resolver(self) -> "VoiceProfileResolver":
        """Get the voice profile resolver."""
        if self._voice_resolver is None:
            from modules.voice.profiles import VoiceProfileResolver
            from shared.config import get_settings
            self._voice_resolver = VoiceProfileResolver(
                default_voice_id=get_settings().default_voice_id,
            )
        return self._voice_resolver

    def reset(self) -> None:
        """
        Reset all cached services.

        This is primarily for testing - allows tests to get fresh
        service instances with different mock dependencies.
        """
        self._live_debate_service = None
        self._voice_resolver = None


# Module-level container singleton
_container: ServiceContainer | None = None


def get_container() -> ServiceContainer:
    """Get the singleton service container."""
    global _container
    if _container is None:
        _container = ServiceContainer()
    return _container


def reset_container() -> None:
    """
    Reset the service container.

    The next call to get_container() creates a fresh container.
    Primarily used for testing.
    """
    global _container
    _container = None


# FastAPI dependency functions
# These are the functions that should be used in route Depends() calls


def get_live_debate_service() -> "ILiveDebateService":
    """FastAPI dependency for the live debate service."""
    return get_container().live_debates


def get_voice_resolver() -> "VoiceProfileResolver":
    """FastAPI dependency for the voice profile resolver."""
    return get_container().voice_resolver
