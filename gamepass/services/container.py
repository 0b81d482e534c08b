"""
Service Container - Dependency Injection Container

Holds the service instances used by the API layer.
Services are lazy loaded on first access.
"""

from dataclasses import dataclass, field
from typing import Optional
import logging

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """
    Dependency injection container for services.

    The database is injected; services are created on first access.
    """

    db: object  # Database instance

    _gamepass_service: Optional[object] = field(default=None, init=False, repr=False)

    @property
    def gamepass_service(self):
        """Get GamePassService instance (lazy-loaded)"""
        if self._gamepass_service is None:
            from gamepass.services.gamepass_service import GamePassService
            self._gamepass_service = GamePassService(self.db)
            logger.debug("GamePassService instantiated")
        return self._gamepass_service


# Global container instance (initialized by the API lifespan)
_container: Optional[ServiceContainer] = None


def get_container() -> ServiceContainer:
    """
    Get the global service container.

    Raises:
        RuntimeError: If container not initialized (call init_container first)
    """
    if _container is None:
        raise RuntimeError(
            "Service container not initialized. "
            "Call init_container() before using services."
        )
    return _container


def init_container(db: object) -> ServiceContainer:
    """
    Initialize the global service container.

    Args:
        db: Database instance

    Returns:
        ServiceContainer: The initialized container
    """
    global _container

    _container = ServiceContainer(db=db)

    logger.info("Service container initialized")
    return _container
