"""
Service Layer Package

Business logic services between the HTTP layer (gamepass.api) and the
game pass core (gamepass.gamification).

- GamePassService: claims, moderation, progress, season report, profiles
"""

from gamepass.services.container import ServiceContainer, get_container, init_container
from gamepass.services.gamepass_service import GamePassService

__all__ = [
    "ServiceContainer",
    "get_container",
    "init_container",
    "GamePassService",
]
