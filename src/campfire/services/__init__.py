"""Service layer for campfire operations."""

from .campfire import CampfireResult, CampfireService

__all__ = [
    "CampfireService",
    "CampfireResult",
]
