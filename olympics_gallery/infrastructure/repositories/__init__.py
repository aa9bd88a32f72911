# Repository Pattern Implementation
"""
Repositories abstract database operations.
Each entity has its own repository.
"""
from .base import Repository, ConnectionProtocol
from .olympics_repository import OlympicsRepository
from .media_repository import MediaRepository, YEAR_INDEX, EVENT_INDEX

__all__ = [
    "Repository",
    "ConnectionProtocol",
    "OlympicsRepository",
    "MediaRepository",
    "YEAR_INDEX",
    "EVENT_INDEX",
]
