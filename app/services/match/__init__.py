from app.services.match.repository import InMemoryMatchRepository, MatchRepository
from app.services.match.service import MatchService, MatchServiceResult, get_match_service

__all__ = [
    "InMemoryMatchRepository",
    "MatchRepository",
    "MatchService",
    "MatchServiceResult",
    "get_match_service",
]
