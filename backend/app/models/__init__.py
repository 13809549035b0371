# Re-export all models for convenient imports
from app.models.user import User
from app.models.position import Position
from app.models.candidate import Candidate
from app.models.voting_session import VotingSession
from app.models.vote import Vote

__all__ = [
    "User",
    "Position",
    "Candidate",
    "VotingSession",
    "Vote",
]
