# API endpoints
from . import auth, student, voting, health

__all__ = ["auth", "student", "voting", "health"]
