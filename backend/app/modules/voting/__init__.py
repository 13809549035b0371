# Voting module

from app.modules.voting.session_clock import (
    get_active_session,
    get_open_session,
    is_session_open,
    is_voting_open,
)
from app.modules.voting.eligibility import (
    BALLOT_MESSAGES,
    BallotCheck,
    BallotRejection,
    validate_ballot,
)
from app.modules.voting.ledger import VoteLedger, VoteRecord
from app.modules.voting.session_activator import SessionChange, end_session, start_session

__all__ = [
    "get_active_session",
    "get_open_session",
    "is_session_open",
    "is_voting_open",
    "BALLOT_MESSAGES",
    "BallotCheck",
    "BallotRejection",
    "validate_ballot",
    "VoteLedger",
    "VoteRecord",
    "SessionChange",
    "end_session",
    "start_session",
]
