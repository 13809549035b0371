# Pydantic schemas
from app.schemas.auth import GoogleSignInRequest, UserResponse, SignInResponse
from app.schemas.student import (
    UpdateDetailsRequest,
    VerificationStatusResponse,
    VerificationStepResponse,
)
from app.schemas.voting import (
    CastVoteRequest,
    CastVoteResponse,
    BallotCandidate,
    BallotPosition,
    VotingStatusResponse,
    MyVoteResponse,
)
from app.schemas.admin import (
    PositionCreate,
    PositionResponse,
    CandidateResponse,
    VotingSessionCreate,
    VotingSessionResponse,
    SessionChangeResponse,
    CandidateResult,
    PositionResult,
    DetailedResultsResponse,
    AdminUserResponse,
)
