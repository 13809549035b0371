from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime


# ============================================
# Positions
# ============================================

class PositionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    max_votes: int = Field(1, ge=1)


class PositionResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    max_votes: int
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================
# Candidates
# ============================================

class CandidateResponse(BaseModel):
    id: str
    full_name: str
    matric_number: Optional[str] = None
    nickname: Optional[str] = None
    image_url: Optional[str] = None
    is_active: bool
    position_id: str
    created_at: datetime

    class Config:
        from_attributes = True


# ============================================
# Voting Sessions
# ============================================

class VotingSessionCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime


class VotingSessionResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    is_active: bool
    created_by_id: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True


class SessionChangeResponse(BaseModel):
    message: str
    session: VotingSessionResponse


# ============================================
# Results
# ============================================

class CandidateResult(BaseModel):
    candidate_id: str
    full_name: str
    votes: int


class PositionResult(BaseModel):
    position_id: str
    title: str
    total_votes: int
    candidates: List[CandidateResult]


class DetailedResultsResponse(BaseModel):
    counts: Dict[str, Dict[str, int]]
    positions: List[PositionResult]


# ============================================
# Users
# ============================================

class AdminUserResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    matric_number: Optional[str] = None
    document_verified: bool
    face_verified: bool
    is_activated: bool
    is_admin: bool
    created_at: datetime

    class Config:
        from_attributes = True
