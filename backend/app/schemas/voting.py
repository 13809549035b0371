from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class CastVoteRequest(BaseModel):
    position_id: str
    candidate_id: str


class CastVoteResponse(BaseModel):
    message: str


class BallotCandidate(BaseModel):
    id: str
    full_name: str
    nickname: Optional[str] = None
    image_url: Optional[str] = None

    class Config:
        from_attributes = True


class BallotPosition(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    max_votes: int
    has_voted: bool
    candidates: List[BallotCandidate]


class VotingStatusResponse(BaseModel):
    is_active: bool
    session_id: Optional[str] = None
    title: Optional[str] = None
    start_time: Optional[datetime] = None
    end_time: Optional[datetime] = None


class MyVoteResponse(BaseModel):
    position_id: str
    position_title: str
    candidate_id: str
    candidate_name: str
    voted_at: datetime
