from pydantic import BaseModel, Field
from typing import Optional


class UpdateDetailsRequest(BaseModel):
    matric_number: str = Field(..., min_length=1, max_length=50)
    full_name: str = Field(..., min_length=1, max_length=255)


class VerificationStatusResponse(BaseModel):
    has_matric_number: bool
    matric_number: Optional[str] = None
    document_verified: bool
    face_verified: bool
    is_activated: bool
    stage: str


class VerificationStepResponse(BaseModel):
    """Outcome of one verification step"""
    success: bool
    message: str
    status: VerificationStatusResponse
