from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


class GoogleSignInRequest(BaseModel):
    """Request for Google Sign-In with the ID token issued to the frontend."""
    id_token: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    id: str
    email: str
    full_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    matric_number: Optional[str] = None
    document_verified: bool
    face_verified: bool
    is_activated: bool
    is_admin: bool
    created_at: datetime

    class Config:
        from_attributes = True


class SignInResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
    is_new_user: bool = False
