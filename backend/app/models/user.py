from sqlalchemy import Column, String, Boolean, DateTime, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class User(Base):
    """Voter or administrator account, created on first Google sign-in"""
    __tablename__ = "users"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)

    # OAuth fields
    google_id = Column(String(255), unique=True, nullable=True)
    profile_image_url = Column(Text, nullable=True)

    # Verification fields
    matric_number = Column(String(50), unique=True, index=True, nullable=True)
    document_url = Column(Text, nullable=True)
    document_verified = Column(Boolean, default=False, nullable=False)
    face_verified = Column(Boolean, default=False, nullable=False)
    is_activated = Column(Boolean, default=False, nullable=False)  # never reset once true
    biometric_uid = Column(String(255), nullable=True)

    is_admin = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    votes = relationship("Vote", back_populates="user")
    created_sessions = relationship("VotingSession", back_populates="created_by")

    def __repr__(self):
        return f"<User {self.email}>"
