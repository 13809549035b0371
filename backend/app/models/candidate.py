from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class Candidate(Base):
    """Person running for a position"""
    __tablename__ = "candidates"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    full_name = Column(String(255), nullable=False)
    matric_number = Column(String(50), unique=True, nullable=True)
    nickname = Column(String(100), nullable=True)
    image_url = Column(Text, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    position_id = Column(GUID, ForeignKey("positions.id"), nullable=False, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    position = relationship("Position", back_populates="candidates")
    votes = relationship("Vote", back_populates="candidate")

    def __repr__(self):
        return f"<Candidate {self.full_name}>"
