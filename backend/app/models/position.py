from sqlalchemy import Column, String, Boolean, DateTime, Integer, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class Position(Base):
    """Electable office on the ballot"""
    __tablename__ = "positions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    max_votes = Column(Integer, default=1, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    candidates = relationship("Candidate", back_populates="position", order_by="Candidate.full_name")
    votes = relationship("Vote", back_populates="position")

    def __repr__(self):
        return f"<Position {self.title}>"
