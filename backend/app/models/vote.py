from sqlalchemy import Column, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class Vote(Base):
    """One account's immutable choice of candidate for one position"""
    __tablename__ = "votes"
    __table_args__ = (
        # Race guard for concurrent casts; see VoteLedger.cast_vote
        UniqueConstraint("user_id", "position_id", name="uq_votes_user_position"),
    )

    id = Column(GUID, primary_key=True, default=generate_uuid)
    user_id = Column(GUID, ForeignKey("users.id"), nullable=False, index=True)
    position_id = Column(GUID, ForeignKey("positions.id"), nullable=False, index=True)
    candidate_id = Column(GUID, ForeignKey("candidates.id"), nullable=False, index=True)

    voted_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    user = relationship("User", back_populates="votes")
    position = relationship("Position", back_populates="votes")
    candidate = relationship("Candidate", back_populates="votes")

    def __repr__(self):
        return f"<Vote user={self.user_id} position={self.position_id}>"
