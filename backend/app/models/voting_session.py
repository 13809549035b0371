from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship
from datetime import datetime

from app.core.database import Base
from app.core.types import GUID, generate_uuid


class VotingSession(Base):
    """
    Admin-defined window during which ballots may be cast.

    At most one row has is_active set; the session activator keeps it that
    way. The flag never expires by itself, the [start_time, end_time] window
    (UTC, inclusive) decides whether voting is open.
    """
    __tablename__ = "voting_sessions"

    id = Column(GUID, primary_key=True, default=generate_uuid)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    is_active = Column(Boolean, default=False, nullable=False, index=True)

    created_by_id = Column(GUID, ForeignKey("users.id"), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    created_by = relationship("User", back_populates="created_sessions")

    def __repr__(self):
        return f"<VotingSession {self.title} active={self.is_active}>"
