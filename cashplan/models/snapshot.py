"""Key-value table holding the serialized planner state."""
from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func

from cashplan.database import Base


class PlannerSnapshot(Base):
    """
    One opaque JSON document per key.

    The payload is written wholesale after every accepted command; there is no
    incremental storage of individual records.
    """

    __tablename__ = "planner_snapshots"

    key = Column(String, primary_key=True)
    payload = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    def __repr__(self):
        return f"<PlannerSnapshot key={self.key}>"
