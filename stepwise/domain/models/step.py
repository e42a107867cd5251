"""Step domain model — one screen of a demo, ordered by position."""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from stepwise.domain.models.user import new_id, utcnow
from stepwise.infrastructure.database import Base


class Step(Base):
    __tablename__ = "steps"

    id = Column(String(36), primary_key=True, default=new_id)
    demo_id = Column(String(36), ForeignKey("demos.id", ondelete="CASCADE"), nullable=False, index=True)
    title = Column(Text, nullable=True)
    description = Column(Text, nullable=True)
    image_url = Column(Text, nullable=False)
    position = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    demo = relationship("Demo", back_populates="steps")
    hotspots = relationship(
        "Hotspot",
        back_populates="step",
        cascade="all, delete-orphan",
        foreign_keys="Hotspot.step_id",
        order_by="Hotspot.created_at",
    )

    def __repr__(self):
        return f"<Step {self.position} of {self.demo_id}>"
