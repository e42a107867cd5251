"""Hotspot domain model — clickable rectangle on a step image (percent units)."""

from sqlalchemy import Column, DateTime, Float, ForeignKey, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from stepwise.domain.models.user import new_id, utcnow
from stepwise.infrastructure.database import Base


class Hotspot(Base):
    __tablename__ = "hotspots"

    id = Column(String(36), primary_key=True, default=new_id)
    step_id = Column(String(36), ForeignKey("steps.id", ondelete="CASCADE"), nullable=False, index=True)
    x = Column(Float, nullable=False)
    y = Column(Float, nullable=False)
    width = Column(Float, nullable=False)
    height = Column(Float, nullable=False)
    color = Column(String(50), nullable=False)
    border_radius = Column(Float, nullable=False, default=0)
    tooltip_text = Column(Text, nullable=True)
    tooltip_placement = Column(String(10), nullable=True)  # top, bottom, left, right
    target_step_id = Column(String(36), ForeignKey("steps.id", ondelete="SET NULL"), nullable=True, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    step = relationship("Step", back_populates="hotspots", foreign_keys=[step_id])

    def __repr__(self):
        return f"<Hotspot {self.id} on {self.step_id}>"
