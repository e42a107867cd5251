"""Demo domain model — maps to the 'demos' table."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from stepwise.domain.models.user import new_id, utcnow
from stepwise.infrastructure.database import Base


class Demo(Base):
    __tablename__ = "demos"
    __table_args__ = (UniqueConstraint("user_id", "slug", name="uq_demos_user_slug"),)

    id = Column(String(36), primary_key=True, default=new_id)
    title = Column(Text, nullable=False)
    slug = Column(String(64), nullable=False, index=True)
    description = Column(Text, nullable=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    is_public = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    owner = relationship("User", back_populates="demos")
    steps = relationship(
        "Step",
        back_populates="demo",
        cascade="all, delete-orphan",
        order_by="[Step.position, Step.created_at]",
    )

    def __repr__(self):
        return f"<Demo {self.slug}>"
