## Learning plan table
import uuid
from datetime import datetime

from sqlalchemy import DateTime, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from learnstream.db.base import Base


class Plan(Base):
    __tablename__ = "plans"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    current_skill_level: Mapped[str | None] = mapped_column(String(50), nullable=True)
    learning_goal: Mapped[str | None] = mapped_column(Text, nullable=True)
    target_skill_level: Mapped[str | None] = mapped_column(String(50), nullable=True)

    resources_status: Mapped[str] = mapped_column(String(30), nullable=False, default="pending", index=True)  # pending/loading/ready/failed
    # Rotated on reset; enrichment writes carrying an older token are dropped
    run_token: Mapped[str] = mapped_column(String(32), nullable=False, default=lambda: uuid.uuid4().hex)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    steps: Mapped[list["PlanStep"]] = relationship(
        back_populates="plan",
        order_by="PlanStep.position",
        cascade="all, delete-orphan",
    )
