from __future__ import annotations

import datetime

from sqlalchemy import DateTime, Integer, String, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from learnos.core.database import Base


class LessonPlan(Base):
  __tablename__ = "lesson_plans"

  id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
  topic_key: Mapped[str] = mapped_column(String, nullable=False, unique=True, index=True)
  key_concepts: Mapped[list] = mapped_column(JSONB, nullable=False)
  analogies: Mapped[list] = mapped_column(JSONB, nullable=False)
  quiz: Mapped[list] = mapped_column(JSONB, nullable=False)
  created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
