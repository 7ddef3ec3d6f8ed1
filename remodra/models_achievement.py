"""
Achievement and gamification models
"""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Achievement(Base):
    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(100), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    category = Column(String(50), nullable=False)  # client, project, estimate, invoice, system, ai
    points = Column(Integer, default=0, nullable=False)
    icon = Column(String(100), nullable=True)
    required_count = Column(Integer, default=1, nullable=False)
    level = Column(String(20), default="bronze")  # bronze, silver, gold
    badge_color = Column(String(7), nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    reward = relationship("AchievementReward", back_populates="achievement", uselist=False)


class AchievementReward(Base):
    __tablename__ = "achievement_rewards"

    id = Column(Integer, primary_key=True, index=True)
    achievement_id = Column(Integer, ForeignKey("achievements.id"), nullable=False, index=True)
    type = Column(String(50), nullable=False)  # feature, discount, credit
    description = Column(Text, nullable=True)
    value = Column(String(100), nullable=False)
    duration = Column(Integer, nullable=True)  # days

    achievement = relationship("Achievement", back_populates="reward")


class ContractorAchievement(Base):
    """Per-contractor progress on an achievement"""

    __tablename__ = "contractor_achievements"
    __table_args__ = (UniqueConstraint("contractor_id", "achievement_id"),)

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    achievement_id = Column(Integer, ForeignKey("achievements.id"), nullable=False)
    progress = Column(Integer, default=0, nullable=False)
    is_completed = Column(Boolean, default=False, nullable=False)
    completed_at = Column(DateTime, nullable=True)
    is_notified = Column(Boolean, default=False, nullable=False)
    reward_unlocked = Column(Boolean, default=False, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    achievement = relationship("Achievement")


class ContractorStats(Base):
    __tablename__ = "contractor_stats"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(
        Integer, ForeignKey("contractors.id"), unique=True, nullable=False, index=True
    )
    total_points = Column(Integer, default=0, nullable=False)
    level = Column(Integer, default=1, nullable=False)
    current_streak = Column(Integer, default=0, nullable=False)
    longest_streak = Column(Integer, default=0, nullable=False)
    last_active_date = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
