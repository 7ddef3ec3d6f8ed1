"""
Achievement service - progress tracking, points, streaks and rewards
"""

import logging
from datetime import date, datetime, timedelta
from typing import Optional

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from ..models import AiUsageLog, Client, Contractor, Project
from ..models_achievement import Achievement, ContractorAchievement, ContractorStats
from ..models_invoice import Estimate, Invoice

logger = logging.getLogger(__name__)

POINTS_PER_LEVEL = 100
STREAK_CODES = ("streak_week", "streak_month")


def level_for_points(points: int) -> int:
    return 1 + (points or 0) // POINTS_PER_LEVEL


class AchievementService:
    """Service for achievements and contractor game stats"""

    def __init__(self, db: Session):
        self.db = db

    # ------------------------------------------------------------------
    # Catalogue
    # ------------------------------------------------------------------

    def list_achievements(self) -> list[Achievement]:
        return self.db.query(Achievement).order_by(Achievement.category, Achievement.id).all()

    def get_achievement(self, achievement_id: int) -> Achievement:
        achievement = self.db.query(Achievement).filter(Achievement.id == achievement_id).first()
        if not achievement:
            raise HTTPException(status_code=404, detail="Achievement not found")
        return achievement

    # ------------------------------------------------------------------
    # Per-contractor progress
    # ------------------------------------------------------------------

    def _get_progress(self, contractor_id: int, achievement_id: int) -> Optional[ContractorAchievement]:
        return (
            self.db.query(ContractorAchievement)
            .filter(
                ContractorAchievement.contractor_id == contractor_id,
                ContractorAchievement.achievement_id == achievement_id,
            )
            .first()
        )

    def _get_or_create_progress(self, contractor_id: int, achievement: Achievement) -> ContractorAchievement:
        progress = self._get_progress(contractor_id, achievement.id)
        if progress is None:
            progress = ContractorAchievement(
                contractor_id=contractor_id, achievement_id=achievement.id, progress=0
            )
            self.db.add(progress)
            self.db.flush()
        return progress

    def get_contractor_achievements(self, contractor: Contractor) -> list[dict]:
        """Full catalogue joined with this contractor's progress"""
        progress_by_id = {
            p.achievement_id: p
            for p in self.db.query(ContractorAchievement)
            .filter(ContractorAchievement.contractor_id == contractor.id)
            .all()
        }
        result = []
        for achievement in self.list_achievements():
            progress = progress_by_id.get(achievement.id)
            result.append(
                {
                    "achievement": achievement,
                    "progress": progress.progress if progress else 0,
                    "is_completed": progress.is_completed if progress else False,
                    "completed_at": progress.completed_at if progress else None,
                    "is_notified": progress.is_notified if progress else False,
                    "reward_unlocked": progress.reward_unlocked if progress else False,
                }
            )
        return result

    def get_unread(self, contractor: Contractor) -> list[ContractorAchievement]:
        return (
            self.db.query(ContractorAchievement)
            .filter(
                ContractorAchievement.contractor_id == contractor.id,
                ContractorAchievement.is_completed.is_(True),
                ContractorAchievement.is_notified.is_(False),
            )
            .order_by(ContractorAchievement.completed_at.desc())
            .all()
        )

    def mark_read(self, contractor: Contractor, achievement_id: int) -> ContractorAchievement:
        progress = self._get_progress(contractor.id, achievement_id)
        if not progress:
            raise HTTPException(status_code=404, detail="Achievement progress not found")
        progress.is_notified = True
        self.db.commit()
        self.db.refresh(progress)
        return progress

    def unlock_reward(self, contractor: Contractor, achievement_id: int) -> dict:
        achievement = self.get_achievement(achievement_id)
        progress = self._get_progress(contractor.id, achievement_id)

        if not progress or not progress.is_completed:
            raise HTTPException(status_code=400, detail="Achievement not completed yet")
        if achievement.reward is None:
            raise HTTPException(status_code=400, detail="This achievement has no reward")
        if progress.reward_unlocked:
            raise HTTPException(status_code=400, detail="Reward already unlocked")

        progress.reward_unlocked = True
        self.db.commit()
        logger.info(
            f"🎁 Contractor {contractor.id} unlocked reward '{achievement.reward.value}' ({achievement.code})"
        )
        return {"success": True, "reward": achievement.reward}

    def check_achievement(
        self, contractor_id: int, code: str, progress_value: int, category: Optional[str] = None
    ) -> dict:
        """
        Raise stored progress to progress_value and complete the achievement when
        the required count is reached. Points are awarded once, on completion.
        """
        achievement = self.db.query(Achievement).filter(Achievement.code == code).first()
        if not achievement:
            raise HTTPException(status_code=404, detail=f"Achievement '{code}' not found")
        if category and category != achievement.category:
            raise HTTPException(status_code=400, detail="Category does not match achievement")

        progress = self._get_or_create_progress(contractor_id, achievement)
        # Stored progress never exceeds the requirement (and stays within the Integer column)
        reported = min(int(progress_value), achievement.required_count)
        progress.progress = max(progress.progress or 0, reported)

        newly_completed = False
        if not progress.is_completed and progress.progress >= achievement.required_count:
            progress.is_completed = True
            progress.completed_at = datetime.utcnow()
            newly_completed = True

            stats = self._get_or_create_stats(contractor_id)
            stats.total_points = (stats.total_points or 0) + achievement.points
            stats.level = level_for_points(stats.total_points)
            logger.info(
                f"🏆 Contractor {contractor_id} completed '{code}' (+{achievement.points} points)"
            )

        self.db.commit()
        self.db.refresh(progress)
        return {
            "achievement": achievement,
            "progress": progress.progress,
            "is_completed": progress.is_completed,
            "newly_completed": newly_completed,
        }

    # ------------------------------------------------------------------
    # Stats and streaks
    # ------------------------------------------------------------------

    def _get_or_create_stats(self, contractor_id: int) -> ContractorStats:
        stats = (
            self.db.query(ContractorStats)
            .filter(ContractorStats.contractor_id == contractor_id)
            .first()
        )
        if stats is None:
            stats = ContractorStats(
                contractor_id=contractor_id,
                total_points=0,
                level=1,
                current_streak=0,
                longest_streak=0,
            )
            self.db.add(stats)
            self.db.flush()
        return stats

    def get_stats(self, contractor: Contractor) -> dict:
        stats = self._get_or_create_stats(contractor.id)
        self.db.commit()

        completed = (
            self.db.query(func.count(ContractorAchievement.id))
            .filter(
                ContractorAchievement.contractor_id == contractor.id,
                ContractorAchievement.is_completed.is_(True),
            )
            .scalar()
        )
        return {
            "total_points": stats.total_points,
            "level": level_for_points(stats.total_points),
            "current_streak": stats.current_streak,
            "longest_streak": stats.longest_streak,
            "last_active_date": stats.last_active_date,
            "completed_achievements": completed,
            "total_achievements": self.db.query(func.count(Achievement.id)).scalar(),
        }

    def update_streak(self, contractor: Contractor, today: Optional[date] = None) -> dict:
        """Same day: unchanged. Consecutive day: +1. Gap: restart at 1."""
        today = today or datetime.utcnow().date()
        stats = self._get_or_create_stats(contractor.id)
        last = stats.last_active_date.date() if stats.last_active_date else None

        increased = False
        if last == today:
            pass
        elif last == today - timedelta(days=1):
            stats.current_streak = (stats.current_streak or 0) + 1
            increased = True
        else:
            stats.current_streak = 1
            increased = True

        stats.longest_streak = max(stats.longest_streak or 0, stats.current_streak)
        stats.last_active_date = datetime.combine(today, datetime.min.time())
        self.db.commit()

        if increased:
            known = {
                code
                for (code,) in self.db.query(Achievement.code)
                .filter(Achievement.code.in_(STREAK_CODES))
                .all()
            }
            for code in STREAK_CODES:
                if code in known:
                    self.check_achievement(contractor.id, code, stats.current_streak)

        self.db.refresh(stats)
        return {
            "current_streak": stats.current_streak,
            "longest_streak": stats.longest_streak,
            "last_active_date": stats.last_active_date,
            "increased": increased,
        }


# ----------------------------------------------------------------------
# Automatic tracking from business events
# ----------------------------------------------------------------------


def _counts_for_activity(db: Session, contractor_id: int, activity: str) -> dict[str, int]:
    if activity == "client":
        count = db.query(Client).filter(Client.contractor_id == contractor_id).count()
        return {"first_client": count, "client_master": count, "client_empire": count}

    if activity == "project":
        projects = db.query(Project).filter(Project.contractor_id == contractor_id)
        completed = projects.filter(Project.status == "completed").count()
        variety = (
            db.query(func.count(func.distinct(Project.service_type)))
            .filter(Project.contractor_id == contractor_id, Project.service_type.isnot(None))
            .scalar()
        )
        return {
            "first_project": projects.count(),
            "project_master": completed,
            "project_variety": variety or 0,
        }

    if activity == "estimate":
        estimates = db.query(Estimate).filter(Estimate.contractor_id == contractor_id)
        return {
            "first_estimate": estimates.count(),
            "estimate_accepted": estimates.filter(
                Estimate.status.in_(["accepted", "converted"])
            ).count(),
            "estimate_master": estimates.filter(Estimate.status == "converted").count(),
        }

    if activity == "invoice":
        invoices = db.query(Invoice).filter(Invoice.contractor_id == contractor_id)
        paid = invoices.filter(Invoice.amount_paid > 0).count()
        return {"first_invoice": invoices.count(), "invoice_paid": paid, "invoice_master": paid}

    if activity == "ai":
        count = db.query(AiUsageLog).filter(AiUsageLog.contractor_id == contractor_id).count()
        return {"ai_assistant": count, "ai_master": count}

    return {}


def track_activity(db: Session, contractor_id: int, activity: str) -> list[str]:
    """
    Recompute achievement progress after a business event.
    Never raises: a tracking failure must not fail the request that caused it.
    Returns the codes completed by this call.
    """
    completed = []
    try:
        service = AchievementService(db)
        known = {code for (code,) in db.query(Achievement.code).all()}
        for code, value in _counts_for_activity(db, contractor_id, activity).items():
            if code not in known or value <= 0:
                continue
            result = service.check_achievement(contractor_id, code, value)
            if result["newly_completed"]:
                completed.append(code)
    except Exception as e:
        db.rollback()
        logger.warning(f"⚠️ Achievement tracking failed for contractor {contractor_id} ({activity}): {e}")
    return completed
