"""
Achievements API - catalogue, contractor progress, stats and streaks
"""

import logging
import math
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from ..auth import get_current_contractor
from ..database import get_db
from ..models import Contractor
from ..services.achievement_service import AchievementService
from ..shared.schemas import CamelModel
from ..shared.validators import is_number

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Achievements"])


class RewardResponse(CamelModel):
    id: int
    achievement_id: int
    type: str
    description: Optional[str] = None
    value: str
    duration: Optional[int] = None


class AchievementResponse(CamelModel):
    id: int
    code: str
    name: str
    description: Optional[str] = None
    category: str
    points: int
    icon: Optional[str] = None
    required_count: int
    level: Optional[str] = None
    badge_color: Optional[str] = None
    reward: Optional[RewardResponse] = None


class ContractorAchievementResponse(CamelModel):
    achievement: AchievementResponse
    progress: int
    is_completed: bool
    completed_at: Optional[datetime] = None
    is_notified: bool
    reward_unlocked: bool


class UnreadAchievementResponse(ContractorAchievementResponse):
    id: int
    achievement_id: int


class UnlockRewardResponse(CamelModel):
    success: bool
    reward: RewardResponse


class CheckAchievementRequest(CamelModel):
    code: Optional[str] = None
    category: Optional[str] = None
    progress: Optional[Any] = None


class CheckAchievementResponse(CamelModel):
    achievement: AchievementResponse
    progress: int
    is_completed: bool
    newly_completed: bool


class StatsResponse(CamelModel):
    total_points: int
    level: int
    current_streak: int
    longest_streak: int
    last_active_date: Optional[datetime] = None
    completed_achievements: int
    total_achievements: int


class StreakResponse(CamelModel):
    current_streak: int
    longest_streak: int
    last_active_date: Optional[datetime] = None
    increased: bool


def get_achievement_service(db: Session = Depends(get_db)) -> AchievementService:
    return AchievementService(db)


@router.get("/api/achievements", response_model=list[AchievementResponse])
async def list_achievements(
    contractor: Contractor = Depends(get_current_contractor),
    service: AchievementService = Depends(get_achievement_service),
):
    return service.list_achievements()


@router.get("/api/contractor/achievements", response_model=list[ContractorAchievementResponse])
async def get_contractor_achievements(
    contractor: Contractor = Depends(get_current_contractor),
    service: AchievementService = Depends(get_achievement_service),
):
    return service.get_contractor_achievements(contractor)


@router.get("/api/contractor/achievements/unread", response_model=list[UnreadAchievementResponse])
async def get_unread_achievements(
    contractor: Contractor = Depends(get_current_contractor),
    service: AchievementService = Depends(get_achievement_service),
):
    """Completed achievements the contractor has not been shown yet"""
    return service.get_unread(contractor)


@router.post("/api/contractor/achievements/check", response_model=CheckAchievementResponse)
async def check_achievement(
    data: CheckAchievementRequest,
    contractor: Contractor = Depends(get_current_contractor),
    service: AchievementService = Depends(get_achievement_service),
):
    if not data.code or not data.category or data.progress is None:
        raise HTTPException(
            status_code=400,
            detail={"message": "Missing required fields", "required": ["code", "category", "progress"]},
        )
    if not is_number(data.progress, allow_strings=True) or not math.isfinite(float(data.progress)):
        raise HTTPException(status_code=400, detail="Progress must be a number")

    return service.check_achievement(contractor.id, data.code, int(float(data.progress)), data.category)


@router.post("/api/contractor/achievements/{achievement_id}/mark-read", response_model=UnreadAchievementResponse)
async def mark_achievement_read(
    achievement_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: AchievementService = Depends(get_achievement_service),
):
    return service.mark_read(contractor, achievement_id)


@router.post("/api/contractor/achievements/{achievement_id}/unlock-reward", response_model=UnlockRewardResponse)
async def unlock_reward(
    achievement_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    service: AchievementService = Depends(get_achievement_service),
):
    return service.unlock_reward(contractor, achievement_id)


@router.get("/api/contractor/stats", response_model=StatsResponse)
async def get_stats(
    contractor: Contractor = Depends(get_current_contractor),
    service: AchievementService = Depends(get_achievement_service),
):
    return service.get_stats(contractor)


@router.post("/api/contractor/streak/update", response_model=StreakResponse)
async def update_streak(
    contractor: Contractor = Depends(get_current_contractor),
    service: AchievementService = Depends(get_achievement_service),
):
    result = service.update_streak(contractor)
    if result["increased"]:
        logger.info(f"🔥 Contractor {contractor.id} streak is now {result['current_streak']} days")
    return result


__all__ = ["router", "get_achievement_service"]
