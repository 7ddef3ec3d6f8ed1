"""Agent domain schemas - field agents and their appointment schedule"""

from datetime import datetime
from typing import Optional

from pydantic import field_validator

from ...shared.schemas import CamelModel
from ...shared.validators import empty_to_none
from ..estimates.schemas import EstimateResponse

DEFAULT_APPOINTMENT_MINUTES = 60


class AgentBase(CamelModel):
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    specialties: Optional[list[str]] = None
    hourly_rate: Optional[float] = None
    commission_rate: Optional[float] = None
    hire_date: Optional[datetime] = None
    is_active: Optional[bool] = None
    notes: Optional[str] = None

    @field_validator("hourly_rate", "commission_rate", "hire_date", mode="before")
    @classmethod
    def blank_as_null(cls, v):
        return empty_to_none(v)


class AgentCreate(AgentBase):
    first_name: str
    last_name: str
    is_active: bool = True

    @field_validator("first_name", "last_name")
    @classmethod
    def not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Name cannot be empty")
        return v


class AgentUpdate(AgentBase):
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class AgentResponse(CamelModel):
    id: int
    contractor_id: int
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    role: Optional[str] = None
    specialties: Optional[list[str]] = None
    hourly_rate: Optional[float] = None
    commission_rate: Optional[float] = None
    hire_date: Optional[datetime] = None
    is_active: bool
    notes: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


# ============================================================================
# SCHEDULING
# ============================================================================


class AssignEstimateRequest(CamelModel):
    estimate_id: int
    agent_id: int
    appointment_date: datetime
    appointment_duration: Optional[int] = None

    @field_validator("appointment_duration")
    @classmethod
    def positive_duration(cls, v):
        if v is not None and v <= 0:
            raise ValueError("Appointment duration must be positive")
        return v


class AgentDaySchedule(CamelModel):
    agent: AgentResponse
    estimates: list[EstimateResponse]
    total_hours: float
    is_available: bool


class ScheduleResponse(CamelModel):
    date: str
    schedule: list[AgentDaySchedule]
    total_estimates: int
    unassigned_estimates: list[EstimateResponse]


class AvailabilityResponse(CamelModel):
    agent_id: int
    date: str
    estimates: list[EstimateResponse]
    total_booked_hours: float
    is_available: bool
