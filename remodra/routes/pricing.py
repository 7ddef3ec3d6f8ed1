"""
Pricing API

Price configurations (base price, labor rate and markup per service type,
one of which can be the default) and per-service labor pricing used by the
estimate builder.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import field_validator
from sqlalchemy.orm import Session

from ..auth import get_current_contractor
from ..database import get_db
from ..models import Contractor, PriceConfiguration, ServicePricing
from ..shared.ownership import apply_updates, get_owned_or_404
from ..shared.schemas import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected/price-configurations", tags=["Pricing"])
services_router = APIRouter(tags=["Pricing"])

LABOR_METHODS = ("by_area", "by_length", "fixed")


class PriceConfigurationCreate(CamelModel):
    service_type: str
    name: str
    base_price: float = 0
    labor_rate: float = 0
    material_markup: float = 0
    unit: Optional[str] = None
    is_default: bool = False
    settings: Optional[dict[str, Any]] = None


class PriceConfigurationUpdate(CamelModel):
    service_type: Optional[str] = None
    name: Optional[str] = None
    base_price: Optional[float] = None
    labor_rate: Optional[float] = None
    material_markup: Optional[float] = None
    unit: Optional[str] = None
    is_default: Optional[bool] = None
    settings: Optional[dict[str, Any]] = None


class PriceConfigurationResponse(CamelModel):
    id: int
    contractor_id: int
    service_type: str
    name: str
    base_price: Optional[float] = None
    labor_rate: Optional[float] = None
    material_markup: Optional[float] = None
    unit: Optional[str] = None
    is_default: bool
    settings: Optional[dict[str, Any]] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ServicePricingCreate(CamelModel):
    service_type: str
    name: str
    unit: str = "sqft"
    labor_rate: float = 0
    labor_calculation_method: str = "by_area"

    @field_validator("labor_calculation_method")
    @classmethod
    def validate_method(cls, v):
        if v not in LABOR_METHODS:
            raise ValueError(f"Labor method must be one of: {', '.join(LABOR_METHODS)}")
        return v


class ServicePricingResponse(CamelModel):
    id: int
    contractor_id: int
    service_type: str
    name: str
    unit: Optional[str] = None
    labor_rate: Optional[float] = None
    labor_calculation_method: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ServicePriceUpdate(CamelModel):
    original_service_type: str
    labor_rate: float
    name: Optional[str] = None
    service_type: Optional[str] = None
    unit: Optional[str] = None
    labor_method: Optional[str] = None

    @field_validator("labor_method")
    @classmethod
    def validate_method(cls, v):
        if v is not None and v not in LABOR_METHODS:
            raise ValueError(f"Labor method must be one of: {', '.join(LABOR_METHODS)}")
        return v


class ServicePriceResponse(CamelModel):
    id: int
    name: str
    service_type: str
    unit: Optional[str] = None
    labor_rate: float
    labor_method: Optional[str] = None


def _clear_other_defaults(db: Session, contractor_id: int, service_type: str, keep_id: Optional[int]) -> None:
    query = db.query(PriceConfiguration).filter(
        PriceConfiguration.contractor_id == contractor_id,
        PriceConfiguration.service_type == service_type,
        PriceConfiguration.is_default.is_(True),
    )
    if keep_id is not None:
        query = query.filter(PriceConfiguration.id != keep_id)
    query.update({PriceConfiguration.is_default: False}, synchronize_session=False)


# ============================================================================
# PRICE CONFIGURATIONS
# ============================================================================


@router.get("", response_model=list[PriceConfigurationResponse])
async def get_price_configurations(
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    return (
        db.query(PriceConfiguration)
        .filter(PriceConfiguration.contractor_id == contractor.id)
        .order_by(PriceConfiguration.service_type, PriceConfiguration.name)
        .all()
    )


@router.get("/service/{service_type}/default", response_model=PriceConfigurationResponse)
async def get_default_price_configuration(
    service_type: str,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    configuration = (
        db.query(PriceConfiguration)
        .filter(
            PriceConfiguration.contractor_id == contractor.id,
            PriceConfiguration.service_type == service_type,
            PriceConfiguration.is_default.is_(True),
        )
        .first()
    )
    if not configuration:
        raise HTTPException(status_code=404, detail="No default price configuration for this service")
    return configuration


@router.get("/service/{service_type}", response_model=list[PriceConfigurationResponse])
async def get_price_configurations_by_service(
    service_type: str,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    return (
        db.query(PriceConfiguration)
        .filter(
            PriceConfiguration.contractor_id == contractor.id,
            PriceConfiguration.service_type == service_type,
        )
        .order_by(PriceConfiguration.name)
        .all()
    )


@router.get("/{config_id}", response_model=PriceConfigurationResponse)
async def get_price_configuration(
    config_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    return get_owned_or_404(db, PriceConfiguration, config_id, contractor.id, "Price configuration")


@router.post("", response_model=PriceConfigurationResponse, status_code=201)
async def create_price_configuration(
    data: PriceConfigurationCreate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    configuration = PriceConfiguration(contractor_id=contractor.id, **data.model_dump())
    db.add(configuration)
    db.flush()
    if configuration.is_default:
        _clear_other_defaults(db, contractor.id, configuration.service_type, configuration.id)
    db.commit()
    db.refresh(configuration)
    return configuration


@router.patch("/{config_id}", response_model=PriceConfigurationResponse)
async def update_price_configuration(
    config_id: int,
    data: PriceConfigurationUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    configuration = get_owned_or_404(db, PriceConfiguration, config_id, contractor.id, "Price configuration")
    updates = data.model_dump(exclude_unset=True)
    for key in ("service_type", "name", "is_default"):
        if key in updates and updates[key] is None:
            del updates[key]

    apply_updates(configuration, updates)
    if configuration.is_default:
        _clear_other_defaults(db, contractor.id, configuration.service_type, configuration.id)
    db.commit()
    db.refresh(configuration)
    return configuration


@router.delete("/{config_id}", status_code=204)
async def delete_price_configuration(
    config_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    configuration = get_owned_or_404(db, PriceConfiguration, config_id, contractor.id, "Price configuration")
    db.delete(configuration)
    db.commit()
    return Response(status_code=204)


@router.post("/{config_id}/set-default", response_model=PriceConfigurationResponse)
async def set_default_price_configuration(
    config_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    """Make this configuration the only default for its service type"""
    configuration = get_owned_or_404(db, PriceConfiguration, config_id, contractor.id, "Price configuration")
    _clear_other_defaults(db, contractor.id, configuration.service_type, configuration.id)
    configuration.is_default = True
    db.commit()
    db.refresh(configuration)
    logger.info(
        f"⭐ Price configuration {configuration.id} is now the default for {configuration.service_type}"
    )
    return configuration


# ============================================================================
# SERVICE PRICING
# ============================================================================


@services_router.get("/api/protected/services", response_model=list[ServicePricingResponse])
async def get_services(
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    return (
        db.query(ServicePricing)
        .filter(ServicePricing.contractor_id == contractor.id)
        .order_by(ServicePricing.name)
        .all()
    )


@services_router.post("/api/protected/services", response_model=ServicePricingResponse, status_code=201)
async def create_service(
    data: ServicePricingCreate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    service = ServicePricing(contractor_id=contractor.id, **data.model_dump())
    db.add(service)
    db.commit()
    db.refresh(service)
    return service


@services_router.post("/api/update-service-price", response_model=ServicePriceResponse)
async def update_service_price(
    data: ServicePriceUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    service = (
        db.query(ServicePricing)
        .filter(
            ServicePricing.contractor_id == contractor.id,
            ServicePricing.service_type == data.original_service_type,
        )
        .first()
    )
    if not service:
        raise HTTPException(status_code=404, detail="Service not found")

    service.name = data.name or "Updated Service"
    service.service_type = data.service_type or data.original_service_type
    service.unit = data.unit or "unit"
    service.labor_rate = data.labor_rate
    service.labor_calculation_method = data.labor_method or "by_area"
    db.commit()
    db.refresh(service)
    logger.info(f"💲 Updated pricing for service {service.service_type} (contractor {contractor.id})")

    return {
        "id": service.id,
        "name": service.name,
        "service_type": service.service_type,
        "unit": service.unit,
        "labor_rate": service.labor_rate,
        "labor_method": service.labor_calculation_method,
    }
