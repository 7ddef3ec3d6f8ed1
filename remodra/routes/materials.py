"""
Materials catalogue API

Contractor-priced materials referenced by estimate line items.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from ..auth import get_current_contractor
from ..database import get_db
from ..models import Contractor, Material
from ..models_invoice import EstimateItem
from ..shared.ownership import apply_updates, get_owned_or_404
from ..shared.schemas import CamelModel

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/protected/materials", tags=["Materials"])


class MaterialCreate(CamelModel):
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    unit: Optional[str] = None
    unit_price: float = 0
    supplier: Optional[str] = None
    sku: Optional[str] = None
    in_stock: bool = True


class MaterialUpdate(CamelModel):
    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    unit: Optional[str] = None
    unit_price: Optional[float] = None
    supplier: Optional[str] = None
    sku: Optional[str] = None
    in_stock: Optional[bool] = None


class MaterialResponse(CamelModel):
    id: int
    contractor_id: int
    name: str
    category: Optional[str] = None
    description: Optional[str] = None
    unit: Optional[str] = None
    unit_price: Optional[float] = None
    supplier: Optional[str] = None
    sku: Optional[str] = None
    in_stock: Optional[bool] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@router.get("", response_model=list[MaterialResponse])
async def get_materials(
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    return (
        db.query(Material)
        .filter(Material.contractor_id == contractor.id)
        .order_by(Material.name.asc())
        .all()
    )


@router.get("/{material_id}", response_model=MaterialResponse)
async def get_material(
    material_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    return get_owned_or_404(db, Material, material_id, contractor.id, "Material")


@router.post("", response_model=MaterialResponse, status_code=201)
async def create_material(
    data: MaterialCreate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    material = Material(contractor_id=contractor.id, **data.model_dump())
    db.add(material)
    db.commit()
    db.refresh(material)
    return material


@router.patch("/{material_id}", response_model=MaterialResponse)
async def update_material(
    material_id: int,
    data: MaterialUpdate,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    material = get_owned_or_404(db, Material, material_id, contractor.id, "Material")
    updates = data.model_dump(exclude_unset=True)
    if updates.get("name") is None:
        updates.pop("name", None)

    apply_updates(material, updates)
    db.commit()
    db.refresh(material)
    return material


@router.delete("/{material_id}", status_code=204)
async def delete_material(
    material_id: int,
    contractor: Contractor = Depends(get_current_contractor),
    db: Session = Depends(get_db),
):
    """Materials still priced on an estimate line cannot be deleted"""
    material = get_owned_or_404(db, Material, material_id, contractor.id, "Material")

    in_use = db.query(EstimateItem).filter(EstimateItem.material_id == material.id).count()
    if in_use:
        raise HTTPException(
            status_code=400,
            detail=f"Cannot delete material used by {in_use} estimate items",
        )

    db.delete(material)
    db.commit()
    logger.info(f"🗑️ Deleted material {material_id} for contractor {contractor.id}")
    return Response(status_code=204)
