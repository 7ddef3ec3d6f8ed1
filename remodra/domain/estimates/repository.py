"""Estimate repository - Database operations for estimates and their items"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models_invoice import Estimate, EstimateItem, Invoice
from ...shared.ownership import delete_attachments


class EstimateRepository:
    """Repository for estimate database operations"""

    @staticmethod
    def get_estimates(db: Session, contractor_id: int) -> list[Estimate]:
        return (
            db.query(Estimate)
            .options(selectinload(Estimate.items))
            .filter(Estimate.contractor_id == contractor_id)
            .order_by(Estimate.created_at.desc(), Estimate.id.desc())
            .all()
        )

    @staticmethod
    def get_estimate_by_id(db: Session, estimate_id: int, contractor_id: int) -> Optional[Estimate]:
        return (
            db.query(Estimate)
            .filter(Estimate.id == estimate_id, Estimate.contractor_id == contractor_id)
            .first()
        )

    @staticmethod
    def get_public_estimate(db: Session, estimate_id: int) -> Optional[Estimate]:
        """Unscoped lookup for client-facing links"""
        return db.query(Estimate).filter(Estimate.id == estimate_id).first()

    @staticmethod
    def create_estimate(db: Session, contractor_id: int, items: list[dict], **estimate_data) -> Estimate:
        estimate = Estimate(contractor_id=contractor_id, **estimate_data)
        for item in items:
            estimate.items.append(EstimateItem(**item))
        db.add(estimate)
        db.commit()
        db.refresh(estimate)
        return estimate

    @staticmethod
    def update_estimate(db: Session, estimate: Estimate, commit: bool = True, **updates) -> Estimate:
        for key, value in updates.items():
            if hasattr(estimate, key):
                setattr(estimate, key, value)

        if commit:
            db.commit()
            db.refresh(estimate)
        return estimate

    @staticmethod
    def delete_estimate(db: Session, estimate: Estimate) -> None:
        """Delete an estimate and its items; invoices created from it are kept"""
        db.query(Invoice).filter(Invoice.estimate_id == estimate.id).update(
            {Invoice.estimate_id: None}, synchronize_session=False
        )
        delete_attachments(db, "estimate", estimate.id)
        db.delete(estimate)
        db.commit()

    # Item methods
    @staticmethod
    def get_item(db: Session, estimate_id: int, item_id: int) -> Optional[EstimateItem]:
        return (
            db.query(EstimateItem)
            .filter(EstimateItem.id == item_id, EstimateItem.estimate_id == estimate_id)
            .first()
        )

    @staticmethod
    def create_item(db: Session, estimate_id: int, **item_data) -> EstimateItem:
        item = EstimateItem(estimate_id=estimate_id, **item_data)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def update_item(db: Session, item: EstimateItem, **updates) -> EstimateItem:
        for key, value in updates.items():
            if hasattr(item, key):
                setattr(item, key, value)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def delete_item(db: Session, item: EstimateItem) -> None:
        db.delete(item)
        db.commit()
