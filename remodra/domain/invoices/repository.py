"""Invoice repository - Database operations for invoices and their items"""

from typing import Optional

from sqlalchemy.orm import Session, selectinload

from ...models_invoice import Invoice, InvoiceItem
from ...shared.ownership import delete_attachments


class InvoiceRepository:
    """Repository for invoice database operations"""

    @staticmethod
    def get_invoices(db: Session, contractor_id: int) -> list[Invoice]:
        return (
            db.query(Invoice)
            .options(selectinload(Invoice.items))
            .filter(Invoice.contractor_id == contractor_id)
            .order_by(Invoice.created_at.desc(), Invoice.id.desc())
            .all()
        )

    @staticmethod
    def get_invoice_by_id(db: Session, invoice_id: int, contractor_id: int) -> Optional[Invoice]:
        return (
            db.query(Invoice)
            .filter(Invoice.id == invoice_id, Invoice.contractor_id == contractor_id)
            .first()
        )

    @staticmethod
    def get_public_invoice(db: Session, invoice_id: int) -> Optional[Invoice]:
        """Unscoped lookup for client-facing links"""
        return db.query(Invoice).filter(Invoice.id == invoice_id).first()

    @staticmethod
    def create_invoice(
        db: Session, contractor_id: int, items: list[dict], commit: bool = True, **invoice_data
    ) -> Invoice:
        invoice = Invoice(contractor_id=contractor_id, **invoice_data)
        for item in items:
            invoice.items.append(InvoiceItem(**item))
        db.add(invoice)
        if commit:
            db.commit()
            db.refresh(invoice)
        else:
            db.flush()
        return invoice

    @staticmethod
    def update_invoice(db: Session, invoice: Invoice, commit: bool = True, **updates) -> Invoice:
        for key, value in updates.items():
            if hasattr(invoice, key):
                setattr(invoice, key, value)

        if commit:
            db.commit()
            db.refresh(invoice)
        return invoice

    @staticmethod
    def delete_invoice(db: Session, invoice: Invoice) -> None:
        delete_attachments(db, "invoice", invoice.id)
        db.delete(invoice)
        db.commit()

    # Item methods
    @staticmethod
    def get_item(db: Session, invoice_id: int, item_id: int) -> Optional[InvoiceItem]:
        return (
            db.query(InvoiceItem)
            .filter(InvoiceItem.id == item_id, InvoiceItem.invoice_id == invoice_id)
            .first()
        )

    @staticmethod
    def create_item(db: Session, invoice_id: int, **item_data) -> InvoiceItem:
        item = InvoiceItem(invoice_id=invoice_id, **item_data)
        db.add(item)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def update_item(db: Session, item: InvoiceItem, **updates) -> InvoiceItem:
        for key, value in updates.items():
            if hasattr(item, key):
                setattr(item, key, value)
        db.commit()
        db.refresh(item)
        return item

    @staticmethod
    def delete_item(db: Session, item: InvoiceItem) -> None:
        db.delete(item)
        db.commit()
