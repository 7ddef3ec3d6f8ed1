"""
Estimate and Invoice Models for contractor quoting and billing
"""

from sqlalchemy import Column, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Estimate(Base):
    """Quote sent to a client before work starts"""

    __tablename__ = "estimates"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
    agent_id = Column(Integer, ForeignKey("agents.id"), nullable=True, index=True)
    estimate_number = Column(String(50), nullable=False, index=True)

    # Dates
    issue_date = Column(DateTime, nullable=True)
    expiry_date = Column(DateTime, nullable=True)

    # Status
    status = Column(
        String(50), default="draft", nullable=False
    )  # draft, sent, accepted, rejected, converted

    # Pricing
    subtotal = Column(Float, default=0)
    tax = Column(Float, default=0)
    discount = Column(Float, default=0)
    total = Column(Float, default=0)

    terms = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    contractor_signature = Column(Text, nullable=True)
    client_signature = Column(Text, nullable=True)
    rejection_notes = Column(Text, nullable=True)
    accepted_date = Column(DateTime, nullable=True)
    rejected_date = Column(DateTime, nullable=True)

    # Agent appointment
    appointment_date = Column(DateTime, nullable=True)
    appointment_duration = Column(Integer, default=60)  # minutes
    estimate_type = Column(String(50), nullable=True)  # agent, office

    # Audit
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship("Client")
    project = relationship("Project")
    agent = relationship("Agent")
    items = relationship(
        "EstimateItem",
        back_populates="estimate",
        cascade="all, delete-orphan",
        order_by="EstimateItem.id",
    )


class EstimateItem(Base):
    __tablename__ = "estimate_items"

    id = Column(Integer, primary_key=True, index=True)
    estimate_id = Column(Integer, ForeignKey("estimates.id"), nullable=False, index=True)
    material_id = Column(Integer, ForeignKey("materials.id"), nullable=True)
    description = Column(Text, nullable=False)
    quantity = Column(Float, default=1)
    unit_price = Column(Float, default=0)
    amount = Column(Float, default=0)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    estimate = relationship("Estimate", back_populates="items")


class Invoice(Base):
    """Invoice model for client billing"""

    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True, index=True)
    estimate_id = Column(Integer, ForeignKey("estimates.id"), nullable=True)
    invoice_number = Column(String(50), nullable=False, index=True)

    # Dates
    issue_date = Column(DateTime, nullable=True)
    due_date = Column(DateTime, nullable=True)

    # Status
    status = Column(
        String(50), default="pending", nullable=False
    )  # pending, partially_paid, paid, cancelled, signed

    # Pricing
    subtotal = Column(Float, default=0)
    tax = Column(Float, default=0)
    discount = Column(Float, default=0)
    total = Column(Float, default=0)
    amount_paid = Column(Float, default=0)

    terms = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    contractor_signature = Column(Text, nullable=True)
    client_signature = Column(Text, nullable=True)

    # Audit
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    # Relationships
    client = relationship("Client")
    project = relationship("Project")
    contractor = relationship("Contractor")
    items = relationship(
        "InvoiceItem",
        back_populates="invoice",
        cascade="all, delete-orphan",
        order_by="InvoiceItem.id",
    )


class InvoiceItem(Base):
    __tablename__ = "invoice_items"

    id = Column(Integer, primary_key=True, index=True)
    invoice_id = Column(Integer, ForeignKey("invoices.id"), nullable=False, index=True)
    description = Column(Text, nullable=False)
    quantity = Column(Float, default=1)
    unit_price = Column(Float, default=0)
    amount = Column(Float, default=0)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    invoice = relationship("Invoice", back_populates="items")
