from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class Contractor(Base):
    __tablename__ = "contractors"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password = Column(String(255), nullable=False)  # bcrypt hash
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    company_name = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    website = Column(String(255), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip = Column(String(20), nullable=True)
    country = Column(String(100), default="USA")
    role = Column(String(50), default="contractor", nullable=False)  # contractor, super_admin
    plan = Column(String(50), default="basic", nullable=True)  # basic, pro, business
    subscription_status = Column(
        String(50), default="trial", nullable=True
    )  # trial, active, inactive, cancelled
    plan_start_date = Column(DateTime, nullable=True)
    plan_end_date = Column(DateTime, nullable=True)
    stripe_customer_id = Column(String(255), nullable=True)
    stripe_subscription_id = Column(String(255), nullable=True)
    language = Column(String(10), default="en", nullable=False)
    settings = Column(JSON, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    clients = relationship("Client", back_populates="contractor")
    agents = relationship("Agent", back_populates="contractor", order_by="Agent.id")


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)
    cloudinary_folder = Column(String(255), nullable=True)  # Media folder for client photos

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    contractor = relationship("Contractor", back_populates="clients")


class Project(Base):
    __tablename__ = "projects"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    service_type = Column(String(100), nullable=True)
    status = Column(
        String(50), default="pending", nullable=False
    )  # pending, in_progress, completed, cancelled, on_hold
    budget = Column(Float, nullable=True)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    position = Column(Integer, default=0)  # Ordering within a status column
    ai_generated_description = Column(Text, nullable=True)
    last_ai_update = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    client = relationship("Client")


class Agent(Base):
    """Field agent who visits clients for estimates"""

    __tablename__ = "agents"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    role = Column(String(100), nullable=True)
    specialties = Column(JSON, nullable=True)  # list of service types
    hourly_rate = Column(Float, nullable=True)
    commission_rate = Column(Float, nullable=True)
    hire_date = Column(DateTime, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    contractor = relationship("Contractor", back_populates="agents")


class Event(Base):
    """Calendar entry (site visits, meetings, estimate appointments)"""

    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    start_time = Column(DateTime, nullable=False)
    end_time = Column(DateTime, nullable=False)
    type = Column(String(50), default="meeting")  # estimate, meeting, site-visit, installation
    status = Column(String(50), default="pending")  # pending, confirmed, completed, cancelled
    location = Column(String(255), nullable=True)
    address = Column(String(255), nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(100), nullable=True)
    zip = Column(String(20), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Material(Base):
    __tablename__ = "materials"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100), nullable=True)
    description = Column(Text, nullable=True)
    unit = Column(String(50), nullable=True)  # sq ft, linear ft, piece
    unit_price = Column(Float, default=0)
    supplier = Column(String(255), nullable=True)
    sku = Column(String(100), nullable=True)
    in_stock = Column(Boolean, default=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Attachment(Base):
    __tablename__ = "attachments"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    entity_type = Column(String(50), nullable=False)  # client, project, estimate, invoice, event
    entity_id = Column(Integer, nullable=False, index=True)
    file_name = Column(String(255), nullable=False)
    file_url = Column(String(1000), nullable=False)
    file_type = Column(String(100), nullable=True)
    size = Column(Integer, nullable=True)

    created_at = Column(DateTime, server_default=func.now())


class FollowUp(Base):
    __tablename__ = "follow_ups"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    title = Column(String(255), nullable=False)
    notes = Column(Text, nullable=True)
    due_date = Column(DateTime, nullable=True)
    status = Column(String(50), default="pending")  # pending, completed
    completed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class PropertyMeasurement(Base):
    __tablename__ = "property_measurements"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=True, index=True)
    project_id = Column(Integer, ForeignKey("projects.id"), nullable=True)
    property_type = Column(String(100), nullable=True)
    area_sq_ft = Column(Float, nullable=True)
    perimeter_ft = Column(Float, nullable=True)
    measurements = Column(JSON, nullable=True)  # free-form room/section breakdown
    notes = Column(Text, nullable=True)
    measured_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())


class PriceConfiguration(Base):
    __tablename__ = "price_configurations"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    service_type = Column(String(100), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    base_price = Column(Float, default=0)
    labor_rate = Column(Float, default=0)
    material_markup = Column(Float, default=0)  # percent
    unit = Column(String(50), nullable=True)
    is_default = Column(Boolean, default=False, nullable=False)
    settings = Column(JSON, nullable=True)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ServicePricing(Base):
    __tablename__ = "service_pricing"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    service_type = Column(String(100), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    unit = Column(String(50), default="sqft")
    labor_rate = Column(Float, default=0)
    labor_calculation_method = Column(String(50), default="by_area")  # by_area, by_length, fixed

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ClientMessage(Base):
    __tablename__ = "client_messages"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    client_id = Column(Integer, ForeignKey("clients.id"), nullable=False, index=True)
    subject = Column(String(255), nullable=False)
    message = Column(Text, nullable=False)
    message_type = Column(String(50), default="general")  # general, update, reminder
    priority = Column(String(20), default="normal")  # low, normal, high
    is_read = Column(Boolean, default=False, nullable=False)
    sent_via_email = Column(Boolean, default=False, nullable=False)
    email_sent_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, server_default=func.now())

    replies = relationship(
        "MessageReply",
        back_populates="message",
        cascade="all, delete-orphan",
        order_by="MessageReply.id",
    )


class MessageReply(Base):
    __tablename__ = "message_replies"

    id = Column(Integer, primary_key=True, index=True)
    message_id = Column(Integer, ForeignKey("client_messages.id"), nullable=False, index=True)
    sender_type = Column(String(20), nullable=False)  # contractor, client
    sender_id = Column(Integer, nullable=False)
    reply = Column(Text, nullable=False)

    created_at = Column(DateTime, server_default=func.now())

    message = relationship("ClientMessage", back_populates="replies")


class AiUsageLog(Base):
    """One row per AI call, counted against the monthly plan allowance"""

    __tablename__ = "ai_usage_logs"

    id = Column(Integer, primary_key=True, index=True)
    contractor_id = Column(Integer, ForeignKey("contractors.id"), nullable=False, index=True)
    feature = Column(String(100), nullable=False)  # analyze_job_cost, job_description, ...
    usage_month = Column(String(7), nullable=False, index=True)  # YYYY-MM

    created_at = Column(DateTime, server_default=func.now())
