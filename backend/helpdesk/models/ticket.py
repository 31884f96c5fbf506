# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20261019v1
# ---------------------------------------------------------------------------
"""Ticket and TicketImage ORM models."""

import enum

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from helpdesk.database import Base


class Priority(str, enum.Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


class WorkType(str, enum.Enum):
    INSTALL = "INSTALL"
    REMOVAL = "REMOVAL"


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_name = Column(String(255), nullable=False)
    city = Column(String(255), nullable=False)
    contact_person = Column(String(255), nullable=True)
    contact_info = Column(String(255), nullable=True)
    priority = Column(
        Enum(Priority, name="ticket_priority"),
        nullable=False,
        default=Priority.LOW,
        server_default=Priority.LOW.value,
    )
    work_type = Column(Enum(WorkType, name="ticket_work_type"), nullable=True)
    lease = Column(Boolean, nullable=False, default=False)
    under_warranty = Column(Boolean, nullable=False, default=False)
    machine_model_or_type = Column(String(255), nullable=True)
    issue_description = Column(Text, nullable=True)
    requesting_tech_name = Column(String(255), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # Assigning a new list replaces the set: orphans are deleted on flush.
    images = relationship(
        "TicketImage",
        back_populates="ticket",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="TicketImage.id",
    )


class TicketImage(Base):
    __tablename__ = "ticket_images"

    id = Column(Integer, primary_key=True, autoincrement=True)
    ticket_id = Column(
        Integer,
        ForeignKey("tickets.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    url = Column(String(2048), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    ticket = relationship("Ticket", back_populates="images")
