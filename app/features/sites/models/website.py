from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, Index, String
from sqlalchemy.orm import relationship
import enum

from app.platform.db.base import BaseModel


class WebsiteStatus(enum.Enum):
    pending = "pending"
    active = "active"
    error = "error"


class ScanFrequency(enum.Enum):
    """Periodic scan frequency options"""
    hourly = "hourly"
    daily = "daily"
    weekly = "weekly"
    monthly = "monthly"


class Website(BaseModel):
    """
    A monitored website.

    Scheduling fields are owned by the scan core:
    - status flips to active when a scan is enqueued
    - last_scan_at / next_scan_at are only written after a completed scan
    Everything else is owner settings. next_scan_at must be recomputed from
    scan_frequency on create and on frequency change (see sites.services.website).
    """
    __tablename__ = "websites"

    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    url = Column(String, nullable=False)
    name = Column(String, nullable=True)

    scan_frequency = Column(Enum(ScanFrequency), default=ScanFrequency.daily, nullable=False)
    last_scan_at = Column(DateTime, nullable=True)
    next_scan_at = Column(DateTime, nullable=True)
    status = Column(Enum(WebsiteStatus), default=WebsiteStatus.pending, nullable=False, index=True)

    # Notification preferences
    email_notifications = Column(Boolean, default=True, nullable=False)
    telegram_notifications = Column(Boolean, default=False, nullable=False)

    user = relationship("User", back_populates="websites", lazy="selectin")

    __table_args__ = (
        Index("ix_websites_status_next_scan_at", "status", "next_scan_at"),
    )

    @property
    def display_name(self) -> str:
        return self.name or self.url

    def __repr__(self):
        return f"<Website(id={self.id}, url={self.url}, status={self.status})>"
