from sqlalchemy import Column, DateTime, Enum, Float, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship
import enum

from app.platform.db.base import BaseModel


class ScanStatus(enum.Enum):
    """Scan state machine: pending -> running -> completed | failed"""
    pending = "pending"
    running = "running"
    completed = "completed"
    failed = "failed"


TERMINAL_STATUSES = (ScanStatus.completed, ScanStatus.failed)

CATEGORY_SCORE_FIELDS = (
    "performance_score",
    "accessibility_score",
    "best_practices_score",
    "seo_score",
    "pwa_score",
)

METRIC_FIELDS = (
    "first_contentful_paint",
    "largest_contentful_paint",
    "cumulative_layout_shift",
    "total_blocking_time",
    "time_to_interactive",
    "speed_index",
)


class Scan(BaseModel):
    """
    One audit attempt of a website (the work record).

    Scores and metrics stay NULL until the scan completes; error_message is
    only set when it fails. Rows are kept as history and never deleted here.
    """
    __tablename__ = "scans"

    website_id = Column(String, ForeignKey("websites.id", ondelete="CASCADE"), nullable=False, index=True)

    status = Column(Enum(ScanStatus), default=ScanStatus.pending, nullable=False, index=True)
    start_time = Column(DateTime, nullable=True)
    end_time = Column(DateTime, nullable=True)

    # Category scores (0-1)
    performance_score = Column(Float, nullable=True)
    accessibility_score = Column(Float, nullable=True)
    best_practices_score = Column(Float, nullable=True)
    seo_score = Column(Float, nullable=True)
    pwa_score = Column(Float, nullable=True)

    # Web vitals: seconds, except total_blocking_time (ms) and CLS (unitless)
    first_contentful_paint = Column(Float, nullable=True)
    largest_contentful_paint = Column(Float, nullable=True)
    cumulative_layout_shift = Column(Float, nullable=True)
    total_blocking_time = Column(Float, nullable=True)
    time_to_interactive = Column(Float, nullable=True)
    speed_index = Column(Float, nullable=True)

    report_path = Column(String, nullable=True)
    error_message = Column(Text, nullable=True)

    recommendations = relationship("Recommendation", back_populates="scan", lazy="raise")

    __table_args__ = (
        Index("idx_scans_website_status_created", "website_id", "status", "created_at"),
    )

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def __repr__(self):
        return f"<Scan(id={self.id}, website_id={self.website_id}, status={self.status})>"
