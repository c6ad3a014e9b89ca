from sqlalchemy import Column, Enum, Float, ForeignKey, JSON, String, Text
from sqlalchemy.orm import relationship
import enum

from app.platform.db.base import BaseModel


class RecommendationCategory(enum.Enum):
    performance = "Performance"
    accessibility = "Accessibility"
    best_practices = "Best Practices"
    seo = "SEO"


class RecommendationImpact(enum.Enum):
    high = "high"
    medium = "medium"
    low = "low"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Recommendation(BaseModel):
    """A failing audit turned into an actionable item. Immutable once written."""
    __tablename__ = "recommendations"

    scan_id = Column(String, ForeignKey("scans.id", ondelete="CASCADE"), nullable=False, index=True)

    category = Column(
        Enum(RecommendationCategory, values_callable=_enum_values), nullable=False, index=True
    )
    title = Column(String(512), nullable=False)
    description = Column(Text, nullable=True)
    impact = Column(Enum(RecommendationImpact), nullable=False)
    score = Column(Float, nullable=True)
    details = Column(JSON, nullable=True)

    scan = relationship("Scan", back_populates="recommendations")
