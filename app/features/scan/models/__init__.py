"""
Scan models package.

Importing it registers every mapped class the scan core touches.
"""
from app.features.auth.models.user import User
from app.features.sites.models.website import Website
from app.features.scan.models.scan import Scan, ScanStatus
from app.features.scan.models.recommendation import (
    Recommendation,
    RecommendationCategory,
    RecommendationImpact,
)

__all__ = [
    "User",
    "Website",
    "Scan",
    "ScanStatus",
    "Recommendation",
    "RecommendationCategory",
    "RecommendationImpact",
]
