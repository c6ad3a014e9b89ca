from typing import Any, Dict, List, Optional

from app.features.audit.schemas.report import AuditReport
from app.features.scan.models.recommendation import RecommendationCategory, RecommendationImpact

# Lighthouse category id -> recommendation category. PWA findings are not reported.
RECOMMENDATION_CATEGORIES = {
    "performance": RecommendationCategory.performance,
    "accessibility": RecommendationCategory.accessibility,
    "best-practices": RecommendationCategory.best_practices,
    "seo": RecommendationCategory.seo,
}

# Display modes that never describe a finding
_SKIPPED_DISPLAY_MODES = {"notApplicable", "manual"}


def classify_impact(score: Optional[float]) -> RecommendationImpact:
    if score is None:
        return RecommendationImpact.medium
    if score < 0.5:
        return RecommendationImpact.high
    if score < 0.9:
        return RecommendationImpact.medium
    return RecommendationImpact.low


def extract_recommendations(scan_id: str, report: AuditReport) -> List[Dict[str, Any]]:
    """
    Turn every imperfect audit of a known category into a recommendation row.

    An audit referenced by several categories yields one row per category.
    """
    rows = []
    for audit in report.audits:
        if audit.score_display_mode in _SKIPPED_DISPLAY_MODES:
            continue
        if audit.score is not None and audit.score >= 1:
            continue

        for category_id in audit.categories:
            category = RECOMMENDATION_CATEGORIES.get(category_id)
            if category is None:
                continue
            rows.append(
                {
                    "scan_id": scan_id,
                    "category": category,
                    "title": audit.title,
                    "description": audit.description,
                    "impact": classify_impact(audit.score),
                    "score": audit.score,
                    "details": audit.details,
                }
            )
    return rows
