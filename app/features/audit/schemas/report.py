"""
Normalized audit report.

The engine hands back a Lighthouse result (LHR); the scan core only reads the
subset modelled here and keeps the raw document for the on-disk artifact.
"""
from collections import defaultdict
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

# Lighthouse category id -> category name used across WebPulse
CATEGORY_NAMES = {
    "performance": "Performance",
    "accessibility": "Accessibility",
    "best-practices": "Best Practices",
    "seo": "SEO",
    "pwa": "PWA",
}


class AuditItem(BaseModel):
    """One Lighthouse audit and the categories that reference it."""
    id: str
    title: str
    description: Optional[str] = None
    score: Optional[float] = None
    score_display_mode: Optional[str] = None
    numeric_value: Optional[float] = None
    details: Optional[Dict[str, Any]] = None
    categories: List[str] = Field(default_factory=list)


class AuditReport(BaseModel):
    category_scores: Dict[str, Optional[float]] = Field(default_factory=dict)
    audits: List[AuditItem] = Field(default_factory=list)
    raw: Dict[str, Any] = Field(default_factory=dict)

    def category_score(self, category_id: str) -> Optional[float]:
        return self.category_scores.get(category_id)

    def get_audit(self, audit_id: str) -> Optional[AuditItem]:
        for item in self.audits:
            if item.id == audit_id:
                return item
        return None

    def numeric_value(self, audit_id: str) -> Optional[float]:
        item = self.get_audit(audit_id)
        return item.numeric_value if item else None

    @classmethod
    def from_lighthouse(cls, lhr: Dict[str, Any]) -> "AuditReport":
        categories = lhr.get("categories") or {}

        membership: Dict[str, List[str]] = defaultdict(list)
        category_scores: Dict[str, Optional[float]] = {}
        for category_id, category in categories.items():
            category_scores[category_id] = category.get("score")
            for ref in category.get("auditRefs") or []:
                membership[ref["id"]].append(category_id)

        audits = []
        for audit_id, audit in (lhr.get("audits") or {}).items():
            audits.append(
                AuditItem(
                    id=audit.get("id", audit_id),
                    title=audit.get("title") or audit_id,
                    description=audit.get("description"),
                    score=audit.get("score"),
                    score_display_mode=audit.get("scoreDisplayMode"),
                    numeric_value=audit.get("numericValue"),
                    details=audit.get("details"),
                    categories=membership.get(audit_id, []),
                )
            )

        return cls(category_scores=category_scores, audits=audits, raw=lhr)
