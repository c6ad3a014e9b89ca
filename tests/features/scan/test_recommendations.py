import pytest

from app.features.audit.schemas.report import AuditReport
from app.features.scan.models.recommendation import RecommendationCategory, RecommendationImpact
from app.features.scan.services.recommendations import classify_impact, extract_recommendations


@pytest.mark.parametrize(
    "score,impact",
    [
        (None, RecommendationImpact.medium),
        (0, RecommendationImpact.high),
        (0.49, RecommendationImpact.high),
        (0.5, RecommendationImpact.medium),
        (0.89, RecommendationImpact.medium),
        (0.9, RecommendationImpact.low),
        (0.99, RecommendationImpact.low),
    ],
)
def test_classify_impact(score, impact):
    assert classify_impact(score) == impact


class TestExtractRecommendations:
    def test_one_row_per_imperfect_audit_and_category(self, report):
        rows = extract_recommendations("scan-1", report)

        summary = sorted((row["title"], row["category"].value, row["impact"].value) for row in rows)
        assert summary == sorted(
            [
                ("Eliminate render-blocking resources", "Performance", "high"),
                ("Image elements do not have [alt] attributes", "Accessibility", "high"),
                ("Image elements do not have [alt] attributes", "SEO", "high"),
                (
                    "Background and foreground colors do not have a sufficient contrast ratio.",
                    "Accessibility",
                    "medium",
                ),
                ("Browser errors were logged to the console", "Best Practices", "medium"),
                ("Document has a meta description", "SEO", "low"),
            ]
        )
        assert all(row["scan_id"] == "scan-1" for row in rows)

    def test_details_and_score_are_carried(self, report):
        rows = extract_recommendations("scan-1", report)
        render_blocking = next(r for r in rows if r["category"] == RecommendationCategory.performance)

        assert render_blocking["score"] == 0.3
        assert render_blocking["description"] == "Resources are blocking the first paint of your page."
        assert render_blocking["details"]["items"][0]["url"] == "https://example.com/app.css"

    def test_not_applicable_and_manual_audits_are_skipped(self, lhr):
        lhr["audits"]["color-contrast"]["scoreDisplayMode"] = "manual"
        rows = extract_recommendations("scan-1", AuditReport.from_lighthouse(lhr))

        titles = {row["title"] for row in rows}
        assert not any("viewport" in title for title in titles)
        assert not any("contrast" in title for title in titles)

    def test_pwa_audits_are_not_reported(self, lhr):
        lhr["categories"]["pwa"] = {"score": 0.3, "auditRefs": [{"id": "installable-manifest"}]}
        lhr["audits"]["installable-manifest"] = {
            "id": "installable-manifest",
            "title": "Web app manifest does not meet the installability requirements",
            "score": 0,
            "scoreDisplayMode": "binary",
        }

        rows = extract_recommendations("scan-1", AuditReport.from_lighthouse(lhr))

        assert len(rows) == 6

    def test_perfect_report_has_no_recommendations(self):
        report = AuditReport.from_lighthouse(
            {
                "categories": {"performance": {"score": 1, "auditRefs": [{"id": "speed-index"}]}},
                "audits": {
                    "speed-index": {"id": "speed-index", "title": "Speed Index", "score": 1, "numericValue": 900}
                },
            }
        )

        assert extract_recommendations("scan-1", report) == []
