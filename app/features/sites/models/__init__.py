from app.features.sites.models.website import ScanFrequency, Website, WebsiteStatus

__all__ = ["ScanFrequency", "Website", "WebsiteStatus"]
