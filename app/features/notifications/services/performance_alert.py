"""Rendering of performance regression alerts."""
import os
from dataclasses import dataclass

from jinja2 import Environment, FileSystemLoader, select_autoescape

from app.platform.config import settings

current_dir = os.path.dirname(os.path.abspath(__file__))
template_dir = os.path.join(current_dir, "../template")

if not os.path.exists(template_dir):
    template_dir = os.path.join(os.getcwd(), "app/features/notifications/template")

env = Environment(loader=FileSystemLoader(template_dir), autoescape=select_autoescape(["html"]))


@dataclass
class PerformanceAlert:
    website_id: str
    site_name: str
    previous_score: float
    current_score: float

    @property
    def drop(self) -> float:
        return self.previous_score - self.current_score

    @property
    def dashboard_url(self) -> str:
        return f"{settings.DASHBOARD_URL}/websites/{self.website_id}"

    @property
    def subject(self) -> str:
        return f"Performance Alert: {self.site_name}"

    def render_email(self) -> str:
        template = env.get_template("performance_alert.html")
        return template.render(
            site_name=self.site_name,
            drop=self.drop,
            previous_score=self.previous_score,
            current_score=self.current_score,
            dashboard_url=self.dashboard_url,
        )

    def render_telegram(self) -> str:
        return (
            f"<b>Performance Alert</b>\n"
            f"{self.site_name} dropped by {self.drop * 100:.1f}%\n"
            f"Previous score: {self.previous_score * 100:.1f}%\n"
            f"Current score: {self.current_score * 100:.1f}%"
        )
