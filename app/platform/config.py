from pathlib import Path
from typing import Literal, Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # ── App ─────────────────────────────────────
    APP_NAME: str = "WebPulse"
    ENVIRONMENT: Literal["local", "staging", "production"] = "local"
    DEBUG: bool = True

    # ── Database ────────────────────────────────
    DATABASE_URL: str = "sqlite+aiosqlite:///./webpulse.db"

    # ── Logging ─────────────────────────────────
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"

    # ── Scan orchestration ──────────────────────
    REPORTS_DIR: str = str(Path(__file__).parent.parent.parent / "reports")
    SCAN_BATCH_SIZE: int = 5
    DRAIN_INTERVAL_SECONDS: int = 300  # process pending scans every 5 minutes
    SCHEDULE_INTERVAL_SECONDS: int = 3600  # enqueue due websites every hour
    AUDIT_TIMEOUT_SECONDS: int = 180
    # a running scan older than the audit timeout plus this grace is considered stalled
    STALLED_SCAN_GRACE_SECONDS: int = 600
    REGRESSION_THRESHOLD: float = 0.05

    # inprocess: FastAPI lifespan owns the timers, celery: beat owns them
    SCHEDULER_BACKEND: Literal["inprocess", "celery", "disabled"] = "inprocess"

    # ── Audit engine ────────────────────────────
    LIGHTHOUSE_PATH: str = "lighthouse"
    LIGHTHOUSE_THROTTLING: bool = False
    CHROMEDRIVER_PATH: Optional[str] = None
    CHROME_BINARY: Optional[str] = None

    # ── Celery ──────────────────────────────────
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/1"
    CELERY_TASK_SERIALIZER: str = "json"
    CELERY_RESULT_SERIALIZER: str = "json"
    CELERY_ACCEPT_CONTENT: str = "json"
    CELERY_TASK_TIME_LIMIT: int = 3600  # 1 hour max per task

    # ── Email Configuration ─────────────────────
    MAIL_HOST: str = "smtp.gmail.com"
    MAIL_PORT: int = 587
    MAIL_USERNAME: str = "your-email-id"
    MAIL_PASSWORD: str = "your-password"
    MAIL_ENCRYPTION: str = "tls"
    MAIL_FROM_ADDRESS: str = "alerts@localhost"
    MAIL_FROM_NAME: str = "WebPulse"

    EMAIL_RELAY_URL: str = ""
    EMAIL_RELAY_API_KEY: str = ""
    EMAIL_RELAY_TIMEOUT: int = 30

    # ── Telegram ────────────────────────────────
    TELEGRAM_BOT_TOKEN: Optional[str] = None
    TELEGRAM_CHAT_ID: Optional[str] = None
    TELEGRAM_TIMEOUT: int = 10

    DASHBOARD_URL: str = "http://localhost:5173"

    class Config:
        env_file = str(Path(__file__).parent.parent.parent / ".env")
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


settings = Settings()
