from dataclasses import dataclass
from typing import Any, AsyncContextManager, Optional, Protocol

from app.features.audit.schemas.report import AuditReport


@dataclass
class BrowserContext:
    """A running disposable browser the engine can attach to."""
    port: int
    driver: Optional[Any] = None


class AuditEngine(Protocol):
    def browser(self) -> AsyncContextManager[BrowserContext]:
        """Launch a disposable browser; it is shut down when the context exits."""
        ...

    async def audit(self, url: str, browser: BrowserContext) -> AuditReport:
        """Audit url inside browser. Raises EngineError on any engine failure."""
        ...
