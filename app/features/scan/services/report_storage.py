import asyncio
import json
from pathlib import Path
from typing import Any, Dict, Union

from app.platform.config import settings
from app.platform.logger import get_logger

logger = get_logger(__name__)


class ReportStorage:
    """Writes the raw engine report of a scan to <reports_dir>/<scan_id>.json."""

    def __init__(self, reports_dir: Union[str, Path] = None):
        self.reports_dir = Path(reports_dir or settings.REPORTS_DIR)

    def relative_path(self, scan_id: str) -> str:
        return f"{self.reports_dir.name}/{scan_id}.json"

    def absolute_path(self, scan_id: str) -> Path:
        return self.reports_dir / f"{scan_id}.json"

    def _write(self, scan_id: str, report: Dict[str, Any]) -> None:
        self.reports_dir.mkdir(parents=True, exist_ok=True)
        self.absolute_path(scan_id).write_text(json.dumps(report), encoding="utf-8")

    async def save(self, scan_id: str, report: Dict[str, Any]) -> str:
        """Persist the report verbatim and return the path stored on the scan."""
        await asyncio.to_thread(self._write, scan_id, report)
        return self.relative_path(scan_id)

    def load(self, scan_id: str) -> Dict[str, Any]:
        return json.loads(self.absolute_path(scan_id).read_text(encoding="utf-8"))

    async def discard(self, scan_id: str) -> None:
        """Remove the report of a scan that did not complete; a missing file is fine."""
        try:
            await asyncio.to_thread(self.absolute_path(scan_id).unlink, missing_ok=True)
        except OSError as e:
            logger.error(f"Could not remove report of scan {scan_id}: {e}")
