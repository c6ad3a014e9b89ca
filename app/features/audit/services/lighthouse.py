import asyncio
import json
from contextlib import asynccontextmanager
from typing import List, Optional

from selenium import webdriver
from selenium.common.exceptions import WebDriverException
from selenium.webdriver.chrome.options import Options
from selenium.webdriver.chrome.service import Service
from webdriver_manager.chrome import ChromeDriverManager

from app.features.audit.schemas.report import AuditReport
from app.features.audit.services.engine import BrowserContext
from app.platform.config import settings
from app.platform.exceptions import EngineError
from app.platform.logger import get_logger

logger = get_logger(__name__)

_STDERR_TAIL = 500


class LighthouseEngine:
    """
    Audit engine backed by the Lighthouse CLI.

    Each audit gets its own headless Chrome started through Selenium; Lighthouse
    attaches to it over the DevTools port and prints the LHR JSON on stdout.
    """

    def __init__(
        self,
        lighthouse_path: str = None,
        throttling: bool = None,
        chromedriver_path: Optional[str] = None,
        chrome_binary: Optional[str] = None,
    ):
        self.lighthouse_path = lighthouse_path or settings.LIGHTHOUSE_PATH
        self.throttling = settings.LIGHTHOUSE_THROTTLING if throttling is None else throttling
        self.chromedriver_path = chromedriver_path or settings.CHROMEDRIVER_PATH
        self.chrome_binary = chrome_binary or settings.CHROME_BINARY

    def build_driver(self) -> webdriver.Chrome:
        chrome_options = Options()
        chrome_options.add_argument("--headless=new")
        chrome_options.add_argument("--no-sandbox")
        chrome_options.add_argument("--disable-dev-shm-usage")
        chrome_options.add_argument("--disable-setuid-sandbox")
        if self.chrome_binary:
            chrome_options.binary_location = self.chrome_binary

        if self.chromedriver_path:
            driver_service = Service(executable_path=self.chromedriver_path)
        else:
            driver_service = Service(ChromeDriverManager().install())
        return webdriver.Chrome(service=driver_service, options=chrome_options)

    @staticmethod
    def debugger_port(driver) -> int:
        """DevTools port chromedriver opened for this browser."""
        address = driver.capabilities.get("goog:chromeOptions", {}).get("debuggerAddress")
        if not address:
            raise EngineError("Chrome did not expose a DevTools debugger address")
        return int(address.rsplit(":", 1)[1])

    @asynccontextmanager
    async def browser(self):
        try:
            driver = await asyncio.to_thread(self.build_driver)
        except WebDriverException as e:
            raise EngineError(f"Could not launch Chrome: {e.msg or e}") from e

        logger.info("Launched headless Chrome for audit")
        try:
            yield BrowserContext(port=self.debugger_port(driver), driver=driver)
        finally:
            try:
                await asyncio.to_thread(driver.quit)
                logger.info("Closed headless Chrome")
            except WebDriverException as e:
                logger.warning(f"Chrome did not shut down cleanly: {e}")

    def build_command(self, url: str, port: int) -> List[str]:
        cmd = [
            self.lighthouse_path,
            url,
            f"--port={port}",
            "--output=json",
            "--output-path=stdout",
            "--quiet",
        ]
        if not self.throttling:
            cmd.append("--throttling-method=provided")
        return cmd

    async def audit(self, url: str, browser: BrowserContext) -> AuditReport:
        cmd = self.build_command(url, browser.port)
        logger.info(f"Running Lighthouse for {url}")

        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise EngineError(f"Could not start Lighthouse ({self.lighthouse_path}): {e}") from e

        try:
            stdout, stderr = await proc.communicate()
        finally:
            # cancelled by the caller's timeout: do not leave Lighthouse behind
            if proc.returncode is None:
                proc.kill()
                await proc.wait()

        if proc.returncode != 0:
            tail = stderr.decode(errors="replace")[-_STDERR_TAIL:].strip()
            raise EngineError(f"Lighthouse exited with code {proc.returncode}: {tail}")

        try:
            lhr = json.loads(stdout)
        except ValueError as e:
            raise EngineError("Lighthouse produced an unreadable report") from e

        runtime_error = lhr.get("runtimeError")
        if runtime_error:
            raise EngineError(
                f"Lighthouse runtime error {runtime_error.get('code')}: {runtime_error.get('message')}"
            )
        if not lhr.get("categories"):
            raise EngineError("Lighthouse report has no categories")

        return AuditReport.from_lighthouse(lhr)
