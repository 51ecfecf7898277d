"""Core orchestrator - runs the upload steps in order."""
import logging
from typing import List, Optional

from ..config import load_ci_context
from ..errors import ConfigurationError, ReportIndexError, UpstreamError
from ..models import (
    ApiResponse,
    CIContext,
    FileSet,
    ReportLink,
    RunConfig,
    RunResult,
    Session,
    StepResult,
)
from ..protocols import IAllureAPI
from ..services.api_client import AllureAPIClient
from ..utils.events import (
    EventEmitter,
    REPORT_LINK,
    STEP_COMPLETE,
    STEP_FAIL,
    STEP_SKIP,
    STEP_START,
)
from .file_collector import FileCollector

log = logging.getLogger(__name__)

STEP_DISCOVER = "discover"
STEP_LOGIN = "login"
STEP_LATEST_REPORT = "latest-report"
STEP_CLEAN = "clean-results"
STEP_SEND = "send-results"
STEP_GENERATE = "generate-report"

STEPS = (
    STEP_DISCOVER,
    STEP_LOGIN,
    STEP_LATEST_REPORT,
    STEP_CLEAN,
    STEP_SEND,
    STEP_GENERATE,
)

EXECUTION_NAME = "GitHub Actions"


def predict_report_link(base_url: str, project_id: str, response: ApiResponse) -> ReportLink:
    """
    Predict the link of the report the next generation will create.

    The index's second ``reports_id`` entry is the newest numbered report;
    the next one gets that id plus one.
    """
    try:
        latest = response.data["data"]["project"]["reports_id"][1]
        report_id = int(latest) + 1
    except (KeyError, IndexError, TypeError, ValueError) as exc:
        raise ReportIndexError(
            "Failed to read latest report ID", response.status_code, response.text
        ) from exc
    return ReportLink.predicted(base_url, project_id, report_id)


class ResultsOrchestrator:
    """
    Uploads Allure results and triggers report generation.

    Usage:
        async with ResultsOrchestrator(config) as orchestrator:
            orchestrator.events.on("report_link", print)
            result = await orchestrator.run()
    """

    def __init__(
        self,
        config: RunConfig,
        ci_context: Optional[CIContext] = None,
        api_client: Optional[IAllureAPI] = None,
        file_collector: Optional[FileCollector] = None,
    ):
        """
        Initialize orchestrator with dependencies.

        Args:
            config: Validated run configuration
            ci_context: CI run identity; read from the environment when needed
            api_client: Pre-built API client (tests inject fakes here)
            file_collector: Result file discovery
        """
        self._config = config
        self._ci_context = ci_context
        self._external_api = api_client
        self._collector = file_collector or FileCollector()
        self._api: Optional[IAllureAPI] = None
        self._owned_client: Optional[AllureAPIClient] = None
        self.events = EventEmitter()

    async def __aenter__(self):
        if self._external_api is not None:
            self._api = self._external_api
        else:
            self._owned_client = AllureAPIClient(self._config.base_url, timeout=self._config.timeout)
            self._api = await self._owned_client.__aenter__()
        return self

    async def __aexit__(self, *args):
        if self._owned_client:
            await self._owned_client.__aexit__(*args)
            self._owned_client = None
        self._api = None

    @property
    def config(self) -> RunConfig:
        return self._config

    async def _start(self, name: str) -> None:
        await self.events.emit(STEP_START, name)

    async def _complete(self, steps: List[StepResult], result: StepResult) -> None:
        steps.append(result)
        await self.events.emit(STEP_COMPLETE, result)

    async def _skip(self, steps: List[StepResult], name: str, message: str) -> None:
        log.info(message)
        result = StepResult.skipped(name, message)
        steps.append(result)
        await self.events.emit(STEP_SKIP, result)

    async def _fail(self, steps: List[StepResult], name: str, exc: BaseException) -> None:
        result = StepResult.fail(name, str(exc))
        steps.append(result)
        await self.events.emit(STEP_FAIL, result)

    async def _announce(self, link: ReportLink) -> None:
        log.info("Allure Report Link: %s", link.url)
        await self.events.emit(REPORT_LINK, link)

    def _require_api(self) -> IAllureAPI:
        if self._api is None:
            raise RuntimeError("ResultsOrchestrator not initialized. Use 'async with' context.")
        return self._api

    async def discover(self) -> FileSet:
        return self._collector.collect_files(self._config.results_directory)

    async def login(self) -> Session:
        config = self._config
        if not config.security_user:
            raise ConfigurationError("No auth username provided")
        if not config.security_pass:
            raise ConfigurationError("No auth password provided")
        log.info("Logging in...")
        return await self._require_api().login(config.security_user, config.security_pass)

    async def fetch_latest_report(self, session: Session) -> ReportLink:
        response = await self._require_api().get_project(self._config.project_id, session)
        return predict_report_link(self._config.base_url, self._config.project_id, response)

    async def clean_results(self, session: Session) -> None:
        log.info("Cleaning results...")
        await self._require_api().clean_results(self._config.project_id, session)
        log.info("Done cleaning results")

    async def send_results(self, files: FileSet, session: Session) -> None:
        log.info("Sending results...")
        await self._require_api().send_results(self._config.project_id, files.paths, session)
        log.info("Done send-results")

    async def generate_report(self, session: Session) -> ReportLink:
        log.info("Generating report...")
        if self._ci_context is None:
            self._ci_context = load_ci_context()
        response = await self._require_api().generate_report(
            self._config.project_id,
            EXECUTION_NAME,
            self._ci_context.run_url,
            session,
        )
        report_url = (response.data.get("data") or {}).get("report_url")
        if not report_url:
            raise UpstreamError(
                "Failed to read generated report URL", response.status_code, response.text
            )
        return ReportLink.generated(report_url)

    async def run(self) -> RunResult:
        """
        Run every step in order; the first failure aborts the rest.

        Returns:
            RunResult with per-step outcomes and the final report link
        """
        config = self._config
        steps: List[StepResult] = []
        current = STEP_DISCOVER

        try:
            await self._start(current)
            files = await self.discover()
            if files.is_empty:
                log.info("No files found in directory. Exiting.")
                await self._complete(steps, StepResult.ok(current, "no files"))
                return RunResult(files=files, steps=tuple(steps))
            log.info("Found %d result files in %s", len(files), files.directory)
            await self._complete(steps, StepResult.ok(current, f"{len(files)} files"))

            # A missing CI identity must fail before the first request.
            if config.generate and self._ci_context is None:
                self._ci_context = load_ci_context()

            current = STEP_LOGIN
            if config.is_secure:
                await self._start(current)
                session = await self.login()
                await self._complete(steps, StepResult.ok(current))
            else:
                session = Session.empty()
                await self._skip(steps, current, "is-secure set to false, skipping login...")

            current = STEP_LATEST_REPORT
            await self._start(current)
            link = await self.fetch_latest_report(session)
            await self._announce(link)
            await self._complete(steps, StepResult.ok(current, link.url))

            current = STEP_CLEAN
            if config.clean_results:
                await self._start(current)
                await self.clean_results(session)
                await self._complete(steps, StepResult.ok(current))
            else:
                await self._skip(steps, current, "Not cleaning results...")

            current = STEP_SEND
            await self._start(current)
            await self.send_results(files, session)
            await self._complete(steps, StepResult.ok(current, f"{len(files)} files"))

            current = STEP_GENERATE
            if config.generate:
                await self._start(current)
                link = await self.generate_report(session)
                await self._announce(link)
                await self._complete(steps, StepResult.ok(current, link.url))
            else:
                await self._skip(steps, current, "Not generating report...")
        except Exception as exc:
            await self._fail(steps, current, exc)
            raise

        return RunResult(files=files, steps=tuple(steps), report_link=link)
