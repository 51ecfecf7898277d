"""
allure_uploader - push Allure results to an Allure Docker Service server.

One run discovers the result files, optionally logs in, predicts the next
report link, optionally cleans old results, uploads the files and optionally
generates the report.

Usage:
    from allure_uploader import ResultsOrchestrator, ActionInputs, load_run_config

    config = load_run_config(ActionInputs())
    async with ResultsOrchestrator(config) as orchestrator:
        result = await orchestrator.run()
    print(result.report_link.url)
"""
__version__ = "0.1.0"

from .config import ActionInputs, load_ci_context, load_run_config, parse_flag
from .errors import (
    ConfigurationError,
    ReportIndexError,
    ResultsDirectoryError,
    UploaderError,
    UpstreamError,
)
from .models import (
    CIContext,
    FileSet,
    ReportLink,
    ReportLinkSource,
    RunConfig,
    RunResult,
    Session,
    StepResult,
    StepStatus,
)
from .orchestrator import FileCollector, ResultsOrchestrator
from .services import AllureAPIClient

__all__ = [
    # Main
    "ResultsOrchestrator",
    "FileCollector",
    "AllureAPIClient",
    # Config
    "ActionInputs",
    "load_run_config",
    "load_ci_context",
    "parse_flag",
    # Models
    "RunConfig",
    "Session",
    "FileSet",
    "ReportLink",
    "ReportLinkSource",
    "CIContext",
    "StepResult",
    "StepStatus",
    "RunResult",
    # Errors
    "UploaderError",
    "ConfigurationError",
    "UpstreamError",
    "ReportIndexError",
    "ResultsDirectoryError",
]
