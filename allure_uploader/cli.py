"""Command line interface for allure_uploader."""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Optional, Sequence

import httpx
from rich.console import Console
from rich.logging import RichHandler

from . import __version__
from .actions import set_failed, set_output
from .cli_progress import StepProgressDisplay, render_configuration_summary
from .config import (
    INPUT_CLEAN_RESULTS,
    INPUT_GENERATE,
    INPUT_IS_SECURE,
    INPUT_PROJECT_ID,
    INPUT_RESULTS_DIRECTORY,
    INPUT_SECURITY_PASS,
    INPUT_SECURITY_USER,
    INPUT_SERVER_URL,
    ActionInputs,
    load_env_file,
    load_run_config,
)
from .errors import UploaderError
from .models import RunConfig, RunResult
from .orchestrator import ResultsOrchestrator

log = logging.getLogger(__name__)

REPORT_URL_OUTPUT = "report-url"

# argparse dest -> action input name
INPUT_FLAGS = {
    "allure_server_url": INPUT_SERVER_URL,
    "allure_results_directory": INPUT_RESULTS_DIRECTORY,
    "project_id": INPUT_PROJECT_ID,
    "is_secure": INPUT_IS_SECURE,
    "security_user": INPUT_SECURITY_USER,
    "security_pass": INPUT_SECURITY_PASS,
    "allure_generate": INPUT_GENERATE,
    "allure_clean_results": INPUT_CLEAN_RESULTS,
}


def _setup_logging(debug: bool, silent: bool, log_level: Optional[str]) -> str:
    """
    Configure logging.

    Progress lines are logged at INFO, so INFO is the default level.
    --silent keeps errors only. Returns the effective level name.
    """
    root_logger = logging.getLogger()
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    if debug:
        level = logging.DEBUG
    elif silent:
        level = logging.ERROR
    elif log_level:
        level = getattr(logging, log_level.upper(), logging.INFO)
    else:
        env_level = os.getenv("LOG_LEVEL")
        level = getattr(logging, (env_level or "INFO").upper(), logging.INFO)

    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        markup=False,
        show_time=False,
        show_path=False,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    # httpx logs every request at INFO; keep that for --debug.
    logging.getLogger("httpx").setLevel(logging.DEBUG if debug else logging.WARNING)
    return logging.getLevelName(level)


def _collect_overrides(args: argparse.Namespace) -> Dict[str, Optional[str]]:
    return {name: getattr(args, dest) for dest, name in INPUT_FLAGS.items()}


def _summary(config: RunConfig, env_file: Optional[Path], log_mode: str) -> Dict[str, object]:
    return {
        "Server": config.base_url,
        "Results": config.results_directory,
        "Project": config.project_id,
        "Secure": "yes" if config.is_secure else "no",
        "User": config.security_user,
        "Password": config.security_pass,
        "Clean Results": "yes" if config.clean_results else "no",
        "Generate": "yes" if config.generate else "no",
        "Timeout": f"{config.timeout:g}s" if config.timeout else "none",
        "Env File": str(env_file) if env_file else "-",
        "Logging": log_mode,
    }


async def _run_upload(config: RunConfig, display: Optional[StepProgressDisplay]) -> RunResult:
    async with ResultsOrchestrator(config) as orchestrator:
        if display is not None:
            display.attach(orchestrator.events)
        return await orchestrator.run()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="allure-upload",
        description=(
            "Upload Allure results to an Allure Docker Service server and "
            "optionally generate a report. Every option falls back to the "
            "matching INPUT_* environment variable set by the CI runner."
        ),
    )
    parser.add_argument("--allure-server-url", default=None, help="Allure server base URL")
    parser.add_argument(
        "--allure-results-directory",
        default=None,
        help="Results directory, or a glob pattern matching exactly one directory",
    )
    parser.add_argument("--project-id", default=None, help="Allure project id")
    parser.add_argument("--is-secure", default=None, help="true/false: log in before uploading")
    parser.add_argument("--security-user", default=None, help="Username for secure mode")
    parser.add_argument("--security-pass", default=None, help="Password for secure mode")
    parser.add_argument(
        "--allure-generate", default=None, help="true/false: generate a report after upload"
    )
    parser.add_argument(
        "--allure-clean-results",
        default=None,
        help="true/false: clean previous results before upload",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-request timeout in seconds (default: none)",
    )
    parser.add_argument(
        "--env-file",
        type=Path,
        default=None,
        help="Load environment variables from this .env file",
    )
    parser.add_argument("--no-summary", action="store_true", help="Skip the configuration panel")
    parser.add_argument("--debug", action="store_true", help="Enable debug logs")
    parser.add_argument("--silent", action="store_true", help="Only print errors")
    parser.add_argument(
        "--log-level",
        default=None,
        help="Explicit log level (DEBUG/INFO/WARNING/ERROR)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"allure-upload {__version__}",
    )
    return parser


def _fail(message: str) -> int:
    log.error(message)
    set_failed(message)
    return 1


def run_cli(argv: Optional[Sequence[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)

    used_env_file = args.env_file
    if used_env_file is not None:
        try:
            load_env_file(used_env_file)
        except UploaderError as exc:
            print(f"ERROR: {exc}", file=sys.stderr)
            set_failed(str(exc))
            return 1

    effective_log_mode = _setup_logging(
        debug=args.debug,
        silent=args.silent,
        log_level=args.log_level,
    )

    try:
        inputs = ActionInputs().with_overrides(_collect_overrides(args))
        config = load_run_config(inputs, timeout=args.timeout)
    except UploaderError as exc:
        return _fail(str(exc))

    display = None
    if not args.silent:
        if not args.no_summary:
            render_configuration_summary(_summary(config, used_env_file, effective_log_mode))
        display = StepProgressDisplay()

    try:
        result = asyncio.run(_run_upload(config, display))
    except KeyboardInterrupt:
        print("Cancelled.", file=sys.stderr)
        return 130
    except Exception as exc:
        if not isinstance(exc, (UploaderError, OSError, httpx.HTTPError)):
            log.debug("Unexpected %s", exc.__class__.__name__, exc_info=True)
        if display is not None:
            display.on_finish()
        return _fail(str(exc) or exc.__class__.__name__)

    if display is not None:
        display.on_finish()
    if result.report_link is not None:
        set_output(REPORT_URL_OUTPUT, result.report_link.url)
    return 0


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()
