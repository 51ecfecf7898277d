"""
Models for allure_uploader.

Immutable dataclasses, one per value flowing between the upload steps.
"""
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional, Tuple


CSRF_COOKIE_NAME = "csrf_access_token"


@dataclass(frozen=True)
class RunConfig:
    """Validated configuration for one upload run."""
    server_url: str
    results_directory: str
    project_id: str
    is_secure: bool = False
    security_user: Optional[str] = None
    security_pass: Optional[str] = field(default=None, repr=False)
    generate: bool = False
    clean_results: bool = False
    timeout: Optional[float] = None  # None disables the transport timeout

    @property
    def base_url(self) -> str:
        """Server URL with exactly one trailing slash."""
        return self.server_url.rstrip("/") + "/"


@dataclass(frozen=True)
class Session:
    """Cookie header and CSRF token obtained from the login endpoint."""
    cookie: str = ""
    csrf_token: Optional[str] = None

    @classmethod
    def empty(cls) -> "Session":
        return cls()

    @property
    def is_authenticated(self) -> bool:
        return bool(self.cookie)

    def headers(self, csrf: bool = False) -> Dict[str, str]:
        """Render request headers, leaving out the empty ones."""
        headers: Dict[str, str] = {}
        if csrf and self.csrf_token:
            headers["X-CSRF-TOKEN"] = self.csrf_token
        if self.cookie:
            headers["Cookie"] = self.cookie
        return headers


@dataclass(frozen=True)
class ApiResponse:
    """Decoded JSON body of a successful call, with the raw status and text kept for errors."""
    status_code: int
    text: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class FileSet:
    """Ordered result files discovered for upload."""
    directory: Path
    paths: Tuple[Path, ...] = ()

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self):
        return iter(self.paths)

    @property
    def is_empty(self) -> bool:
        return not self.paths


class ReportLinkSource(Enum):
    """Where a report link came from."""
    PREDICTED = "predicted"
    GENERATED = "generated"


@dataclass(frozen=True)
class ReportLink:
    url: str
    source: ReportLinkSource = ReportLinkSource.PREDICTED

    @classmethod
    def predicted(cls, base_url: str, project_id: str, report_id: int) -> "ReportLink":
        """Link to the report the next generation will produce."""
        url = f"{base_url}allure-docker-service-ui/projects/{project_id}/reports/{report_id}"
        return cls(url=url, source=ReportLinkSource.PREDICTED)

    @classmethod
    def generated(cls, url: str) -> "ReportLink":
        return cls(url=url, source=ReportLinkSource.GENERATED)


@dataclass(frozen=True)
class CIContext:
    """Identity of the CI run that invoked the upload."""
    server_url: str
    repo_owner: str
    repo_name: str
    run_id: str

    @property
    def run_url(self) -> str:
        return (
            f"{self.server_url.rstrip('/')}/{self.repo_owner}/{self.repo_name}"
            f"/actions/runs/{self.run_id}"
        )


class StepStatus(Enum):
    """Outcome of a single orchestration step."""
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    name: str
    status: StepStatus
    detail: Optional[str] = None

    @classmethod
    def ok(cls, name: str, detail: Optional[str] = None) -> "StepResult":
        return cls(name=name, status=StepStatus.SUCCEEDED, detail=detail)

    @classmethod
    def skipped(cls, name: str, detail: Optional[str] = None) -> "StepResult":
        return cls(name=name, status=StepStatus.SKIPPED, detail=detail)

    @classmethod
    def fail(cls, name: str, error: str) -> "StepResult":
        return cls(name=name, status=StepStatus.FAILED, detail=error)


@dataclass(frozen=True)
class RunResult:
    """Immutable summary of a finished run."""
    files: FileSet
    steps: Tuple[StepResult, ...] = ()
    report_link: Optional[ReportLink] = None

    @property
    def success(self) -> bool:
        return all(step.status != StepStatus.FAILED for step in self.steps)

    @property
    def nothing_to_do(self) -> bool:
        return self.files.is_empty

    def step(self, name: str) -> Optional[StepResult]:
        for step in self.steps:
            if step.name == name:
                return step
        return None
