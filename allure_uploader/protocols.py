"""
Protocols (Interfaces) for Dependency Inversion.

The orchestrator only talks to these, so tests can inject fakes.
"""
from pathlib import Path
from typing import Protocol, Sequence, runtime_checkable

from .models import ApiResponse, Session


@runtime_checkable
class IAllureAPI(Protocol):
    """Interface for the Allure server operations used by a run."""

    base_url: str

    async def login(self, username: str, password: str) -> Session:
        """Authenticate and return the session cookie and CSRF token."""
        ...

    async def get_project(self, project_id: str, session: Session) -> ApiResponse:
        """Fetch the project's report index."""
        ...

    async def clean_results(self, project_id: str, session: Session) -> None:
        """Discard results uploaded but not yet reported."""
        ...

    async def send_results(
        self, project_id: str, files: Sequence[Path], session: Session
    ) -> None:
        """Upload result files."""
        ...

    async def generate_report(
        self,
        project_id: str,
        execution_name: str,
        execution_from: str,
        session: Session,
    ) -> ApiResponse:
        """Trigger report generation."""
        ...
