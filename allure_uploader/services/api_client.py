"""HTTP adapter for the Allure Docker Service API."""
from __future__ import annotations

import contextlib
import logging
import mimetypes
from pathlib import Path
from typing import Optional, Sequence
from urllib.parse import urlencode

import httpx

from ..errors import UpstreamError
from ..models import ApiResponse, Session
from .session import session_from_set_cookie

log = logging.getLogger(__name__)

API_PREFIX = "allure-docker-service"
UPLOAD_FIELD = "files[]"


class AllureAPIClient:
    """
    HTTP client adapter for the Allure server.

    Implements IAllureAPI protocol. Every method awaits the full response
    and raises UpstreamError on any non-2xx status; nothing is retried.
    """

    def __init__(self, base_url: str, timeout: Optional[float] = None):
        self._base_url = base_url.rstrip("/") + "/"
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return self._base_url

    async def __aenter__(self):
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(self._timeout),
        )
        return self

    async def __aexit__(self, *args):
        if self._client:
            await self._client.aclose()
            self._client = None

    def _require_client(self) -> httpx.AsyncClient:
        if not self._client:
            raise RuntimeError("AllureAPIClient not initialized. Use 'async with' context.")
        return self._client

    @staticmethod
    def _check(response: httpx.Response, operation: str) -> httpx.Response:
        if not response.is_success:
            raise UpstreamError(operation, response.status_code, response.text)
        return response

    @staticmethod
    def _json(response: httpx.Response, operation: str) -> ApiResponse:
        try:
            payload = response.json()
        except ValueError as exc:
            raise UpstreamError(
                f"{operation}: response is not JSON", response.status_code, response.text
            ) from exc
        if not isinstance(payload, dict):
            raise UpstreamError(
                f"{operation}: unexpected response", response.status_code, response.text
            )
        return ApiResponse(response.status_code, response.text, payload)

    async def login(self, username: str, password: str) -> Session:
        client = self._require_client()
        response = await client.post(
            f"{API_PREFIX}/login",
            json={"username": username, "password": password},
        )
        self._check(response, "Failed to log in")
        set_cookies = response.headers.get_list("set-cookie")
        log.debug("Login returned %d cookies", len(set_cookies))
        return session_from_set_cookie(set_cookies)

    async def get_project(self, project_id: str, session: Session) -> ApiResponse:
        operation = "Failed to fetch latest report ID"
        client = self._require_client()
        response = await client.get(
            f"{API_PREFIX}/projects/{project_id}",
            headers=session.headers(),
        )
        self._check(response, operation)
        return self._json(response, operation)

    async def clean_results(self, project_id: str, session: Session) -> None:
        client = self._require_client()
        response = await client.get(
            f"{API_PREFIX}/clean-results",
            params={"project_id": project_id},
            headers=session.headers(),
        )
        self._check(response, "Failed to clean results")

    async def send_results(
        self,
        project_id: str,
        files: Sequence[Path],
        session: Session,
    ) -> None:
        """POST every file as a repeated ``files[]`` multipart part."""
        client = self._require_client()
        with contextlib.ExitStack() as stack:
            parts = []
            for path in files:
                handle = stack.enter_context(open(path, "rb"))
                content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
                parts.append((UPLOAD_FIELD, (path.name, handle, content_type)))
            response = await client.post(
                f"{API_PREFIX}/send-results",
                params={"project_id": project_id},
                files=parts,
                headers=session.headers(csrf=True),
            )
        self._check(response, "Failed to send results")

    async def generate_report(
        self,
        project_id: str,
        execution_name: str,
        execution_from: str,
        session: Session,
    ) -> ApiResponse:
        operation = "Failed to generate report"
        client = self._require_client()
        # urlencode gives "GitHub+Actions" and a singly percent-encoded run URL.
        query = urlencode({
            "project_id": project_id,
            "execution_name": execution_name,
            "execution_from": execution_from,
        })
        response = await client.get(
            f"{API_PREFIX}/generate-report?{query}",
            headers=session.headers(csrf=True),
        )
        self._check(response, operation)
        return self._json(response, operation)
