"""Input reading and validation for an upload run."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Tuple

import httpx

from .errors import ConfigurationError
from .models import CIContext, RunConfig


INPUT_SERVER_URL = "allure-server-url"
INPUT_RESULTS_DIRECTORY = "allure-results-directory"
INPUT_PROJECT_ID = "project-id"
INPUT_IS_SECURE = "is-secure"
INPUT_SECURITY_USER = "security-user"
INPUT_SECURITY_PASS = "security-pass"
INPUT_GENERATE = "allure-generate"
INPUT_CLEAN_RESULTS = "allure-clean-results"

DEFAULT_GITHUB_SERVER_URL = "https://github.com"


def input_env_name(name: str) -> str:
    """Environment variable holding an action input (``INPUT_<NAME>``)."""
    return f"INPUT_{name.replace(' ', '_').upper()}"


class ActionInputs:
    """
    Named string inputs with required/optional semantics.

    Values come from ``INPUT_*`` environment variables, the way the CI
    runner passes action inputs, and may be overridden explicitly.
    """

    def __init__(
        self,
        environ: Optional[Mapping[str, str]] = None,
        overrides: Optional[Mapping[str, Optional[str]]] = None,
    ):
        self._environ = os.environ if environ is None else environ
        self._overrides: Dict[str, str] = {
            key: value for key, value in (overrides or {}).items() if value is not None
        }

    def with_overrides(self, overrides: Mapping[str, Optional[str]]) -> "ActionInputs":
        merged = dict(self._overrides)
        merged.update({k: v for k, v in overrides.items() if v is not None})
        return ActionInputs(self._environ, merged)

    def get(self, name: str, required: bool = False) -> str:
        if name in self._overrides:
            value = self._overrides[name]
        else:
            value = self._environ.get(input_env_name(name), "")
        value = value.strip()
        if required and not value:
            raise ConfigurationError(f"Input required and not supplied: {name}")
        return value


def parse_flag(name: str, value: str) -> bool:
    """Parse a ``"true"``/``"false"`` input, rejecting anything else."""
    if value == "true":
        return True
    if value == "false":
        return False
    raise ConfigurationError(f"{name} has to be true/false")


def _parse_timeout(value: Optional[float]) -> Optional[float]:
    if value is None:
        return None
    if value <= 0:
        raise ConfigurationError(f"timeout must be positive, got {value}")
    return float(value)


def _check_server_url(server_url: str) -> None:
    try:
        url = httpx.URL(server_url)
    except httpx.InvalidURL as exc:
        raise ConfigurationError(f"{INPUT_SERVER_URL} is not a valid URL: {exc}") from exc
    if url.scheme not in ("http", "https") or not url.host:
        raise ConfigurationError(
            f"{INPUT_SERVER_URL} must be an http(s) URL, got {server_url!r}"
        )


def load_run_config(inputs: ActionInputs, timeout: Optional[float] = None) -> RunConfig:
    """
    Read and validate every input.

    All three flags are parsed here so an invalid value aborts the run
    before any file is read or any request is sent.
    """
    server_url = inputs.get(INPUT_SERVER_URL, required=True)
    results_directory = inputs.get(INPUT_RESULTS_DIRECTORY, required=True)
    project_id = inputs.get(INPUT_PROJECT_ID, required=True)
    is_secure = parse_flag(INPUT_IS_SECURE, inputs.get(INPUT_IS_SECURE, required=True))
    generate = parse_flag(INPUT_GENERATE, inputs.get(INPUT_GENERATE, required=True))
    clean_results = parse_flag(
        INPUT_CLEAN_RESULTS, inputs.get(INPUT_CLEAN_RESULTS, required=True)
    )

    _check_server_url(server_url)

    return RunConfig(
        server_url=server_url,
        results_directory=results_directory,
        project_id=project_id,
        is_secure=is_secure,
        security_user=inputs.get(INPUT_SECURITY_USER) or None,
        security_pass=inputs.get(INPUT_SECURITY_PASS) or None,
        generate=generate,
        clean_results=clean_results,
        timeout=_parse_timeout(timeout),
    )


def load_ci_context(environ: Optional[Mapping[str, str]] = None) -> CIContext:
    """Build the CI run identity from the runner's ``GITHUB_*`` variables."""
    env = os.environ if environ is None else environ
    repository = env.get("GITHUB_REPOSITORY", "")
    owner, _, repo = repository.partition("/")
    if not owner or not repo:
        raise ConfigurationError(
            "GITHUB_REPOSITORY must be set like 'owner/repo' to generate a report"
        )
    run_id = env.get("GITHUB_RUN_ID", "")
    if not run_id:
        raise ConfigurationError("GITHUB_RUN_ID must be set to generate a report")
    return CIContext(
        server_url=env.get("GITHUB_SERVER_URL") or DEFAULT_GITHUB_SERVER_URL,
        repo_owner=owner,
        repo_name=repo,
        run_id=run_id,
    )


def _parse_env_line(raw_line: str) -> Optional[Tuple[str, str]]:
    line = raw_line.strip()
    if line.startswith("export "):
        line = line[len("export "):].lstrip()
    if not line or line.startswith("#"):
        return None
    key, sep, value = line.partition("=")
    key = key.strip()
    if not sep or not key:
        return None
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in "'\"":
        value = value[1:-1]
    return key, value


def load_env_file(path: Path, override: bool = False) -> List[str]:
    """
    Copy ``KEY=VALUE`` lines from a .env file into ``os.environ``.

    Only used with an explicit ``--env-file``; variables the runner already
    set win unless ``override`` is true. Returns the keys that were set.
    """
    if not path.is_file():
        reason = "not a file" if path.exists() else "not found"
        raise ConfigurationError(f"env file {reason}: {path}")
    try:
        lines = path.read_text(encoding="utf-8").splitlines()
    except OSError as exc:
        raise ConfigurationError(f"could not read env file {path}: {exc}") from exc

    loaded: List[str] = []
    for entry in filter(None, map(_parse_env_line, lines)):
        key, value = entry
        if override or key not in os.environ:
            os.environ[key] = value
            loaded.append(key)
    return loaded
