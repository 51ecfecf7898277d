"""GitHub Actions workflow commands and step outputs."""
from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Mapping, Optional, TextIO


def running_in_actions(environ: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if environ is None else environ
    return env.get("GITHUB_ACTIONS") == "true"


def escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def set_failed(
    message: str,
    environ: Optional[Mapping[str, str]] = None,
    stream: Optional[TextIO] = None,
) -> None:
    """Annotate the workflow run with an ``::error::`` command."""
    if not running_in_actions(environ):
        return
    out = stream or sys.stdout
    out.write(f"::error::{escape_data(message)}\n")
    out.flush()


def set_output(
    name: str,
    value: str,
    environ: Optional[Mapping[str, str]] = None,
) -> bool:
    """
    Publish a step output through the ``GITHUB_OUTPUT`` file.

    Returns False when no output file is configured.
    """
    env = os.environ if environ is None else environ
    output_file = env.get("GITHUB_OUTPUT")
    if not output_file:
        return False
    with Path(output_file).open("a", encoding="utf-8") as handle:
        handle.write(f"{name}={value}\n")
    return True
