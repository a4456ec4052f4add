"""Blocking invocation of external image tools."""

from __future__ import annotations

import subprocess
from typing import Sequence

from ..errors import ExternalToolFailure


def run_tool(argv: Sequence[str], *, timeout_s: float | None = None) -> subprocess.CompletedProcess[str]:
    cmd = [str(part) for part in argv]
    if not cmd:
        raise ValueError("Cannot run an empty command.")
    try:
        return subprocess.run(cmd, check=True, capture_output=True, text=True, timeout=timeout_s)
    except FileNotFoundError as exc:
        raise ExternalToolFailure(cmd, f"{cmd[0]} not found on PATH.") from exc
    except subprocess.CalledProcessError as exc:
        output = "\n".join(part for part in (exc.stdout, exc.stderr) if part)
        raise ExternalToolFailure(
            cmd,
            f"{cmd[0]} failed (exit={exc.returncode})",
            returncode=exc.returncode,
            output=output,
        ) from exc
    except subprocess.TimeoutExpired as exc:
        raise ExternalToolFailure(cmd, f"{cmd[0]} timed out after {timeout_s}s") from exc
