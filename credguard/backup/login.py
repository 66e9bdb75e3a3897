"""Run the external credential login command with a deadline."""

import asyncio
from typing import Sequence

from .._utils import logger
from .models import LoginOutcome, LoginResult

DRAIN_TIMEOUT = 5.0  # seconds to collect output after killing a timed-out command


async def run_login_command(command: Sequence[str], timeout: float) -> LoginResult:
    """Run ``command`` and capture its output.

    Args:
        command: Program and arguments, e.g. ``["codex", "login"]``
        timeout: Seconds before the process is killed

    Returns:
        LoginResult whose outcome separates a missing binary, a timeout and
        a non-zero exit
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except FileNotFoundError:
        logger.warning(f"Login command not found: {command[0]}")
        return LoginResult(
            outcome=LoginOutcome.NOT_FOUND,
            message=f"{command[0]} not found, check that it is installed and on PATH",
        )

    try:
        stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except asyncio.TimeoutError:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        # A child of the command (e.g. a browser) may still hold the pipes open
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout=DRAIN_TIMEOUT)
        except asyncio.TimeoutError:
            stdout, stderr = b"", b""
        logger.warning(f"Login command timed out after {timeout}s")
        return LoginResult(
            outcome=LoginOutcome.TIMEOUT,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
            exit_code=process.returncode or 0,
            message=f"{' '.join(command)} timed out after {timeout}s",
        )

    exit_code = process.returncode or 0
    if exit_code != 0:
        logger.warning(f"Login command exited with code {exit_code}")
        return LoginResult(
            outcome=LoginOutcome.FAILED,
            stdout=_decode(stdout),
            stderr=_decode(stderr),
            exit_code=exit_code,
            message=f"{' '.join(command)} exited with code {exit_code}",
        )

    logger.info("Login command completed")
    return LoginResult(outcome=LoginOutcome.OK, stdout=_decode(stdout), stderr=_decode(stderr))


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace") if data else ""
