"""
Execution of external command-line tools on behalf of service switchers.
"""
import logging
import subprocess
from typing import List

from .cancellation import SwitchContext

logger = logging.getLogger(__name__)


class CommandError(RuntimeError):
    """Raised when a tool exits non-zero, times out or cannot be started."""


def run_tool(ctx: SwitchContext, args: List[str]) -> str:
    """
    Runs a tool to completion within the context's deadline.

    Args:
        ctx: Context bounding the run.
        args: Executable and arguments. Never passed through a shell.

    Returns:
        The tool's stripped standard output.

    Raises:
        CommandError: If the tool fails for any reason.
    """
    ctx.check()
    logger.debug("Running: %s", " ".join(args))
    try:
        completed = subprocess.run(
            args,
            capture_output=True,
            text=True,
            timeout=ctx.remaining(),
            shell=False,
        )
    except FileNotFoundError:
        raise CommandError(f"{args[0]}: command not found")
    except subprocess.TimeoutExpired:
        raise CommandError(f"{' '.join(args)}: timed out")

    if completed.returncode != 0:
        detail = completed.stderr.strip() or f"exit code {completed.returncode}"
        raise CommandError(f"{' '.join(args)}: {detail}")
    return completed.stdout.strip()


def read_tool(ctx: SwitchContext, args: List[str]) -> str:
    """
    Like :func:`run_tool` but never fails: any error yields an empty string.
    Used for state capture, where an unset value is a valid state.
    """
    try:
        return run_tool(ctx, args)
    except CommandError as e:
        logger.debug("Ignoring failed read: %s", e)
        return ""
