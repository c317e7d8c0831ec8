# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Validation and execution of pre/post switch hooks.

The command gate below is a static pattern filter. It rejects a superset
of risky shell syntax so the decision stays simple to audit, but it is a
heuristic and not a security boundary: hook text must still come from a
trusted source, because accepted commands run through the host shell.
"""
import logging
import re
import subprocess
from typing import List, Optional

import psutil

from ..MODELS.environment import Hook
from ..UTILS.cancellation import SwitchContext
from ..errors import HookExecutionError, HookValidationError, SwitchCancelledError

logger = logging.getLogger(__name__)

MAX_COMMAND_LENGTH = 1000

DANGEROUS_SUBSTRINGS = (
    ";rm -rf", "rm -rf /", ";curl", "|sh", "|bash",
    "`", "$(", "& ", "&&", "||", "|&",
)

DANGEROUS_WORDS = re.compile(r'\b(sudo|su|eval|exec|curl|wget)\b')

SAFE_COMMAND = re.compile(r'[a-zA-Z0-9\s\-_./=:@\[\]{}()"\']+')

# Combined stdout/stderr kept in error messages
_OUTPUT_LIMIT = 500


def validate_hook_command(command: str) -> None:
    """
    Checks a hook command against the command gate.

    :param command: The shell command text.
    :raises HookValidationError: With the reason, if the command is rejected.
    """
    if not command:
        raise HookValidationError("hook command cannot be empty")

    if len(command) > MAX_COMMAND_LENGTH:
        raise HookValidationError(f"hook command too long (max {MAX_COMMAND_LENGTH} characters)")

    lowered = command.lower()
    for pattern in DANGEROUS_SUBSTRINGS:
        if pattern in lowered:
            raise HookValidationError(f"hook command contains potentially dangerous pattern: {pattern}")

    match = DANGEROUS_WORDS.search(lowered)
    if match:
        raise HookValidationError(f"hook command contains potentially dangerous pattern: {match.group(1)}")

    if not SAFE_COMMAND.fullmatch(command):
        raise HookValidationError("hook command contains unsafe characters")


def is_safe_hook_command(command: str) -> bool:
    try:
        validate_hook_command(command)
    except HookValidationError:
        return False
    return True


class HookRunner:
    """
    Runs lifecycle hooks through the host shell, one at a time.
    """
    def __init__(self, shell_executable: Optional[str] = None):
        """
        :param shell_executable: Shell to use instead of the platform default.
        """
        self.shell_executable = shell_executable

    def run_hooks(self, hooks: List[Hook], phase: str, ctx: SwitchContext) -> None:
        """
        Runs hooks in order.

        A failing hook whose policy is ``continue`` is logged and skipped;
        any other failure stops the phase.

        :param hooks: Hooks to run.
        :param phase: Label used in hook names, e.g. ``pre-hook``.
        :param ctx: Context bounding every hook.
        :raises HookError: If a hook without the ``continue`` policy fails.
        """
        for index, hook in enumerate(hooks):
            name = f"{phase}-{index}"
            try:
                self.run_hook(hook, name, ctx)
            except (HookValidationError, HookExecutionError) as e:
                if hook.continue_on_error:
                    logger.warning("Ignoring failed %s: %s", name, e)
                    continue
                raise HookExecutionError(f"hook execution failed: {e}") from e

    def run_hook(self, hook: Hook, name: str, ctx: SwitchContext) -> str:
        """
        Validates then runs a single hook.

        :param hook: The hook.
        :param name: Identifier used in messages.
        :param ctx: Context bounding the run.
        :return: Combined stdout and stderr.
        :raises HookValidationError: If the command is rejected by the gate.
        :raises HookExecutionError: If it cannot start, exits non-zero, times out or the context is done.
        """
        try:
            validate_hook_command(hook.command)
        except HookValidationError as e:
            raise HookValidationError(f"hook '{name}' validation failed: {e}") from e

        try:
            ctx.check()
        except SwitchCancelledError as e:
            raise HookExecutionError(f"hook '{name}' not started: {e}") from e

        timeout = ctx.bound(hook.effective_timeout)
        logger.info("Running %s: %s", name, hook.command)

        try:
            process = subprocess.Popen(
                hook.command,
                shell=True,
                executable=self.shell_executable,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
            )
        except OSError as e:
            raise HookExecutionError(f"hook '{name}' could not start: {e}") from e

        try:
            output, _ = process.communicate(timeout=timeout)
        except subprocess.TimeoutExpired:
            _kill_tree(process.pid)
            output, _ = process.communicate()
            raise HookExecutionError(
                f"hook '{name}' timed out after {timeout:.1f}s (output: {_clip(output)})"
            )

        if process.returncode != 0:
            raise HookExecutionError(
                f"hook '{name}' failed: exit status {process.returncode} (output: {_clip(output)})"
            )
        return output or ""


def _kill_tree(pid: int) -> None:
    """
    Kills a process and its descendants; a shell's children outlive a
    plain kill of the shell.
    """
    try:
        parent = psutil.Process(pid)
    except psutil.NoSuchProcess:
        return
    procs = parent.children(recursive=True) + [parent]
    for proc in procs:
        try:
            proc.kill()
        except psutil.NoSuchProcess:
            pass
    psutil.wait_procs(procs, timeout=5)


def _clip(output: Optional[str]) -> str:
    text = (output or "").strip()
    if len(text) > _OUTPUT_LIMIT:
        return text[:_OUTPUT_LIMIT] + "..."
    return text
