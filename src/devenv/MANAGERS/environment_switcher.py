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
Orchestration of environment switches: dependency levels, per-service
state capture, parallel switching, rollback and lifecycle hooks.
"""
import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, List, Optional

from ..MODELS.environment import Environment
from ..MODELS.switch_result import ServiceGroup, SwitchOptions, SwitchProgress, SwitchResult
from ..RUNNERS.dependency_resolver import DependencyResolver
from ..RUNNERS.hook_runner import HookRunner
from ..UTILS.cancellation import SwitchContext
from ..errors import (
    ConfigurationError,
    DevEnvError,
    HookError,
    PreHookError,
    RegistrationError,
    ServiceSwitchError,
    SwitchAbortedError,
)
from .switcher_registry import SwitcherRegistry

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[SwitchProgress], None]

# time allowed to restore services once the switch context is spent
ROLLBACK_GRACE_PERIOD = 30.0


class EnvironmentSwitcher:
    """
    Switches every service of an environment to its target configuration.

    Services are switched level by level in dependency order. The state of
    each service is captured before it is touched so that, on failure, every
    captured service can be restored in one best-effort sweep.
    """
    def __init__(self,
                 registry: Optional[SwitcherRegistry] = None,
                 on_progress: Optional[ProgressCallback] = None,
                 hook_runner: Optional[HookRunner] = None):
        """
        Initializes the switcher.

        :param registry: Switchers available to this instance.
        :param on_progress: Called after each completed level.
        :param hook_runner: Runs pre and post hooks.
        """
        self.registry = registry if registry is not None else SwitcherRegistry()
        self.on_progress = on_progress
        self.hook_runner = hook_runner or HookRunner()

    def set_progress_callback(self, callback: Optional[ProgressCallback]) -> None:
        self.on_progress = callback

    def available_services(self) -> List[str]:
        return self.registry.available_services()

    def switch_environment(self,
                           env: Environment,
                           options: Optional[SwitchOptions] = None,
                           ctx: Optional[SwitchContext] = None) -> SwitchResult:
        """
        Switches to ``env``.

        :param env: The target environment.
        :param options: Dry-run, parallelism, rollback and timeout settings.
        :param ctx: Ambient context; ``options.timeout`` is applied on top of it.
        :return: The result of a switch that ran every level.
        :raises EnvironmentValidationError: If the environment is unusable. Nothing was touched.
        :raises DependencyError: If the dependencies cannot be resolved. Nothing was touched.
        :raises PreHookError: If a pre-hook failed. No service was touched.
        :raises SwitchAbortedError: If a level failed; the result is on the exception.
        """
        options = options or SwitchOptions()
        started = time.monotonic()
        start_time = datetime.now(timezone.utc)

        env.ensure_valid()
        groups = DependencyResolver(env.services, env.dependencies).parallel_groups()
        ctx = (ctx or SwitchContext()).with_timeout(options.timeout)

        result = SwitchResult()
        logger.info("Switching to environment %s (%d levels%s)",
                    env.name, len(groups), ", dry-run" if options.dry_run else "")

        with self.registry.frozen():
            try:
                self.hook_runner.run_hooks(env.pre_hooks, "pre-hook", ctx)
            except HookError as e:
                result.success = False
                result.add_error("pre-hook", str(e))
                result.duration = time.monotonic() - started
                logger.error("Pre-hooks failed, no service was switched: %s", e)
                raise PreHookError(str(e), result=result) from e

            previous_states: Dict[str, Any] = {}
            total = len(env.services)
            completed = 0

            for group in groups:
                failure = self._switch_group(env, group, previous_states, result, options, ctx)
                if failure:
                    if options.rollback_on_error:
                        self._rollback(previous_states, result, self._rollback_context(ctx))
                    result.success = False
                    result.duration = time.monotonic() - started
                    logger.error("Switch to %s aborted at level %d: %s", env.name, group.level, failure)
                    raise SwitchAbortedError(failure, result=result)

                result.switched_services.extend(group.services)
                completed += len(group.services)
                logger.info("Level %d done: %s", group.level, ", ".join(group.services))
                self._report_progress(group, total, completed, start_time, result)

            try:
                self.hook_runner.run_hooks(env.post_hooks, "post-hook", ctx)
            except HookError as e:
                logger.warning("Post-hooks failed: %s", e)
                result.add_error("post-hook", str(e))

        result.duration = time.monotonic() - started
        return result

    def _switch_group(self,
                      env: Environment,
                      group: ServiceGroup,
                      previous_states: Dict[str, Any],
                      result: SwitchResult,
                      options: SwitchOptions,
                      ctx: SwitchContext) -> Optional[str]:
        """
        Switches the services of one level.

        In parallel mode every service runs to completion and failures are
        aggregated; sequentially the level stops at the first failure.

        :return: None on success, otherwise the error message for the level.
        """
        lock = threading.Lock()

        def record(name: str, error: Exception) -> None:
            with lock:
                result.failed_services.append(name)
                result.add_error(name, str(error))

        if options.parallel and len(group.services) > 1:
            with ThreadPoolExecutor(max_workers=len(group.services),
                                    thread_name_prefix=f"devenv-level-{group.level}") as pool:
                futures = [
                    (name, pool.submit(self._switch_service, env, name, previous_states, options, ctx))
                    for name in group.services
                ]
                errors: List[str] = []
                for name, future in futures:
                    error = future.exception()
                    if error is not None:
                        record(name, error)
                        errors.append(str(error))
            if errors:
                return f"parallel switch failed: {'; '.join(errors)}"
            return None

        for name in group.services:
            try:
                self._switch_service(env, name, previous_states, options, ctx)
            except DevEnvError as e:
                record(name, e)
                return str(e)
        return None

    def _switch_service(self,
                        env: Environment,
                        name: str,
                        previous_states: Dict[str, Any],
                        options: SwitchOptions,
                        ctx: SwitchContext) -> None:
        """
        Captures the state of one service, then applies its configuration
        unless this is a dry run.
        """
        ctx.check()

        switcher = self.registry.get(name)
        if switcher is None:
            raise RegistrationError(f"no switcher registered for service: {name}")

        config = self.registry.config_for(name, env.services[name])
        if config is None:
            raise ConfigurationError(f"no configuration provided for service: {name}")

        try:
            state = switcher.get_current_state(ctx)
        except Exception as e:
            raise ServiceSwitchError(name, f"failed to get current state for {name}: {e}") from e
        # distinct services never share a key, so concurrent units may write here
        previous_states[name] = state

        if options.dry_run:
            logger.info("[dry-run] Would switch %s", name)
            return

        logger.debug("Switching %s", name)
        try:
            switcher.switch(ctx, config)
        except Exception as e:
            raise ServiceSwitchError(name, f"failed to switch {name}: {e}") from e

    @staticmethod
    def _rollback_context(ctx: SwitchContext) -> SwitchContext:
        """
        Returns the context rollback runs under: the switch context while
        it is live, otherwise a fresh one bounded by ROLLBACK_GRACE_PERIOD.
        """
        if ctx.cancelled:
            logger.info("Switch context is done, rolling back within %.0fs", ROLLBACK_GRACE_PERIOD)
            return SwitchContext(timeout=ROLLBACK_GRACE_PERIOD)
        return ctx

    def _rollback(self, previous_states: Dict[str, Any], result: SwitchResult, ctx: SwitchContext) -> None:
        """
        Restores every captured service, in no particular order. Failures
        are collected into a single ``rollback`` error; nothing is retried.
        """
        logger.info("Rolling back %d service(s)", len(previous_states))
        failures: List[str] = []

        for name, state in list(previous_states.items()):
            switcher = self.registry.get(name)
            if switcher is None:
                failures.append(f"no switcher for {name}")
                continue
            try:
                switcher.rollback(ctx, state)
            except Exception as e:
                logger.error("Rollback of %s failed: %s", name, e)
                failures.append(f"{name}: {e}")

        result.rollback_performed = True
        if failures:
            result.add_error("rollback", "; ".join(failures))

    def _report_progress(self,
                         group: ServiceGroup,
                         total: int,
                         completed: int,
                         start_time: datetime,
                         result: SwitchResult) -> None:
        if self.on_progress is None:
            return

        now = datetime.now(timezone.utc)
        elapsed = (now - start_time).total_seconds()
        remaining = total - completed
        if completed > 0:
            estimated_end = now + timedelta(seconds=elapsed * remaining / completed)
        else:
            estimated_end = now

        self.on_progress(SwitchProgress(
            total_services=total,
            completed_services=completed,
            status=f"Completed group {group.level}",
            current_service=", ".join(group.services),
            start_time=start_time,
            estimated_end=estimated_end,
            errors=list(result.errors),
        ))
