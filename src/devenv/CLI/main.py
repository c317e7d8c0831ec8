"""
Command Line Interface for DevEnv.
"""
import logging

import click

from ..MANAGERS.environment_manager import EnvironmentManager
from ..MANAGERS.environment_switcher import EnvironmentSwitcher
from ..MANAGERS.switcher_registry import SwitcherRegistry
from ..MODELS.switch_result import SwitchOptions, SwitchProgress, SwitchResult
from ..RUNNERS.dependency_resolver import DependencyResolver
from ..SWITCHERS.defaults import register_default_switchers
from ..UTILS.durations import parse_duration
from ..errors import DevEnvError, SwitchAbortedError


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.option('--env-file', type=click.Path(dir_okay=False), default=None,
              help='.env file providing variables for ${VAR} interpolation')
@click.pass_context
def cli(ctx, verbose, env_file):
    """
    DevEnv - switch development environments atomically.

    Switches cloud accounts, container runtimes, cluster contexts and SSH
    profiles to a target state in dependency order, rolling back on failure.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    ctx.ensure_object(dict)
    ctx.obj['env_file'] = env_file


def _manager(ctx) -> EnvironmentManager:
    try:
        return EnvironmentManager(env_file=ctx.obj.get('env_file'))
    except DevEnvError as e:
        raise click.ClickException(str(e))


def _load(ctx, env_name, from_file):
    if bool(env_name) == bool(from_file):
        raise click.UsageError("Specify exactly one of --env or --from-file.")
    manager = _manager(ctx)
    try:
        if from_file:
            return manager.load_file(from_file)
        return manager.load(env_name)
    except DevEnvError as e:
        raise click.ClickException(f"failed to load environment: {e}")


def _report_progress(progress: SwitchProgress):
    click.echo(
        f"Progress: {progress.percentage:.1f}% "
        f"({progress.completed_services}/{progress.total_services}) - {progress.status}"
    )
    if progress.current_service:
        click.echo(f"   Current: {progress.current_service}")


def _display_result(result: SwitchResult):
    click.echo("\nSwitch Results:")
    click.echo(f"  Duration: {result.duration:.2f}s")
    click.echo(f"  Success: {result.success}")
    if result.switched_services:
        click.echo(f"  Switched: {', '.join(result.switched_services)}")
    if result.failed_services:
        click.echo(f"  Failed: {', '.join(result.failed_services)}")
    if result.rollback_performed:
        click.echo("  Rollback: performed")
    if result.errors:
        click.echo("\nErrors:")
        for err in result.errors:
            click.echo(f"  [{err.time.strftime('%H:%M:%S')}] {err.service}: {err.error}")


@cli.command('switch-all')
@click.option('--env', 'env_name', default=None, help='Environment name to switch to')
@click.option('--from-file', type=click.Path(dir_okay=False), default=None,
              help='Environment configuration file')
@click.option('--dry-run', is_flag=True, help='Preview changes without applying')
@click.option('--force', is_flag=True, help='Switch without confirmation')
@click.option('--parallel', is_flag=True, help='Switch services of the same level in parallel')
@click.option('--no-rollback', is_flag=True, help='Leave services as they are on failure')
@click.option('--timeout', default='5m', show_default=True, help='Timeout for the whole switch')
@click.pass_context
def switch_all(ctx, env_name, from_file, dry_run, force, parallel, no_rollback, timeout):
    """Switch all services of an environment."""
    env = _load(ctx, env_name, from_file)
    try:
        timeout_seconds = parse_duration(timeout)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint='--timeout')

    if not force and not dry_run:
        click.echo(f"About to switch to environment: {env.name}")
        if env.description:
            click.echo(f"  Description: {env.description}")
        click.echo(f"  Services: {', '.join(env.service_names())}")
        if not click.confirm("Continue?", default=False):
            raise click.ClickException("operation canceled by user")

    registry = register_default_switchers(SwitcherRegistry())
    switcher = EnvironmentSwitcher(registry, on_progress=_report_progress)
    options = SwitchOptions(
        dry_run=dry_run,
        force=force,
        parallel=parallel,
        rollback_on_error=not no_rollback,
        timeout=timeout_seconds or None,
    )

    click.echo(f"Switching to environment: {env.name}")
    if dry_run:
        click.echo("DRY-RUN MODE: no changes will be made")

    try:
        result = switcher.switch_environment(env, options)
    except SwitchAbortedError as e:
        if e.result is not None:
            _display_result(e.result)
        raise click.ClickException(f"environment switch failed: {e}")
    except DevEnvError as e:
        raise click.ClickException(f"environment switch failed: {e}")

    _display_result(result)
    click.echo(f"Successfully switched to environment: {env.name}")


@cli.command()
@click.option('--env', 'env_name', default=None, help='Environment name')
@click.option('--from-file', type=click.Path(dir_okay=False), default=None,
              help='Environment configuration file')
@click.pass_context
def plan(ctx, env_name, from_file):
    """Show the order in which services would switch."""
    env = _load(ctx, env_name, from_file)
    try:
        env.ensure_valid()
        groups = DependencyResolver(env.services, env.dependencies).resolve()
    except DevEnvError as e:
        raise click.ClickException(str(e))

    click.echo(f"Environment: {env.name}")
    for group in groups:
        click.echo(f"  Level {group.level}: {', '.join(group.services)}")


@cli.command('list')
@click.pass_context
def list_environments(ctx):
    """List available environments."""
    manager = _manager(ctx)
    environments = manager.list_environments()
    if not environments:
        click.echo(f"No environments found in {manager.search_paths[0]}")
        return
    for env in environments:
        line = f"{env.name:20}"
        if env.description:
            line += f" {env.description}"
        click.echo(line.rstrip())


@cli.command()
def services():
    """List services that can be switched."""
    registry = register_default_switchers(SwitcherRegistry())
    for name in registry.available_services():
        click.echo(name)


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
