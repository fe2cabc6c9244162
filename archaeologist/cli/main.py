# The MIT License (MIT)
# Copyright © 2025 Entrius

"""
Archaeologist CLI - Main entry point

Usage:
    archaeologist run                 - Handle one GitHub event (defaults to GITHUB_EVENT_NAME / GITHUB_EVENT_PATH)
    archaeologist config              - Show effective configuration
    archaeologist diff OLD NEW        - Compare two local .d.ts files
    archaeologist label-check ...     - Evaluate the semver label policy locally
"""

import asyncio
import json
from dataclasses import asdict
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from archaeologist import __version__
from archaeologist.checks import CheckReportingError
from archaeologist.classes import CheckConclusion, CheckRun
from archaeologist.config import load_config
from archaeologist.dts import render_patch, strip_version
from archaeologist.events import trigger_from_event
from archaeologist.labels import CHECK_STATUSES, get_check_status
from archaeologist.orchestrator import run_orchestration
from archaeologist.utils.logging import setup_events_logger
from archaeologist.utils.utils import mask_secret

console = Console()

SECRET_KEYS = ('api_token', 'circle_token')
CONCLUSION_STYLES = {
    CheckConclusion.SUCCESS: 'green',
    CheckConclusion.NEUTRAL: 'yellow',
    CheckConclusion.FAILURE: 'red',
    CheckConclusion.PENDING: 'dim',
}


def print_check_run(check_run: CheckRun) -> None:
    style = CONCLUSION_STYLES[check_run.conclusion]
    body = f'[bold]{check_run.title}[/bold]\n\ncommit: {check_run.head_sha}\nelapsed: {check_run.elapsed_seconds:.1f}s'
    console.print(Panel(body, title=f'{check_run.name}: {check_run.conclusion.value}', border_style=style))


@click.group()
@click.version_option(version=__version__, prog_name='archaeologist')
def cli():
    """Archaeologist - watch the generated electron.d.ts for API changes"""
    pass


@cli.command('run')
@click.option('--event-name', envvar='GITHUB_EVENT_NAME', required=True, help='GitHub event name')
@click.option(
    '--event-path',
    envvar='GITHUB_EVENT_PATH',
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help='Path to the JSON event payload',
)
@click.option('--env-file', type=click.Path(dir_okay=False), default=None, help='.env file to load')
def run_command(event_name: str, event_path: str, env_file: str):
    """Handle one pull_request or check_run event."""
    config = load_config(env_file)
    if config.events_log_dir:
        setup_events_logger(config.events_log_dir, config.events_retention_size)

    payload = json.loads(Path(event_path).read_text())
    trigger = trigger_from_event(event_name, payload, config)
    if trigger is None:
        console.print(f'[dim]Nothing to do for {event_name} event[/dim]')
        return

    try:
        check_run = asyncio.run(run_orchestration(trigger, config))
    except CheckReportingError as e:
        console.print(f'[red]Error reporting check: {e}[/red]')
        raise SystemExit(1)

    print_check_run(check_run)
    if check_run.conclusion is CheckConclusion.FAILURE:
        raise SystemExit(1)


@cli.command('config')
@click.option('--env-file', type=click.Path(dir_okay=False), default=None, help='.env file to load')
def config_command(env_file: str):
    """Show the effective configuration."""
    config = load_config(env_file)

    table = Table(show_header=True, title='Archaeologist Configuration')
    table.add_column('Setting', style='cyan')
    table.add_column('Value', style='green')

    for key, value in asdict(config).items():
        str_val = mask_secret(value) if key in SECRET_KEYS else str(value)
        table.add_row(key, str_val)

    console.print(table)


@cli.command('diff')
@click.argument('old', type=click.Path(exists=True, dir_okay=False))
@click.argument('new', type=click.Path(exists=True, dir_okay=False))
def diff_command(old: str, new: str):
    """Compare two electron.d.ts files the way the check does."""
    old_document = strip_version(Path(old).read_text(encoding='utf-8'))
    new_document = strip_version(Path(new).read_text(encoding='utf-8'))

    if old_document == new_document:
        console.print('[green]No Changes[/green]')
        return

    console.print('[yellow]Changes Detected[/yellow]')
    console.print(Syntax(render_patch(old_document, new_document), 'diff'))


@cli.command('label-check')
@click.option('--label', 'labels', multiple=True, help='PR label, repeat in PR order')
@click.option('--changes/--no-changes', default=True, help='Whether the API surface changed')
def label_check_command(labels, changes: bool):
    """Evaluate the semver label policy for a set of labels."""
    status = get_check_status(list(labels), changes)
    outcome = next(name for name, candidate in CHECK_STATUSES.items() if candidate is status)
    style = CONCLUSION_STYLES[status.conclusion]

    console.print(f'[{style}]{status.conclusion.value}[/{style}] {status.title} ({outcome})')
    if status.summary:
        console.print(f'[dim]{status.summary}[/dim]')


def main():
    """Main entry point for the CLI"""
    cli()


if __name__ == '__main__':
    main()
