#!/usr/bin/env python3
"""
Markdown note to Buttondown draft CLI

This is the main entry point for the Buttondown publisher. The `draft`
command runs the whole pipeline for a single note:

1. Read the note (title from frontmatter or file name)
2. Find local image references in the text
3. Resize oversized images and upload them to Buttondown
4. Rewrite each uploaded reference to the hosted URL
5. Create a Buttondown email draft from the result

Architecture:
- NoteParser: Reads the note and its frontmatter title
- VaultAssetResolver: Finds referenced images inside the vault directory
- run_pipeline: Scans, uploads, rewrites and publishes
- result_notices: Turns the pipeline result into messages for the user

Settings (API key, resize side, resize limit) are stored in a JSON file
and edited with the `config` commands.

Usage:
    uv run main.py config set --api-key XXXX
    uv run main.py draft notes/post.md --vault notes
"""

import sys
from pathlib import Path

import click
from loguru import logger

from buttondown_publisher.models import PipelineResult, ResizeMode, RunStatus
from buttondown_publisher.note import NoteParser
from buttondown_publisher.notices import result_notices
from buttondown_publisher.pipeline import run_pipeline
from buttondown_publisher.resolver import VaultAssetResolver
from buttondown_publisher.settings import (
    DEFAULT_SETTINGS_PATH,
    Settings,
    SettingsError,
    load_settings,
    save_settings,
)


def configure_logging(verbose: bool) -> None:
    """
    Route loguru output to stderr

    Args:
        verbose: Log at DEBUG level with full formatting instead of INFO
    """
    logger.remove()
    if verbose:
        logger.add(sys.stderr, level="DEBUG")
    else:
        logger.add(sys.stderr, level="INFO", format="<level>{message}</level>")


def mask_key(api_key: str) -> str:
    """
    Hide most of an API key for display

    Args:
        api_key: Key to mask

    Returns:
        First four characters followed by asterisks, or a placeholder
    """
    if not api_key:
        return "(not set)"
    return f"{api_key[:4]}****" if len(api_key) > 8 else "****"


def read_settings(path: Path) -> Settings:
    """
    Load settings, reporting problems as click errors

    Args:
        path: Settings file location

    Returns:
        Loaded settings
    """
    try:
        return load_settings(path)
    except SettingsError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.option(
    "--settings",
    "settings_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_SETTINGS_PATH,
    envvar="BUTTONDOWN_SETTINGS",
    show_default=True,
    help="Settings file path",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="Enable verbose logging",
)
@click.pass_context
def cli(ctx: click.Context, settings_path: Path, verbose: bool) -> None:
    """Send markdown notes to Buttondown as drafts"""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["settings_path"] = settings_path


@cli.command()
@click.argument(
    "note",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--vault",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Directory searched for images (default: the note's directory)",
)
@click.option(
    "--title",
    default=None,
    help="Draft subject (default: frontmatter title or file name)",
)
@click.option(
    "--strip-frontmatter/--keep-frontmatter",
    default=False,
    help="Send the note without its frontmatter block (default: keep)",
)
@click.option(
    "--api-key",
    envvar="BUTTONDOWN_API_KEY",
    default=None,
    help="API key for this run, overriding the settings file",
)
@click.pass_context
def draft(
    ctx: click.Context,
    note: Path,
    vault: Path | None,
    title: str | None,
    strip_frontmatter: bool,
    api_key: str | None,
) -> None:
    """
    Create a Buttondown draft from a note

    Uploads every local image the note references, rewrites the references
    to the hosted URLs and sends the result as a draft. Exits with status 1
    if no API key is configured or the draft could not be created.
    """
    try:
        settings: Settings = read_settings(ctx.obj["settings_path"]).with_overrides(api_key=api_key)
    except SettingsError as e:
        raise click.ClickException(str(e)) from e

    parser: NoteParser = NoteParser(note)
    subject: str = title or parser.get_title()
    vault_root: Path = vault or note.parent

    logger.info(f"Note: {note}")
    logger.info(f"Vault: {vault_root}")
    logger.debug(f"Resize: {settings.side_preference.value} side to {settings.resize_limit}px")

    result: PipelineResult = run_pipeline(
        subject,
        parser.get_body(strip_frontmatter),
        settings,
        VaultAssetResolver(vault_root),
    )

    for message in result_notices(result):
        click.echo(message)

    if result.status is not RunStatus.DONE:
        sys.exit(1)

    logger.success("Done")


@cli.group()
def config() -> None:
    """Show or change stored settings"""


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Print the current settings"""
    path: Path = ctx.obj["settings_path"]
    settings: Settings = read_settings(path)

    click.echo(f"Settings file: {path}")
    click.echo(f"API key: {mask_key(settings.api_key)}")
    click.echo(f"Side preference: {settings.side_preference.value}")
    click.echo(f"Resize limit: {settings.resize_limit}")


@config.command("set")
@click.option("--api-key", default=None, help="Buttondown API key (https://buttondown.email/settings#api)")
@click.option(
    "--side",
    type=click.Choice([m.value for m in ResizeMode]),
    default=None,
    help="Which side the resize limit applies to",
)
@click.option("--limit", type=click.IntRange(min=1), default=None, help="Resize limit in pixels")
@click.pass_context
def config_set(ctx: click.Context, api_key: str | None, side: str | None, limit: int | None) -> None:
    """Update stored settings"""
    path: Path = ctx.obj["settings_path"]

    try:
        settings: Settings = read_settings(path).with_overrides(
            api_key=api_key.strip() if api_key is not None else None,
            side_preference=side,
            resize_limit=limit,
        )
    except SettingsError as e:
        raise click.ClickException(str(e)) from e

    save_settings(settings, path)
    click.echo(f"Saved settings to {path}")


if __name__ == "__main__":
    cli()
