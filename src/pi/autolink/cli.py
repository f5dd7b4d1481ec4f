"""CLI entry point for pi-autolink. Uses Click for argument parsing."""

from __future__ import annotations

import logging

import click

from pi.autolink.engine import AutoLinkEngine
from pi.autolink.host import TextBuffer
from pi.autolink.settings import AUTOLINK_MODES, AutoLinkSettings, SettingsManager, normalize_folders
from pi.autolink.suggestions import SuggestionList
from pi.autolink.vault import DirectoryVault


def _settings(ctx: click.Context) -> AutoLinkSettings:
    """Stored settings with command-line overrides applied."""
    opts = ctx.obj
    settings = opts["manager"].snapshot()
    changes = {}
    if opts["mode"] is not None:
        changes["mode"] = opts["mode"]
    if opts["case_sensitive"] is not None:
        changes["case_sensitive"] = opts["case_sensitive"]
    if opts["min_length"] is not None:
        changes["min_word_length"] = opts["min_length"]
    if opts["folders"]:
        changes["custom_folders"] = tuple(normalize_folders(list(opts["folders"])))
    return settings.with_changes(**changes) if changes else settings


def _engine(ctx: click.Context, vault_path: str) -> AutoLinkEngine:
    return AutoLinkEngine(DirectoryVault(vault_path), _settings(ctx), notify=click.echo)


@click.group(invoke_without_command=True)
@click.option("--mode", type=click.Choice(list(AUTOLINK_MODES)), default=None, help="Linking mode")
@click.option("--case-sensitive/--ignore-case", default=None, help="Match titles case-sensitively")
@click.option("--min-length", type=click.IntRange(1, 10), default=None, help="Minimum word length")
@click.option("--folder", "folders", multiple=True, help="Folder to link into (custom mode, repeatable)")
@click.option("--config-dir", default=None, help="Directory holding autolink.json")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"]),
    default="warning",
    help="Logging verbosity",
)
@click.pass_context
def main(ctx, mode, case_sensitive, min_length, folders, config_dir, log_level):
    """Turn typed note titles into wikilinks."""
    logging.basicConfig(level=log_level.upper(), format="%(levelname)s %(name)s: %(message)s")
    ctx.obj = {
        "manager": SettingsManager.create(config_dir),
        "mode": mode,
        "case_sensitive": case_sensitive,
        "min_length": min_length,
        "folders": folders,
    }
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@main.command()
@click.argument("vault", type=click.Path(exists=True, file_okay=False))
@click.pass_context
def titles(ctx, vault):
    """List the linkable titles and aliases of a vault."""
    engine = _engine(ctx, vault)
    for _key, entry in engine.index.titles():
        click.echo(f"{entry.display}\t{entry.document.path}")
    for _key, entry in engine.index.aliases():
        click.echo(f"{entry.display}\talias of {entry.document.basename}")


@main.command()
@click.argument("vault", type=click.Path(exists=True, file_okay=False))
@click.argument("text")
@click.option("--exclude", default="", help="Title of the document being edited")
@click.option("--width", type=click.IntRange(10), default=80, help="Width of the rendered list")
@click.pass_context
def match(ctx, vault, text, exclude, width):
    """Print the suggestion list TEXT would open."""
    engine = _engine(ctx, vault)
    candidates = engine.resolver.find_matches(text, exclude)
    if not candidates:
        click.echo("No matches")
        return
    suggestions = SuggestionList(candidates, max_visible=engine.settings.max_suggestions)
    for line in suggestions.render(width):
        click.echo(line)


@main.command("type")
@click.argument("vault", type=click.Path(exists=True, file_okay=False))
@click.argument("text")
@click.option("--document", default=None, help="Vault path of the document being edited")
@click.pass_context
def type_text(ctx, vault, text, document):
    """Feed TEXT through the engine keystroke by keystroke and print the result.

    Offered suggestions are left unanswered, so only automatic links appear.
    """
    engine = _engine(ctx, vault)
    buffer = TextBuffer(document_path=document)
    buffer.on_change.append(engine.on_editor_change)
    buffer.type_text(text)
    click.echo(buffer.get_text())
