"""Command-line interface."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, TextIO

from ghostty_styles.config.settings import AppSettings
from ghostty_styles.core.builder import ColorField, ThemeBuilder, slug_from_title
from ghostty_styles.core.collection import CollectionStore, CollectionTheme, CycleOrder
from ghostty_styles.core.color import HslColor
from ghostty_styles.core.cycling import CycleService
from ghostty_styles.core.daemon import CycleDaemon, DaemonState, DaemonStatus, parse_interval
from ghostty_styles.core.darkmode import detect_current
from ghostty_styles.core.exporter import apply_built_theme, export_theme
from ghostty_styles.core.ghostty_config import GhosttyConfigWriter
from ghostty_styles.core.mode import (
    ModePreference,
    local_minutes_now,
    mode_label,
    resolve_mode,
    seconds_until_boundary,
)
from ghostty_styles.core.palette import GenAlgorithm
from ghostty_styles.core.preview import apply_osc_preview
from ghostty_styles.core.theme_record import ThemeRecord
from ghostty_styles.errors import ErrorCode, GhosttyStylesError, classify_exception, format_error_for_user

logger = logging.getLogger(__name__)


@dataclass
class CliContext:
    """Collaborators shared by the command handlers."""

    settings: AppSettings
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)
    os_signal: Callable[[], bool | None] = detect_current
    clock: Callable[[], int] = local_minutes_now

    @property
    def store(self) -> CollectionStore:
        return CollectionStore(self.settings.collections_dir)

    def writer(self) -> GhosttyConfigWriter:
        return GhosttyConfigWriter(self.settings.ghostty_config_path)

    def service(self) -> CycleService:
        return CycleService(
            self.settings,
            self.store,
            self.writer(),
            os_signal=self.os_signal,
            clock=self.clock,
        )

    def daemon(self) -> CycleDaemon:
        return CycleDaemon(self.settings, self.store, self.service())

    def echo(self, text: str = "") -> None:
        print(text, file=self.stdout)


def load_theme_source(path: Path) -> ThemeRecord:
    """Read a catalog JSON record or a Ghostty ``.conf`` theme file."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise classify_exception(exc, path) from exc
    if path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except ValueError as exc:
            raise classify_exception(exc, path) from exc
        return ThemeRecord.from_dict(data)
    return ThemeRecord.from_config_text(text, slug=slug_from_title(path.stem))


def _parse_hex_option(value: str, option: str) -> HslColor:
    color = HslColor.from_hex(value)
    if color is None:
        raise GhosttyStylesError(
            ErrorCode.INVALID_INPUT,
            message=f"Invalid {option} color {value!r}: expected #rrggbb",
        )
    return color


def _theme_word(count: int) -> str:
    return "theme" if count == 1 else "themes"


# -- collection --

def _cmd_collection_create(args: argparse.Namespace, ctx: CliContext) -> None:
    collection = ctx.store.create(args.name)
    ctx.echo(f"Created collection '{collection.name}'")


def _cmd_collection_list(args: argparse.Namespace, ctx: CliContext) -> None:
    store = ctx.store
    names = store.list_names()
    if not names:
        ctx.echo("No collections yet. Create one with:")
        ctx.echo("  ghostty-styles collection create <name>")
        return
    active = ctx.settings.active_collection
    for name in names:
        marker = " (active)" if name == active else ""
        try:
            count = len(store.load(name).themes)
        except GhosttyStylesError as e:
            logger.warning("could not load collection %s: %s", name, e.message)
            ctx.echo(f"  {name}{marker} - (error loading)")
            continue
        ctx.echo(f"  {name}{marker} - {count} {_theme_word(count)}")


def _cmd_collection_show(args: argparse.Namespace, ctx: CliContext) -> None:
    collection = ctx.store.load(args.name)
    ctx.echo(f"Collection: {collection.name}")
    ctx.echo(f"Themes:     {len(collection.themes)}")
    ctx.echo(f"Order:      {collection.order.value}")
    ctx.echo(f"Interval:   {collection.interval or 'not set'}")
    ctx.echo()
    if not collection.themes:
        ctx.echo("No themes yet. Add one with:")
        ctx.echo(f"  ghostty-styles collection add {collection.name} <theme-file>")
        return
    current = collection.clamped_index()
    for index, theme in enumerate(collection.themes):
        marker = " <-" if index == current else ""
        tone = "dark" if theme.is_dark else "light"
        ctx.echo(f"  {index + 1}. {theme.title} ({tone}){marker}")


def _cmd_collection_add(args: argparse.Namespace, ctx: CliContext) -> None:
    store = ctx.store
    collection = store.load(args.name)
    record = load_theme_source(Path(args.source).expanduser())
    collection.add_theme(CollectionTheme.from_record(record))
    store.save(collection)
    ctx.echo(f"Added '{record.title}' to collection '{collection.name}'")


def _cmd_collection_remove(args: argparse.Namespace, ctx: CliContext) -> None:
    store = ctx.store
    collection = store.load(args.name)
    removed = collection.remove_theme(args.position - 1)
    store.save(collection)
    ctx.echo(f"Removed '{removed.title}' from collection '{collection.name}'")


def _cmd_collection_use(args: argparse.Namespace, ctx: CliContext) -> None:
    collection = ctx.store.load(args.name)
    ctx.settings.active_collection = collection.name
    ctx.settings.sync()
    ctx.echo(f"Active collection set to '{collection.name}'")


def _cmd_collection_delete(args: argparse.Namespace, ctx: CliContext) -> None:
    ctx.store.delete(args.name)
    if ctx.settings.active_collection == args.name:
        ctx.settings.active_collection = None
        ctx.settings.sync()
    ctx.echo(f"Deleted collection '{args.name}'")


def _cmd_collection_set(args: argparse.Namespace, ctx: CliContext) -> None:
    if args.order is None and args.interval is None:
        raise GhosttyStylesError(
            ErrorCode.INVALID_INPUT,
            message="Nothing to change: pass --order and/or --interval",
        )
    store = ctx.store
    collection = store.load(args.name)
    if args.order is not None:
        collection.order = CycleOrder(args.order)
    if args.interval is not None:
        interval = args.interval.strip()
        parse_interval(interval)
        collection.interval = interval
    store.save(collection)
    ctx.echo(
        f"Collection '{collection.name}': order {collection.order.value}, "
        f"interval {collection.interval or 'not set'}"
    )


# -- cycling --

def _cmd_next(args: argparse.Namespace, ctx: CliContext) -> None:
    ctx.echo(ctx.service().apply_next())


def _cmd_cycle_start(args: argparse.Namespace, ctx: CliContext) -> None:
    applied = ctx.daemon().start()
    ctx.echo(f"Daemon stopped after {applied} {_theme_word(applied)} applied")


def _cmd_cycle_stop(args: argparse.Namespace, ctx: CliContext) -> None:
    pid = ctx.daemon().stop()
    ctx.echo(f"Stopped daemon (PID {pid})")


def render_status(status: DaemonStatus) -> list[str]:
    if status.state is DaemonState.RUNNING:
        lines = [f"Daemon:     running (PID {status.pid})"]
    elif status.state is DaemonState.STALE:
        lines = [f"Daemon:     not running (stale PID file for {status.pid})"]
    else:
        lines = ["Daemon:     not running"]

    if status.collection is None:
        lines.append("Collection: (none active)")
        return lines
    if status.error:
        lines.append(f"Collection: {status.collection} (error: {status.error})")
        return lines
    lines.extend(
        [
            f"Collection: {status.collection}",
            f"Themes:     {status.theme_count}",
            f"Order:      {status.order.value if status.order else 'sequential'}",
            f"Interval:   {status.interval or 'not set'}",
            f"Current:    {status.current_title or '(none)'}",
        ]
    )
    return lines


def _cmd_cycle_status(args: argparse.Namespace, ctx: CliContext) -> None:
    for line in render_status(ctx.daemon().status()):
        ctx.echo(line)


# -- mode --

def _cmd_mode_set(args: argparse.Namespace, ctx: CliContext) -> None:
    preference = ModePreference(args.preference)
    if preference is ModePreference.AUTO_TIME:
        ctx.settings.set_time_window(args.dark_after, args.light_after)
    ctx.settings.mode_preference = preference
    ctx.settings.sync()
    ctx.echo(f"Mode set to {_describe_preference(ctx.settings)}")


def _cmd_mode_off(args: argparse.Namespace, ctx: CliContext) -> None:
    ctx.settings.mode_preference = None
    ctx.settings.sync()
    ctx.echo("Mode filter disabled; cycling uses every theme")


def _describe_preference(settings: AppSettings) -> str:
    preference = settings.mode_preference
    if preference is None:
        return "off"
    if preference is ModePreference.AUTO_TIME:
        return f"auto-time (dark after {settings.dark_after}, light after {settings.light_after})"
    return preference.value


def _cmd_mode_status(args: argparse.Namespace, ctx: CliContext) -> None:
    settings = ctx.settings
    settings.sync()
    preference = settings.mode_preference
    ctx.echo(f"Mode:       {_describe_preference(settings)}")
    if preference is None:
        return
    now = ctx.clock()
    os_dark = ctx.os_signal() if preference is ModePreference.AUTO_OS else None
    want_dark = resolve_mode(preference, settings.dark_after, settings.light_after, now, os_dark)
    ctx.echo(f"Currently:  {mode_label(want_dark) or 'unknown'}")
    if preference is ModePreference.AUTO_TIME:
        seconds = seconds_until_boundary(settings.dark_after, settings.light_after, now)
        if seconds is not None:
            hours, minutes = divmod(seconds // 60, 60)
            ctx.echo(f"Next switch in {hours}h {minutes}m")


# -- create --

def _cmd_create(args: argparse.Namespace, ctx: CliContext) -> None:
    if args.source:
        builder = ThemeBuilder.from_record(load_theme_source(Path(args.source).expanduser()))
        builder.title = args.title
    else:
        builder = ThemeBuilder.new(args.title)

    regenerate = not args.source
    if args.algorithm is not None:
        builder.algorithm = GenAlgorithm(args.algorithm)
        regenerate = True
    if args.background is not None:
        builder.set_field_color(ColorField.BACKGROUND, _parse_hex_option(args.background, "background"))
        regenerate = True
    if args.foreground is not None:
        builder.set_field_color(ColorField.FOREGROUND, _parse_hex_option(args.foreground, "foreground"))
        regenerate = True
    if regenerate:
        builder.regenerate_palette()

    path = export_theme(builder, ctx.settings.themes_dir)
    ctx.echo(f"Saved '{builder.title}' ({builder.algorithm.label}) to {path}")
    if args.preview:
        apply_osc_preview(ctx.stdout, builder.build_theme_record())
    if args.apply:
        config_path = apply_built_theme(builder, ctx.writer())
        ctx.echo(f"Applied '{builder.title}' to {config_path}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ghostty-styles",
        description="Build Ghostty color themes and rotate through theme collections",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Write debug messages to the log file")
    commands = parser.add_subparsers(dest="command", metavar="COMMAND", required=True)

    # collection
    collection = commands.add_parser("collection", help="Manage theme collections")
    actions = collection.add_subparsers(dest="action", metavar="ACTION", required=True)

    p = actions.add_parser("create", help="Create an empty collection")
    p.add_argument("name")
    p.set_defaults(handler=_cmd_collection_create)

    p = actions.add_parser("list", help="List collections")
    p.set_defaults(handler=_cmd_collection_list)

    p = actions.add_parser("show", help="Show a collection's themes")
    p.add_argument("name")
    p.set_defaults(handler=_cmd_collection_show)

    p = actions.add_parser("add", help="Add a theme file to a collection")
    p.add_argument("name")
    p.add_argument("source", metavar="FILE", help="Catalog JSON record or Ghostty .conf theme")
    p.set_defaults(handler=_cmd_collection_add)

    p = actions.add_parser("remove", help="Remove a theme by its position")
    p.add_argument("name")
    p.add_argument("position", type=int, help="1-based position as shown by 'collection show'")
    p.set_defaults(handler=_cmd_collection_remove)

    p = actions.add_parser("use", help="Make a collection the active one")
    p.add_argument("name")
    p.set_defaults(handler=_cmd_collection_use)

    p = actions.add_parser("delete", help="Delete a collection")
    p.add_argument("name")
    p.set_defaults(handler=_cmd_collection_delete)

    p = actions.add_parser("set", help="Change cycle order or interval")
    p.add_argument("name")
    p.add_argument("--order", choices=[order.value for order in CycleOrder])
    p.add_argument("--interval", metavar="N[s|m|h]", help="e.g. 90s, 30m, 1h")
    p.set_defaults(handler=_cmd_collection_set)

    # next
    p = commands.add_parser("next", help="Apply the next theme of the active collection")
    p.set_defaults(handler=_cmd_next)

    # cycle
    cycle = commands.add_parser("cycle", help="Control the cycling daemon")
    actions = cycle.add_subparsers(dest="action", metavar="ACTION", required=True)
    p = actions.add_parser("start", help="Run the daemon in the foreground")
    p.set_defaults(handler=_cmd_cycle_start)
    p = actions.add_parser("stop", help="Stop the running daemon")
    p.set_defaults(handler=_cmd_cycle_stop)
    p = actions.add_parser("status", help="Show daemon and collection status")
    p.set_defaults(handler=_cmd_cycle_status)

    # mode
    mode = commands.add_parser("mode", help="Filter cycling by dark/light mode")
    actions = mode.add_subparsers(dest="action", metavar="ACTION", required=True)
    for preference in (ModePreference.DARK, ModePreference.LIGHT, ModePreference.AUTO_OS):
        p = actions.add_parser(preference.value, help=f"Prefer {preference.value} themes")
        p.set_defaults(handler=_cmd_mode_set, preference=preference.value)
    p = actions.add_parser("auto-time", help="Dark or light by time of day")
    p.add_argument("--dark-after", metavar="HH:MM")
    p.add_argument("--light-after", metavar="HH:MM")
    p.set_defaults(handler=_cmd_mode_set, preference=ModePreference.AUTO_TIME.value)
    p = actions.add_parser("off", help="Disable the mode filter")
    p.set_defaults(handler=_cmd_mode_off)
    p = actions.add_parser("status", help="Show the mode preference")
    p.set_defaults(handler=_cmd_mode_status)

    # create
    p = commands.add_parser("create", help="Generate a theme from a background/foreground pair")
    p.add_argument("title")
    p.add_argument("--from", dest="source", metavar="FILE", help="Fork a JSON record or .conf theme")
    p.add_argument("--background", metavar="HEX")
    p.add_argument("--foreground", metavar="HEX")
    p.add_argument("--algorithm", choices=[algorithm.value for algorithm in GenAlgorithm])
    p.add_argument("--apply", action="store_true", help="Write the theme into the Ghostty config")
    p.add_argument("--preview", action="store_true", help="Recolor this terminal via OSC sequences")
    p.set_defaults(handler=_cmd_create)

    return parser


def dispatch(args: argparse.Namespace, ctx: CliContext) -> int:
    try:
        args.handler(args, ctx)
    except GhosttyStylesError as e:
        logger.debug("command %s failed: %s", args.command, e.to_dict())
        print(f"Error: {format_error_for_user(e)}", file=ctx.stderr)
        return 1
    return 0


def run(argv: list[str] | None, ctx: CliContext) -> int:
    return dispatch(build_parser().parse_args(argv), ctx)
