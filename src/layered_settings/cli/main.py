"""
Main CLI entry point for layered-settings.

Provides the command-line interface using Click. Every command merges a
config chain, reports merge faults as warnings on stderr, and with
``--strict`` exits with status 1 if any fault was reported.
"""

import asyncio as _asyncio
import dataclasses as _dataclasses
import json as _json
import logging as _logging
import os as _os
import sys as _sys
import typing as _typing

import click as _click
import pydantic as _pydantic
import rich.console as _rich_console
import rich.syntax as _rich_syntax
import yaml as _yaml

import layered_settings
import layered_settings.chain as chain
import layered_settings.config as config
import layered_settings.errors as errors
import layered_settings.file_access as file_access
import layered_settings.merging as merging
import layered_settings.remote as remote

# Custom Click context settings for better help formatting
CONTEXT_SETTINGS: dict[str, _typing.Any] = {
    "help_option_names": ["-h", "--help"],
    "max_content_width": 100,
}

ENV_COLOR = "LAYERED_SETTINGS_COLOR"


def _run_async(coro: _typing.Coroutine[_typing.Any, _typing.Any, _typing.Any]) -> _typing.Any:
    """Run an async coroutine synchronously."""
    return _asyncio.run(coro)


def _configure_logging(verbose: bool) -> None:
    _logging.basicConfig(
        level=_logging.DEBUG if verbose else _logging.ERROR,
        format="%(levelname)s %(name)s: %(message)s",
        stream=_sys.stderr,
        force=True,
    )


@_dataclasses.dataclass
class _ProblemCollector:
    """Collects merge faults reported through MergerCallbacks."""

    problems: list[str] = _dataclasses.field(default_factory=list)

    def callbacks(self) -> merging.MergerCallbacks:
        return merging.MergerCallbacks(
            on_circular_dependency=lambda path: self.problems.append(
                f"circular dependency: {path}"
            ),
            on_parse_error=lambda path, error: self.problems.append(
                f"parse error in {path}: {error}"
            ),
            on_extend_not_found=lambda path: self.problems.append(
                f"extended file not found: {path}"
            ),
            on_invalid_extend=lambda message: self.problems.append(
                f"invalid extend: {message}"
            ),
        )

    def report(self, strict: bool) -> None:
        """Echo collected faults to stderr; exit 1 in strict mode if any."""
        for problem in self.problems:
            _click.echo(f"warning: {problem}", err=True)
        if strict and self.problems:
            raise SystemExit(1)


@_dataclasses.dataclass
class _MergeResult:
    merger: merging.ConfigMergerCore
    entries: list[merging.ChainEntry]
    collector: _ProblemCollector


async def _entries_for(path: str, settings: config.Settings) -> list[merging.ChainEntry]:
    if _os.path.isdir(path):
        return await chain.find_config_chain(
            path,
            config_dir=settings.config_dir,
            config_filename=settings.config_filename,
        )
    absolute = _os.path.abspath(path)
    return [merging.ChainEntry(absolute, _os.path.dirname(absolute))]


async def _merge_path(path: str, settings: config.Settings) -> _MergeResult:
    """Discover and merge the chain for ``path`` (a file or a directory)."""
    collector = _ProblemCollector()
    entries = await _entries_for(path, settings)

    fetcher = remote.HttpUrlFetcher(settings.url_timeout) if settings.fetch_urls else None
    merger = merging.ConfigMergerCore(
        file_access.LocalFileReader(),
        collector.callbacks(),
        url_fetcher=fetcher,
        deep_merge_objects=settings.deep_merge_objects,
    )
    try:
        await merger.merge_from_config_chain(entries)
    finally:
        if fetcher is not None:
            await fetcher.close()

    return _MergeResult(merger=merger, entries=entries, collector=collector)


def _should_use_color(cli_flag: bool | None) -> tuple[bool, bool]:
    """Determine whether to use color output.

    Priority:
    1. CLI flag (--color / --no-color) if specified
    2. LAYERED_SETTINGS_COLOR env var (1=on, 0=off)
    3. NO_COLOR env var (if set, disable color) - standard convention
    4. Auto-detect: color if stdout is a TTY

    Returns:
        Tuple of (color_enabled, force_color).
        force_color is True when color was explicitly requested (not auto-detected).
    """
    if cli_flag is not None:
        return (cli_flag, cli_flag)

    env_color = _os.environ.get(ENV_COLOR)
    if env_color is not None:
        enabled = env_color.lower() in ("1", "true", "yes", "on")
        return (enabled, enabled)

    if _os.environ.get("NO_COLOR") is not None:
        return (False, False)

    return (_sys.stdout.isatty(), False)


def _print_yaml(data: _typing.Any, *, color: bool = True, force_color: bool = False) -> None:
    """Print data as YAML, optionally with syntax highlighting."""
    yaml_text = _yaml.safe_dump(
        data,
        default_flow_style=False,
        sort_keys=False,
        allow_unicode=True,
    )
    if not color:
        _click.echo(yaml_text, nl=False)
        return

    # When forcing color (explicit --color flag):
    # - force_terminal=True: output color even when piped
    # - no_color=False: override NO_COLOR env var
    # - color_system='truecolor': override FORCE_COLOR=0 env var
    console = _rich_console.Console(
        force_terminal=force_color,
        no_color=False if force_color else None,
        color_system="truecolor" if force_color else "auto",
    )
    syntax = _rich_syntax.Syntax(
        yaml_text,
        "yaml",
        theme="monokai",
        background_color="default",
    )
    console.print(syntax)


def _print_json(data: _typing.Any) -> None:
    _click.echo(_json.dumps(data, indent=2))


def _format_value(value: _typing.Any) -> str:
    return _json.dumps(value)


@_click.group(context_settings=CONTEXT_SETTINGS)
@_click.version_option(
    layered_settings.__version__, "-v", "--version", prog_name="layered-settings"
)
@_click.option("--verbose", is_flag=True, help="Enable debug logging on stderr")
@_click.option(
    "--fetch-urls/--no-fetch-urls",
    default=None,
    help="Fetch http(s) extends targets (default: from settings)",
)
@_click.option(
    "--deep-merge/--no-deep-merge",
    default=None,
    help="Recursively merge object values (default: from settings)",
)
@_click.pass_context
def cli(
    ctx: _click.Context,
    verbose: bool,
    fetch_urls: bool | None,
    deep_merge: bool | None,
) -> None:
    """
    layered-settings - merge layered JSON config files and explain the result.

    PATH arguments accept a config file or a directory. A directory is
    searched upward for .vscode/layered-settings/config.json files until one
    declares "root": true.

    \b
    Examples:
        layered-settings show                     # Merged settings for cwd
        layered-settings show --provenance        # With winning files
        layered-settings conflicts path/to/config.json
        layered-settings diff old.json new.json --json
    """
    try:
        settings = config.Settings()
    except (errors.ConfigFileError, _pydantic.ValidationError) as e:
        raise _click.ClickException(str(e)) from None

    if verbose:
        settings.verbose = True
    if fetch_urls is not None:
        settings.fetch_urls = fetch_urls
    if deep_merge is not None:
        settings.deep_merge_objects = deep_merge

    _configure_logging(settings.verbose)

    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@cli.command()
@_click.argument("path", type=_click.Path(exists=True), default=".")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.option("--provenance", is_flag=True, help="Show where each value came from")
@_click.option(
    "--color/--no-color",
    "use_color",
    default=None,
    help="Enable/disable syntax highlighting (default: auto-detect TTY)",
)
@_click.option("--strict", is_flag=True, help="Exit 1 if any merge fault was reported")
@_click.pass_context
def show(
    ctx: _click.Context,
    path: str,
    as_json: bool,
    provenance: bool,
    use_color: bool | None,
    strict: bool,
) -> None:
    """Show the merged settings.

    Examples:
        layered-settings show                   # YAML (colorized on a TTY)
        layered-settings show --json            # JSON
        layered-settings show --provenance      # Value, winner and overrides per key
    """
    settings: config.Settings = ctx.obj["settings"]
    result: _MergeResult = _run_async(_merge_path(path, settings))

    merged = result.merger.get_settings()
    if provenance:
        prov = result.merger.get_provenance()
        output: dict[str, _typing.Any] = {}
        for key, value in merged.items():
            if key in prov:
                output[key] = {"value": value, **prov[key].to_dict()}
            else:
                output[key] = {"value": value}
    else:
        output = merged

    if as_json:
        _print_json(output)
    else:
        color_enabled, force_color = _should_use_color(use_color)
        _print_yaml(output, color=color_enabled, force_color=force_color)

    result.collector.report(strict)


@cli.command()
@_click.argument("path", type=_click.Path(exists=True), default=".")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.option("--strict", is_flag=True, help="Exit 1 if any merge fault was reported")
@_click.pass_context
def conflicts(ctx: _click.Context, path: str, as_json: bool, strict: bool) -> None:
    """List keys whose value overrode an earlier file's value."""
    settings: config.Settings = ctx.obj["settings"]
    result: _MergeResult = _run_async(_merge_path(path, settings))

    prov = result.merger.get_provenance()
    conflicted = result.merger.get_conflicted_keys()

    if as_json:
        _print_json([{"key": key, **prov[key].to_dict()} for key in conflicted])
    elif not conflicted:
        _click.echo("No conflicts.")
    else:
        for key in conflicted:
            entry = prov[key]
            _click.echo(key)
            _click.echo(f"  winner: {entry.winner} = {_format_value(entry.winner_value)}")
            for override in reversed(entry.overrides):
                _click.echo(f"  overrides: {override.file} = {_format_value(override.value)}")

    result.collector.report(strict)


@cli.command()
@_click.argument("path", type=_click.Path(exists=True), default=".")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def files(ctx: _click.Context, path: str, as_json: bool) -> None:
    """List entry points and the files they extend."""
    settings: config.Settings = ctx.obj["settings"]
    result: _MergeResult = _run_async(_merge_path(path, settings))

    entry_points = [merging.normalize_path(entry.config_path) for entry in result.entries]
    extended = sorted(result.merger.get_extended_files())

    if as_json:
        _print_json({"entryPoints": entry_points, "extendedFiles": extended})
    else:
        _click.echo("Entry points:")
        for path_ in entry_points or ["(none)"]:
            _click.echo(f"  {path_}")
        _click.echo("Extended files:")
        for path_ in extended or ["(none)"]:
            _click.echo(f"  {path_}")

    result.collector.report(strict=False)


def _array_diffs(diff: merging.ObjectDiff, prev: merging.Setting) -> dict[str, _typing.Any]:
    arrays: dict[str, _typing.Any] = {}
    for key, value in diff.changed.items():
        old = prev.get(key)
        if isinstance(old, list) and isinstance(value, list):
            array_diff = merging.diff_arrays(old, value)
            arrays[key] = {
                "kind": array_diff.kind,
                "added": array_diff.added,
                "removed": array_diff.removed,
                "removedIndices": array_diff.removed_indices,
            }
    return arrays


@cli.command()
@_click.argument("prev", type=_click.Path(exists=True))
@_click.argument("curr", type=_click.Path(exists=True))
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.option("--strict", is_flag=True, help="Exit 1 if any merge fault was reported")
@_click.pass_context
def diff(ctx: _click.Context, prev: str, curr: str, as_json: bool, strict: bool) -> None:
    """Compare the merged settings of PREV and CURR.

    Changed array values also show an add/remove classification.
    """
    settings: config.Settings = ctx.obj["settings"]

    async def _merge_both() -> tuple[_MergeResult, _MergeResult]:
        return await _merge_path(prev, settings), await _merge_path(curr, settings)

    prev_result, curr_result = _run_async(_merge_both())
    prev_settings = prev_result.merger.get_settings()
    object_diff = merging.diff_objects(prev_settings, curr_result.merger.get_settings())
    arrays = _array_diffs(object_diff, prev_settings)

    if as_json:
        _print_json(
            {
                "added": object_diff.added,
                "changed": object_diff.changed,
                "removed": object_diff.removed,
                "arrays": arrays,
            }
        )
    elif object_diff.is_empty:
        _click.echo("No differences.")
    else:
        for key, value in object_diff.added.items():
            _click.echo(f"+ {key}: {_format_value(value)}")
        for key, value in object_diff.changed.items():
            _click.echo(f"~ {key}: {_format_value(value)}")
            if key in arrays:
                info = arrays[key]
                _click.echo(
                    f"    {info['kind']}: added {_format_value(info['added'])}, "
                    f"removed {_format_value(info['removed'])}"
                )
        for key in object_diff.removed:
            _click.echo(f"- {key}")

    collector = _ProblemCollector(prev_result.collector.problems + curr_result.collector.problems)
    collector.report(strict)


@cli.command(name="config")
@_click.option("--json", "as_json", is_flag=True, help="Output as JSON")
@_click.pass_context
def config_cmd(ctx: _click.Context, as_json: bool) -> None:
    """Show the effective tool settings and the user config file path."""
    settings: config.Settings = ctx.obj["settings"]
    data = settings.to_display_dict()

    if as_json:
        _print_json(data)
        return

    _print_yaml(data, color=False)
    user_config = config.get_user_config_path()
    status = "found" if user_config.exists() else "not found"
    _click.echo(f"# user config: {user_config} ({status})")
