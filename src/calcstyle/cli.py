"""Click CLI entry point for calcstyle."""

from __future__ import annotations

import json
import warnings
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click

from calcstyle import __version__
from calcstyle.binding import build_evaluator
from calcstyle.conversions import spherical_to_cartesian
from calcstyle.environment import StaticEnvironment
from calcstyle.errors import CalcStyleError
from calcstyle.nodes import NumberNode
from calcstyle.parser import parse_expressions
from calcstyle.sheet import evaluate_sheet, load_sheet
from calcstyle.warning_policy import WarningPolicy, apply_policy, parse_code_list


def _build_warning_policy(
    warn_as_error: str | None, suppress_warning: str | None
) -> WarningPolicy | None:
    """Parse CLI warning options into a WarningPolicy, or None if unset."""
    if warn_as_error is None and suppress_warning is None:
        return None
    try:
        wae = parse_code_list(warn_as_error) if warn_as_error else frozenset()
        sup = parse_code_list(suppress_warning) if suppress_warning else frozenset()
    except ValueError as e:
        raise click.ClickException(str(e)) from e
    return WarningPolicy(warn_as_error=wae, suppress=sup)


def _build_environment(
    scroll_offset: float | None,
    document_heights: tuple[float, ...],
    viewport_height: float | None,
) -> StaticEnvironment | None:
    """Build an environment from CLI options, or None if none were given."""
    if scroll_offset is None and not document_heights and viewport_height is None:
        return None
    return StaticEnvironment(
        scroll_offset=scroll_offset or 0.0,
        document_heights=document_heights,
        viewport_height=viewport_height or 0.0,
    )


def _run_with_policy(func: Callable[[], Any], policy: WarningPolicy | None) -> Any:
    """Run ``func`` collecting style warnings, then report them per the policy."""
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        result = func()
    try:
        kept = apply_policy(caught, policy)
    except CalcStyleError as e:
        raise click.ClickException(str(e)) from e
    for warning in kept:
        click.echo(f"Warning: {warning}", err=True)
    return result


def _format_number(node: NumberNode) -> str:
    return f"{node.number:g}{node.unit or ''}"


_COMMON_OPTIONS = [
    click.option(
        "--scroll-offset",
        type=float,
        default=None,
        help="Current vertical scroll position in pixels.",
    ),
    click.option(
        "--document-height",
        "document_heights",
        type=float,
        multiple=True,
        help="Scrollable document height in pixels. May be repeated; the largest wins.",
    ),
    click.option(
        "--viewport-height",
        type=float,
        default=None,
        help="Viewport height in pixels.",
    ),
    click.option(
        "--warn-as-error",
        "warn_as_error",
        type=str,
        default=None,
        help="Comma-separated W-codes to treat as errors (e.g. W01,W04).",
    ),
    click.option(
        "--suppress-warning",
        "suppress_warning",
        type=str,
        default=None,
        help="Comma-separated W-codes to suppress (e.g. W03).",
    ),
]


def _common_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Environment and warning options shared by the evaluating commands."""
    for option in reversed(_COMMON_OPTIONS):
        func = option(func)
    return func


def _parse_or_fail(expression: str) -> tuple:
    try:
        return parse_expressions(expression)
    except CalcStyleError as e:
        raise click.ClickException(str(e)) from e


@click.group()
@click.version_option(version=__version__, prog_name="calcstyle")
def main() -> None:
    """calcstyle - evaluate CSS-like calc()/env() style expressions."""


@main.command("eval")
@click.argument("expression")
@_common_options
def eval_command(
    expression: str,
    scroll_offset: float | None = None,
    document_heights: tuple[float, ...] = (),
    viewport_height: float | None = None,
    warn_as_error: str | None = None,
    suppress_warning: str | None = None,
) -> None:
    """Evaluate a number expression such as 'calc(1m + 10cm)'."""
    policy = _build_warning_policy(warn_as_error, suppress_warning)
    environment = _build_environment(scroll_offset, document_heights, viewport_height)
    expressions = _parse_or_fail(expression)

    value = _run_with_policy(
        lambda: build_evaluator(expressions, "number", environment).evaluate(), policy
    )
    click.echo(_format_number(value))


@main.command()
@click.argument("expression")
@click.option(
    "--cartesian",
    is_flag=True,
    default=False,
    help="Print the Y-up Cartesian position instead of the spherical triple.",
)
@click.option(
    "--default-radius",
    type=float,
    default=1.0,
    show_default=True,
    help="Radius in meters used for 'auto' when converting to Cartesian.",
)
@_common_options
def spherical(
    expression: str,
    cartesian: bool = False,
    default_radius: float = 1.0,
    scroll_offset: float | None = None,
    document_heights: tuple[float, ...] = (),
    viewport_height: float | None = None,
    warn_as_error: str | None = None,
    suppress_warning: str | None = None,
) -> None:
    """Evaluate a spherical position such as '0 90deg auto'."""
    policy = _build_warning_policy(warn_as_error, suppress_warning)
    environment = _build_environment(scroll_offset, document_heights, viewport_height)
    expressions = _parse_or_fail(expression)

    style = _run_with_policy(
        lambda: build_evaluator(expressions, "spherical", environment).evaluate(), policy
    )
    if cartesian:
        position = spherical_to_cartesian(style, default_radius=default_radius)
        click.echo(" ".join(f"{component:g}" for component in position))
    else:
        azimuth, inclination, radius = style
        radius_text = radius if isinstance(radius, str) else f"{radius:g}m"
        click.echo(f"{azimuth:g}rad {inclination:g}rad {radius_text}")


@main.command()
@click.argument("input_file", type=click.Path(exists=True, path_type=Path))
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"]),
    default="text",
    show_default=True,
    help="Output format.",
)
@_common_options
def sheet(
    input_file: Path,
    output_format: str = "text",
    scroll_offset: float | None = None,
    document_heights: tuple[float, ...] = (),
    viewport_height: float | None = None,
    warn_as_error: str | None = None,
    suppress_warning: str | None = None,
) -> None:
    """Evaluate every property of a YAML style sheet."""
    policy = _build_warning_policy(warn_as_error, suppress_warning)
    environment = _build_environment(scroll_offset, document_heights, viewport_height)

    try:
        style_sheet = load_sheet(input_file)
    except CalcStyleError as e:
        raise click.ClickException(str(e))

    results = _run_with_policy(lambda: evaluate_sheet(style_sheet, environment), policy)

    if output_format == "json":
        click.echo(json.dumps(results, indent=2))
        return

    for name, entry in results.items():
        if "spherical" in entry:
            value_text = " ".join(
                item if isinstance(item, str) else f"{item:g}" for item in entry["spherical"]
            )
        else:
            value_text = f"{entry['number']:g}{entry['unit'] or ''}"
        marker = "" if entry["constant"] else "  (dynamic)"
        click.echo(f"{name}: {value_text}{marker}")
