import difflib
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel

import expressions
from expander import expand
from expression import is_variable_name
from interop import equivalent, is_derivative
from parser import parse

app = typer.Typer(help="Simplify and differentiate polynomial expressions.")
console = Console()
err_console = Console(stderr=True)

logger = logging.getLogger(__name__)

INPUT_ERRORS = (expressions.ExpressionSyntaxError, expressions.InvalidVariableError)


def parse_line_set(spec: str) -> set[int]:
    """Turn '2,5-7' into {2,5,6,7}."""
    lines = set()
    for part in spec.split(","):
        part = part.strip()
        if not part:
            continue
        if "-" in part:
            a, b = part.split("-", 1)
            lines.update(range(int(a), int(b) + 1))
        else:
            lines.add(int(part))
    return lines


def transform(text: str, variable: Optional[str] = None) -> str:
    """Simplify ``text``, or differentiate it when ``variable`` is given."""
    if variable:
        return expressions.differentiate(text, variable)
    return expressions.simplify(text)


def report_error(error, title: str = "Invalid input"):
    err_console.print(Panel(escape(str(error)), title=title, border_style="red"))


def show_result(source: str, result: str, verify: bool, title: str, variable: Optional[str] = None):
    """
    Print ``result`` and, with ``verify``, recompute it with SymPy.
    A mismatch exits with status 2.
    """
    console.print(Panel(result, title=title, border_style="green"))
    if not verify:
        return
    original = expand(parse(source))
    if variable:
        ok = is_derivative(original, variable, parse(result))
    else:
        ok = equivalent(original, parse(result))
    if ok:
        console.print("[green]verified against SymPy[/green]")
    else:
        console.print("[red]result differs from SymPy[/red]")
        raise typer.Exit(code=2)


def process_file(
    path: Path,
    variable: Optional[str],
    lines: set[int],
    inplace: bool,
    show_diff: bool,
) -> list[str]:
    """
    1) Read one expression per line
    2) Simplify or differentiate each selected line
    3) Either overwrite or show unified diff/raw text

    Blank lines and '#' comments are copied through. Returns one message per
    line that could not be processed; those lines are left unchanged.
    """
    src = path.read_text()
    out_lines = []
    failures = []

    for lineno, line in enumerate(src.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#") or (lines and lineno not in lines):
            out_lines.append(line)
            continue
        try:
            out_lines.append(transform(stripped, variable))
        except INPUT_ERRORS as exc:
            logger.debug("skipping %s:%d", path, lineno, exc_info=True)
            failures.append(f"{path}:{lineno}: {exc}")
            out_lines.append(line)

    result = "\n".join(out_lines) + ("\n" if src.endswith("\n") else "")

    if inplace:
        if result != src:
            path.write_text(result)
        console.print(f"✅ Updated: {escape(str(path))}")
        return failures

    if show_diff:
        diff_txt = "".join(difflib.unified_diff(
            src.splitlines(keepends=True),
            result.splitlines(keepends=True),
            fromfile=str(path),
            tofile="simplified" if not variable else f"d/d{variable}",
        ))
        body = escape(diff_txt) if diff_txt else "[italic]No changes[/italic]"
        console.print(Panel(body, title=str(path), border_style="blue"))
    else:
        console.print(Panel(escape(result.rstrip("\n")), title=str(path), border_style="green"))
    return failures


@app.callback()
def configure(
    log_level: str = typer.Option(
        "WARNING", "--log-level", envvar="EXPRESSO_LOG_LEVEL",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)"
    ),
):
    """
    Simplify and differentiate sums of products of constants and variables.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise typer.BadParameter(f"unknown log level {log_level!r}", param_hint="--log-level")
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.command("simplify")
def simplify_command(
    expression: str = typer.Argument(..., help="Expression to simplify"),
    verify: bool = typer.Option(
        False, "--verify/--no-verify",
        help="Cross-check the result against SymPy"
    ),
):
    """
    Print EXPRESSION as a canonical sum of monomials.
    """
    try:
        result = expressions.simplify(expression)
    except INPUT_ERRORS as exc:
        report_error(exc)
        raise typer.Exit(code=1)
    show_result(expression, result, verify, title="simplify")


@app.command("differentiate")
def differentiate_command(
    expression: str = typer.Argument(..., help="Expression to differentiate"),
    variable: str = typer.Option(
        ..., "-v", "--variable",
        help="Variable to differentiate by"
    ),
    verify: bool = typer.Option(
        False, "--verify/--no-verify",
        help="Cross-check the result against SymPy"
    ),
):
    """
    Print the derivative of EXPRESSION with respect to VARIABLE.
    """
    try:
        result = expressions.differentiate(expression, variable)
    except INPUT_ERRORS as exc:
        report_error(exc)
        raise typer.Exit(code=1)
    show_result(expression, result, verify, title=f"d/d{variable}", variable=variable)


@app.command("batch")
def batch_command(
    target: Path = typer.Argument(
        ..., exists=True, file_okay=True, dir_okay=True,
        help="Expression file, or directory of *.expr files"
    ),
    differentiate: Optional[str] = typer.Option(
        None, "-d", "--differentiate",
        help="Differentiate every line by this variable instead of simplifying"
    ),
    lines: str = typer.Option(
        "", "--lines",
        help="Comma/range list of line numbers to process"
    ),
    inplace: bool = typer.Option(
        False, "--inplace",
        help="Overwrite files in place"
    ),
    recursive: bool = typer.Option(
        False, "--recursive",
        help="When target is a directory, recurse into subfolders"
    ),
    diff: bool = typer.Option(
        True, "--diff/--no-diff",
        help="Show unified diff instead of the rewritten text"
    ),
):
    """
    Simplify (or differentiate) every expression in TARGET, one per line.
    """
    if differentiate is not None and not is_variable_name(differentiate):
        report_error(expressions.InvalidVariableError(differentiate))
        raise typer.Exit(code=1)
    lines_set = parse_line_set(lines) if lines else set()

    paths = ([target] if target.is_file()
             else sorted(target.glob("**/*.expr") if recursive else target.glob("*.expr")))
    failures = []
    for path in paths:
        failures.extend(process_file(path, differentiate, lines_set, inplace, diff))

    for failure in failures:
        report_error(failure, title="Skipped")
    if failures:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
