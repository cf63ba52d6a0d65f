"""CLI application for prune-overrides."""

import asyncio
import json
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from prune_overrides.analyze import analyze_overrides
from prune_overrides.constants import DEFAULT_NPM_TIMEOUT, ExitCode
from prune_overrides.errors import ConfigError, NpmError, PruneOverridesError
from prune_overrides.fix import apply_fixes
from prune_overrides.log import AnalysisLogger
from prune_overrides.models import AnalysisReport, AnalyzerOptions, Verdict
from prune_overrides.npm import check_npm_available, get_npm_version
from prune_overrides.share import build_share_url, encode_report

console = Console()


def report_to_json(report: AnalysisReport) -> dict:
    """Convert a report to the machine-readable output shape."""
    return {
        "summary": {
            "total": report.total,
            "redundant": report.redundant,
            "required": report.required,
            "durationMs": report.duration,
        },
        "overrides": [
            {
                "name": result.name,
                "value": result.override_value,
                "verdict": result.verdict.value,
                "before": result.before,
                "after": result.after,
                "reason": result.reason,
            }
            for result in report.results
        ],
    }


def format_json_output(report: AnalysisReport, share_url: str | None = None) -> str:
    """Format JSON output."""
    data = report_to_json(report)
    if share_url:
        data["shareUrl"] = share_url
    return json.dumps(data, indent=2)


def format_duration(ms: int) -> str:
    """Format a duration in milliseconds for humans."""
    if ms < 1000:
        return f"{ms}ms"
    return f"{ms / 1000:.1f}s"


def print_console_report(report: AnalysisReport) -> None:
    """Print a human-readable summary of the analysis."""
    console.print()
    console.print("[bold]Analysis Summary[/bold]")
    console.print("─" * 40)
    console.print(f"  Total overrides:    {report.total}")
    console.print(f"  [green]Redundant:[/green]          {report.redundant}")
    console.print(f"  [blue]Required:[/blue]           {report.required}")
    console.print(f"  Duration:           {format_duration(report.duration)}")
    console.print()

    if report.redundant > 0:
        console.print("[bold yellow]Redundant overrides that can be removed:[/bold yellow]")
        console.print()
        for result in report.results:
            if result.verdict == Verdict.REDUNDANT:
                console.print(f"  [yellow]•[/yellow] [bold]{escape(result.name)}[/bold]")
                console.print(f"    Override: [dim]{escape(result.override_value)}[/dim]")
                console.print(f"    Reason:   [dim]{escape(result.reason)}[/dim]")
                console.print()

    if report.required > 0 and report.redundant > 0:
        console.print("[bold]Required overrides (keep these):[/bold]")
        console.print()
        for result in report.results:
            if result.verdict == Verdict.REQUIRED:
                console.print(f"  [blue]•[/blue] [bold]{escape(result.name)}[/bold]")
                console.print(f"    Reason: [dim]{escape(result.reason)}[/dim]")
                console.print()

    if report.redundant > 0:
        console.print(
            f"[yellow]Run with [bold]--fix[/bold] to automatically remove "
            f"{report.redundant} redundant override(s).[/yellow]"
        )
    elif report.total > 0:
        console.print("[green]All overrides are required. No cleanup needed.[/green]")


def parse_names(values: list[str] | None) -> list[str]:
    """Flatten repeated and comma-separated package names."""
    names: list[str] = []
    for value in values or []:
        names.extend(name.strip() for name in value.split(",") if name.strip())
    return names


def validate_options(cwd: Path, include: list[str], exclude: list[str], timeout: float) -> None:
    """Reject command-line input that cannot produce a meaningful run.

    Raises:
        ConfigError: On a missing directory, a non-positive timeout, or a
            package that is both included and excluded.
    """
    if not cwd.is_dir():
        raise ConfigError(f"Directory not found: {cwd}")
    if timeout <= 0:
        raise ConfigError(f"Timeout must be positive, got {timeout:g}")

    conflicting = sorted(set(include) & set(exclude))
    if conflicting:
        raise ConfigError(f"Packages both included and excluded: {', '.join(conflicting)}")


async def run(
    cwd: Path,
    include: list[str],
    exclude: list[str],
    fix: bool,
    json_output: bool,
    verbose: bool,
    share: bool,
    timeout: float,
) -> int:
    """Run an analysis and return the process exit code."""
    log = AnalysisLogger(verbose=verbose, silent=json_output)

    try:
        validate_options(cwd, include, exclude, timeout)

        if not await check_npm_available():
            raise NpmError("npm is not available on PATH", "npm --version")
        if verbose and not json_output:
            log.debug(f"Using npm {await get_npm_version()}")

        report = await analyze_overrides(
            AnalyzerOptions(
                cwd=str(cwd),
                include=include,
                exclude=exclude,
                verbose=verbose,
                timeout=timeout,
            ),
            log=log,
        )

        share_url = None
        if share:
            share_url = build_share_url(encode_report(report))

        if json_output:
            typer.echo(format_json_output(report, share_url))
        else:
            print_console_report(report)
            if share_url:
                log.newline()
                log.info("Share this result:")
                typer.echo(share_url)

        if fix and report.redundant > 0:
            await apply_fixes(cwd, report.results, timeout=timeout, log=log)

        if report.redundant > 0 and not fix:
            return ExitCode.REDUNDANT_FOUND
        return ExitCode.SUCCESS

    except PruneOverridesError as e:
        if json_output:
            typer.echo(json.dumps({"error": e.message, "code": e.code}))
        else:
            log.error(e.message)
        return ExitCode.ERROR
    except Exception as e:
        if json_output:
            typer.echo(json.dumps({"error": str(e), "code": "UNKNOWN_ERROR"}))
        else:
            log.error(f"Unexpected error: {e}")
        return ExitCode.ERROR


def _version_callback(value: bool) -> None:
    if not value:
        return
    try:
        current = version("prune-overrides")
    except PackageNotFoundError:
        current = "unknown"
    typer.echo(f"prune-overrides {current}")
    raise typer.Exit()


app = typer.Typer(
    name="prune-overrides",
    help="prune-overrides - Find npm overrides that are no longer needed",
    add_completion=False,
)


@app.command()
def main(
    fix: bool = typer.Option(False, "--fix", help="Remove redundant overrides and regenerate package-lock.json"),
    json_output: bool = typer.Option(False, "--json", help="Output results as JSON"),
    include: list[str] | None = typer.Option(None, "--include", help="Only analyze these packages (repeatable or comma-separated)"),
    exclude: list[str] | None = typer.Option(None, "--exclude", help="Skip these packages (repeatable or comma-separated)"),
    cwd: Path = typer.Option(Path("."), "--cwd", help="Project directory containing package.json"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    share: bool = typer.Option(False, "--share", help="Print a shareable link to the results"),
    timeout: float = typer.Option(DEFAULT_NPM_TIMEOUT, "--timeout", help="Seconds allowed per npm install"),
    show_version: bool = typer.Option(
        False, "--version", callback=_version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """prune-overrides - Find npm overrides that are no longer needed."""
    exit_code = asyncio.run(
        run(
            cwd=cwd,
            include=parse_names(include),
            exclude=parse_names(exclude),
            fix=fix,
            json_output=json_output,
            verbose=verbose,
            share=share,
            timeout=timeout,
        )
    )
    raise typer.Exit(int(exit_code))


if __name__ == "__main__":
    app()
