"""Analysis of every override declared in a project."""

import time

from .analyze_single import analyze_single_override
from .constants import DEFAULT_NPM_TIMEOUT
from .log import AnalysisLogger, silent_logger
from .manifest import get_override_keys, read_package_json
from .models import AnalysisReport, AnalyzerOptions, OverrideResult
from .npm import Installer, npm_install


def filter_override_keys(
    keys: list[str],
    include: list[str] | None = None,
    exclude: list[str] | None = None,
) -> list[str]:
    """Apply the include whitelist, then the exclude blacklist."""
    if include:
        keys = [key for key in keys if key in include]
    if exclude:
        keys = [key for key in keys if key not in exclude]
    return keys


async def analyze_overrides(
    options: AnalyzerOptions,
    *,
    installer: Installer = npm_install,
    log: AnalysisLogger | None = None,
) -> AnalysisReport:
    """Analyze all overrides in a project, one trial at a time.

    Trials run sequentially: each one invokes npm, and concurrent npm runs
    share the same cache.

    Args:
        options: Project directory, filters and timeout.
        installer: Re-resolution oracle passed through to each trial.
        log: Logging context for progress output. Without one, output goes
            to stderr only when ``options.verbose`` is set.

    Returns:
        Report with results in override declaration order.
    """
    if log is None:
        log = AnalysisLogger(verbose=True) if options.verbose else silent_logger()
    timeout = options.timeout or DEFAULT_NPM_TIMEOUT
    start = time.monotonic()

    def elapsed_ms() -> int:
        return int((time.monotonic() - start) * 1000)

    log.info("Analyzing npm overrides...")
    log.newline()

    package_json = await read_package_json(options.cwd)
    project_name = package_json.get("name") or ""
    override_keys = get_override_keys(package_json)

    if not override_keys:
        log.info("No overrides found in package.json")
        return AnalysisReport.from_results([], elapsed_ms(), project_name)

    override_keys = filter_override_keys(override_keys, options.include, options.exclude)

    log.info(f"Found {len(override_keys)} override(s) to analyze")
    log.newline()

    overrides = package_json["overrides"]
    results: list[OverrideResult] = []

    for override_key in override_keys:
        override_value = overrides[override_key]

        if not isinstance(override_value, str):
            log.warn(
                f"Skipping complex override: {override_key} "
                "(nested overrides not yet supported)"
            )
            continue

        with log.status(f"Analyzing: {override_key}"):
            result = await analyze_single_override(
                options.cwd,
                override_key,
                override_value,
                installer=installer,
                timeout=timeout,
                log=log,
            )

        results.append(result)
        log.success(f"{override_key}: {result.verdict.value.upper()} - {result.reason}")

    return AnalysisReport.from_results(results, elapsed_ms(), project_name)
