"""Compact, URL-safe encoding of analysis reports for sharing.

Only the project name and the override names grouped by verdict survive
encoding; reasons and versions are dropped to keep links short:

    ["my-app", ["lodash", "axios"], ["react"]]
      → compact JSON → lz-string compressToEncodedURIComponent

The hosted viewer decodes the same lz-string format, so links work in
both directions. Decoding also accepts the payload shapes of older share
links. Each shape has its own adapter below and can be removed on its own
once those links no longer matter.
"""

import json
from typing import Any

from lzstring import LZString

from .constants import SHARE_BASE_URL
from .errors import DecodeError
from .models import AnalysisReport, OverrideResult, Verdict

REDUNDANT_REASON = "Can be safely removed"
REQUIRED_REASON = "Still required"

# Reason codes used by coded links
CODE_TO_REASON = {
    0: "Package not found in dependency tree",
    1: "Override matches resolved version",
    2: "Override is still required",
    3: "Override prevents older version",
    4: "Override changes resolved version",
}

NUMBER_TO_VERDICT = {0: Verdict.REDUNDANT, 1: Verdict.REQUIRED}


def to_payload(report: AnalysisReport, project_name: str | None = None) -> list:
    """Reduce a report to ``[project_name, redundant_names, required_names]``."""
    name = project_name if project_name is not None else report.project_name
    return [name or "", report.redundant_names, report.required_names]


def encode_report(report: AnalysisReport, project_name: str | None = None) -> str:
    """Encode a report into a URL-safe compressed token."""
    data = json.dumps(to_payload(report, project_name), separators=(",", ":"))
    return LZString().compressToEncodedURIComponent(data)


def build_share_url(token: str, base_url: str = SHARE_BASE_URL) -> str:
    return f"{base_url}?d={token}"


def _decompress(token: str) -> str:
    # Query parsing turns "+" from the token alphabet into spaces
    candidate = token.replace(" ", "+")
    try:
        text = LZString().decompressFromEncodedURIComponent(candidate)
    except (IndexError, KeyError, TypeError, ValueError) as e:
        raise DecodeError(
            "Failed to decompress encoded report: invalid data", DecodeError.DECOMPRESS_FAILED
        ) from e

    if not text:
        raise DecodeError(
            "Failed to decompress encoded report: invalid data", DecodeError.DECOMPRESS_FAILED
        )
    return text


def decode_report(token: str) -> AnalysisReport:
    """Decode a share token back into a report.

    Reasons are placeholders and versions are absent, since neither is
    stored in the token.

    Raises:
        DecodeError: ``DECOMPRESS_FAILED`` or ``DECODE_INVALID_JSON`` for a
            corrupted token, ``DECODE_INVALID_STRUCTURE`` or
            ``DECODE_UNKNOWN_FORMAT`` for a payload of the wrong shape.
    """
    if not token or not token.strip():
        raise DecodeError(
            "Failed to decompress encoded report: invalid data", DecodeError.DECOMPRESS_FAILED
        )

    text = _decompress(token)
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(
            "Failed to parse decompressed report: invalid JSON", DecodeError.INVALID_JSON
        ) from e

    return decode_payload(payload)


def decode_payload(data: Any) -> AnalysisReport:
    """Pick the adapter matching the payload's shape."""
    if isinstance(data, dict):
        if "t" in data and "s" in data:
            return _from_object_payload(data)
        raise DecodeError("Unknown data format", DecodeError.UNKNOWN_FORMAT)

    if not isinstance(data, list):
        raise DecodeError("Unknown data format", DecodeError.UNKNOWN_FORMAT)

    if len(data) == 3:
        if not (
            isinstance(data[0], str)
            and _is_name_list(data[1])
            and _is_name_list(data[2])
        ):
            raise DecodeError("Invalid payload structure", DecodeError.INVALID_STRUCTURE)
        return _from_named_payload(data)

    if len(data) == 2:
        if _is_name_list(data[0]) and _is_name_list(data[1]):
            return _from_names_payload(data)
        if (data[0] is None or isinstance(data[0], dict)) and isinstance(data[1], list):
            return _from_coded_payload(data)

    raise DecodeError("Unknown data format", DecodeError.UNKNOWN_FORMAT)


def _is_name_list(value: Any) -> bool:
    return isinstance(value, list) and all(isinstance(item, str) for item in value)


def _build_report(project_name: str, redundant: list[str], required: list[str]) -> AnalysisReport:
    results = [
        OverrideResult(
            name=name,
            override_value="",
            before=None,
            after=None,
            verdict=Verdict.REDUNDANT,
            reason=REDUNDANT_REASON,
        )
        for name in redundant
    ] + [
        OverrideResult(
            name=name,
            override_value="",
            before=None,
            after=None,
            verdict=Verdict.REQUIRED,
            reason=REQUIRED_REASON,
        )
        for name in required
    ]
    return AnalysisReport.from_results(results, project_name=project_name)


def _from_named_payload(data: list) -> AnalysisReport:
    # ["my-app", redundant[], required[]]
    project_name, redundant, required = data
    return _build_report(project_name, redundant, required)


def _from_names_payload(data: list) -> AnalysisReport:
    # [redundant[], required[]]
    redundant, required = data
    return _build_report("", redundant, required)


def _from_coded_payload(data: list) -> AnalysisReport:
    # [customReasons | null, [[name, value, 0|1, reasonCode, before?, after?], ...]]
    custom_reasons, entries = data
    custom_reasons = custom_reasons or {}
    results = []

    for entry in entries:
        if not isinstance(entry, list) or len(entry) < 4:
            raise DecodeError("Invalid payload structure", DecodeError.INVALID_STRUCTURE)

        name, value, verdict_code, reason_code = entry[:4]
        if (
            not isinstance(verdict_code, int)
            or verdict_code not in NUMBER_TO_VERDICT
            or not isinstance(reason_code, int)
        ):
            raise DecodeError("Invalid payload structure", DecodeError.INVALID_STRUCTURE)

        before = entry[4] if len(entry) > 4 else None
        after = entry[5] if len(entry) > 5 else None
        reason = (
            CODE_TO_REASON.get(reason_code)
            or custom_reasons.get(str(reason_code))
            or f"Unknown reason ({reason_code})"
        )
        results.append(
            OverrideResult(
                name=str(name),
                override_value=str(value),
                before=before or None,
                after=after or None,
                verdict=NUMBER_TO_VERDICT[verdict_code],
                reason=reason,
            )
        )

    return AnalysisReport.from_results(results)


def _from_object_payload(data: dict) -> AnalysisReport:
    # {"t": total, "x": redundant, "q": required, "s": [{n, o, b?, a?, v, r}], "d": ms}
    try:
        results = [
            OverrideResult(
                name=item["n"],
                override_value=item.get("o", ""),
                before=item.get("b"),
                after=item.get("a"),
                verdict=NUMBER_TO_VERDICT[item["v"]],
                reason=item.get("r", ""),
            )
            for item in data["s"]
        ]
        return AnalysisReport(
            total=int(data["t"]),
            redundant=int(data.get("x", 0)),
            required=int(data.get("q", 0)),
            results=results,
            duration=int(data.get("d", 0)),
        )
    except (AttributeError, KeyError, TypeError, ValueError) as e:
        raise DecodeError("Invalid payload structure", DecodeError.INVALID_STRUCTURE) from e
