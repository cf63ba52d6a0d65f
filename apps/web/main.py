"""FastAPI viewer for shared prune-overrides results."""

from typing import Literal, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from prune_overrides.errors import DecodeError
from prune_overrides.models import AnalysisReport, OverrideResult, Verdict
from prune_overrides.share import build_share_url, decode_report, encode_report

app = FastAPI(
    title="prune-overrides",
    description="View shared npm override analysis results",
    version="0.1.0",
)


class OverrideModel(BaseModel):
    """One analyzed override."""
    name: str
    value: str = ""
    verdict: Literal["redundant", "required"]
    before: Optional[str] = None
    after: Optional[str] = None
    reason: str = ""


class ReportResponse(BaseModel):
    """Decoded analysis report."""
    project_name: str
    total: int
    redundant: int
    required: int
    duration_ms: int
    overrides: list[OverrideModel]


class EncodeRequest(BaseModel):
    """Results to turn into a share link."""
    project_name: str = ""
    overrides: list[OverrideModel]


class EncodeResponse(BaseModel):
    """Share token and the full link."""
    token: str
    url: str


@app.get("/", response_class=HTMLResponse)
async def home():
    """Serve the viewer page."""
    return get_index_html()


@app.get("/api/report", response_model=ReportResponse)
async def read_report(d: str = Query(..., description="Share token")):
    """Decode a share token into a report."""
    try:
        report = decode_report(d)
    except DecodeError as e:
        raise HTTPException(status_code=400, detail={"error": e.message, "code": e.code})

    return _to_response(report)


@app.post("/api/encode", response_model=EncodeResponse)
async def encode(request: EncodeRequest):
    """Encode results into a share token."""
    if not request.overrides:
        raise HTTPException(status_code=400, detail="No overrides provided")

    results = [
        OverrideResult(
            name=item.name,
            override_value=item.value,
            before=item.before,
            after=item.after,
            verdict=Verdict(item.verdict),
            reason=item.reason,
        )
        for item in request.overrides
    ]
    token = encode_report(AnalysisReport.from_results(results), request.project_name)
    return EncodeResponse(token=token, url=build_share_url(token))


def _to_response(report: AnalysisReport) -> ReportResponse:
    return ReportResponse(
        project_name=report.project_name,
        total=report.total,
        redundant=report.redundant,
        required=report.required,
        duration_ms=report.duration,
        overrides=[
            OverrideModel(
                name=result.name,
                value=result.override_value,
                verdict=result.verdict.value,
                before=result.before,
                after=result.after,
                reason=result.reason,
            )
            for result in report.results
        ],
    )


def get_index_html() -> str:
    """Return the viewer HTML page."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="viewport" content="width=device-width, initial-scale=1.0">
        <title>prune-overrides - Shared Results</title>
        <style>
            body { font-family: system-ui, sans-serif; max-width: 760px; margin: 2rem auto; padding: 0 1rem; color: #1f2933; }
            h1 { font-size: 1.6rem; }
            .summary { display: flex; gap: 1rem; margin: 1rem 0; }
            .card { flex: 1; padding: 1rem; border-radius: 8px; background: #f5f7fa; text-align: center; }
            .card strong { display: block; font-size: 1.8rem; }
            .redundant { color: #b7791f; }
            .required { color: #2b6cb0; }
            .error { color: #c53030; }
            ul { padding-left: 1.2rem; }
            li { margin: 0.3rem 0; font-family: monospace; }
        </style>
    </head>
    <body>
        <h1>prune-overrides</h1>
        <p id="subtitle">Shared npm override analysis</p>
        <div id="content">Loading...</div>
        <script>
            const content = document.getElementById("content");
            const token = new URLSearchParams(window.location.search).get("d");

            function esc(text) {
                const div = document.createElement("div");
                div.textContent = text;
                return div.innerHTML;
            }

            function list(title, cls, items) {
                if (items.length === 0) return "";
                const rows = items.map(o => `<li>${esc(o.name)}</li>`).join("");
                return `<h2 class="${cls}">${title}</h2><ul>${rows}</ul>`;
            }

            async function load() {
                if (!token) {
                    content.innerHTML = "<p>No results to show. Run <code>prune-overrides --share</code> to create a link.</p>";
                    return;
                }
                const response = await fetch(`/api/report?d=${encodeURIComponent(token)}`);
                const data = await response.json();
                if (!response.ok) {
                    content.innerHTML = `<p class="error">${esc(data.detail.error || "Failed to load results")}</p>`;
                    return;
                }
                if (data.project_name) {
                    document.getElementById("subtitle").textContent = data.project_name;
                }
                const redundant = data.overrides.filter(o => o.verdict === "redundant");
                const required = data.overrides.filter(o => o.verdict === "required");
                content.innerHTML = `
                    <div class="summary">
                        <div class="card"><strong>${data.total}</strong>Total</div>
                        <div class="card redundant"><strong>${data.redundant}</strong>Redundant</div>
                        <div class="card required"><strong>${data.required}</strong>Required</div>
                    </div>
                    ${list("Can be safely removed", "redundant", redundant)}
                    ${list("Still required", "required", required)}
                `;
            }

            load().catch(() => { content.innerHTML = '<p class="error">Failed to load results</p>'; });
        </script>
    </body>
    </html>
    """
