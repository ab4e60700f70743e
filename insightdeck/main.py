from typing import Optional

from fastapi import Depends, FastAPI, File, HTTPException, Query, UploadFile

from .config import ExtractorConfig, load_config
from .errors import InsightDeckError
from .extract import parse_csv_bytes
from .logging_setup import configure_logging, get_logger
from .models import HealthResponse, ParseResult, SummaryResponse
from .summary import format_currency, format_short_number, summarize

configure_logging()
logger = get_logger("insightdeck.main")

app = FastAPI(
    title="insightdeck",
    description="Financial line items from Spanish accounting CSV exports",
    version="0.1.0",
)


def get_config() -> ExtractorConfig:
    return load_config()


async def _parse_upload(
    file: UploadFile, config: ExtractorConfig, keep_source_rows: bool
) -> ParseResult:
    if not (file.filename or "").lower().endswith(".csv"):
        raise HTTPException(status_code=422, detail="Only CSV files are supported")

    raw = await file.read()
    try:
        return parse_csv_bytes(raw, config, keep_source_rows=keep_source_rows)
    except InsightDeckError as exc:
        logger.warning("rejected %s: %s", file.filename, exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc


@app.get("/health", response_model=HealthResponse)
def health():
    return {"ok": True}


@app.post("/parse", response_model=ParseResult)
async def parse_report(
    file: UploadFile = File(...),
    include_source: bool = Query(default=False),
    config: ExtractorConfig = Depends(get_config),
):
    return await _parse_upload(file, config, include_source)


@app.post("/summary", response_model=SummaryResponse)
async def summarize_report(
    file: UploadFile = File(...),
    segment: Optional[str] = Query(default=None),
    category: Optional[str] = Query(default=None),
    config: ExtractorConfig = Depends(get_config),
):
    result = await _parse_upload(file, config, False)
    if segment is not None and segment not in result.active_business_units:
        raise HTTPException(status_code=422, detail=f"Unknown business unit: {segment}")

    summary = summarize(
        result.records,
        result.active_business_units,
        segment=segment,
        category=category,
    )
    return {
        "summary": summary,
        "formatted_total": format_currency(summary.total),
        "formatted_unit_totals": {
            unit: format_short_number(value) for unit, value in summary.unit_totals.items()
        },
        "active_business_units": result.active_business_units,
        "categories": result.categories,
    }
