"""Blueprint analysis API routes: validation, per-file and per-project analysis."""

from typing import Any

from fastapi import APIRouter, Body, HTTPException

from buildselect.services.analysis_validator import sanitize, validate
from buildselect.services.room_analyzer import (
    analyze_blueprint,
    analyze_project_blueprints,
    get_analysis_results,
    get_project_analysis,
)

router = APIRouter(prefix="/api", tags=["analysis"])


# ---------------------------------------------------------------------------
# POST /api/analysis/validate
# ---------------------------------------------------------------------------

@router.post("/analysis/validate")
async def validate_analysis(raw: Any = Body(...)) -> dict:
    """Run the diagnostics and the repair pass on a raw analysis payload.

    Nothing is stored; useful for checking vision-model output by hand.
    """
    return {
        "warnings": validate(raw),
        "analysis": sanitize(raw).to_record(),
    }


# ---------------------------------------------------------------------------
# Files
# ---------------------------------------------------------------------------

@router.post("/files/{file_id}/analyze")
async def analyze_file(file_id: str) -> dict:
    """Analyse one uploaded blueprint and return the stored record."""
    analysis = await analyze_blueprint(file_id)
    return analysis.to_record()


@router.get("/files/{file_id}/analysis")
async def get_file_analysis(file_id: str) -> dict:
    """Return the stored analysis of a file.

    Raises 404 if the file has not been analysed yet.
    """
    analysis = get_analysis_results(file_id)
    if analysis is None:
        raise HTTPException(status_code=404, detail="Analysis not found")
    return analysis.to_record()


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------

@router.post("/projects/{project_id}/analyze")
async def analyze_project(project_id: str) -> dict:
    """Analyse every pending or failed blueprint of a project."""
    results = await analyze_project_blueprints(project_id)
    return {
        "analyses": [r.to_record() for r in results],
        "count": len(results),
    }


@router.get("/projects/{project_id}/analysis")
async def project_analysis(project_id: str) -> dict:
    """Aggregate rooms, area and recommendations across a project's files."""
    return get_project_analysis(project_id).model_dump(by_alias=True)
