"""Selection generation and quote API routes."""

from fastapi import APIRouter

from buildselect.models.selection import GenerateSelectionsRequest
from buildselect.services.workflow import (
    get_project_selections,
    mark_questionnaire_started,
    regenerate_selections,
)

router = APIRouter(prefix="/api/projects", tags=["selections"])


@router.post("/{project_id}/questionnaire/start")
async def start_questionnaire(project_id: str) -> dict:
    """Move a draft project into the questionnaire step."""
    return {"updated": mark_questionnaire_started(project_id)}


@router.post("/{project_id}/selections/generate")
async def generate_project_selections(
    project_id: str,
    body: GenerateSelectionsRequest | None = None,
) -> dict:
    """Replace the project's selections with a freshly generated set.

    Uses ``catalog_id`` from the body when given, otherwise the project's
    catalog or any public catalog.
    """
    catalog_id = body.catalog_id if body else None
    result = regenerate_selections(project_id, catalog_id=catalog_id)
    return result.model_dump()


@router.get("/{project_id}/selections")
async def list_project_selections(project_id: str) -> dict:
    """Return the project's selections in display order with quote totals."""
    return get_project_selections(project_id)
