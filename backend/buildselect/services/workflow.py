"""
Project workflow service.

Owns the project status transitions around selection generation:

    draft -> questionnaire -> generating -> review -> approved -> exported

``regenerate_selections`` moves a project to ``generating``, runs the pure
generator, replaces the project's selections and moves it to ``review``.
Any failure reverts the status to ``questionnaire`` before re-raising, so a
project is never left stuck in ``generating``.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Iterable
from enum import Enum

from buildselect.errors import (
    CatalogNotFoundError,
    NoSelectionsGeneratedError,
    NotFoundError,
    QuestionnaireNotFoundError,
)
from buildselect.models.product import Questionnaire
from buildselect.models.selection import GenerationResult, QuoteSummary, Selection
from buildselect.services.selection_generator import generate_selections
from buildselect.storage.supabase_client import (
    get_first_public_catalog,
    get_latest_questionnaire,
    get_project,
    list_selections,
    query_catalog_products,
    replace_selections,
    update_project,
    update_project_status,
)

logger = logging.getLogger(__name__)


class ProjectStatus(str, Enum):
    DRAFT = "draft"
    QUESTIONNAIRE = "questionnaire"
    GENERATING = "generating"
    REVIEW = "review"
    APPROVED = "approved"
    EXPORTED = "exported"


# ---------------------------------------------------------------------------
# Quote totals
# ---------------------------------------------------------------------------

def summarize_selections(selections: Iterable[Selection | dict]) -> QuoteSummary:
    """Item count, total quantity, grand total and per-room subtotals."""
    summary = QuoteSummary()
    for selection in selections:
        if isinstance(selection, Selection):
            selection = selection.model_dump()
        room = selection.get("room_name") or "Unassigned"
        extended = float(selection.get("extended_price") or 0.0)

        summary.item_count += 1
        summary.total_quantity += int(selection.get("quantity") or 0)
        summary.grand_total += extended
        summary.room_totals[room] = round(summary.room_totals.get(room, 0.0) + extended, 2)

    summary.grand_total = round(summary.grand_total, 2)
    return summary


def get_project_selections(project_id: str) -> dict:
    """Stored selections for a project plus their quote summary."""
    rows = list_selections(project_id)
    return {
        "project_id": project_id,
        "selections": rows,
        "summary": summarize_selections(rows).model_dump(),
    }


# ---------------------------------------------------------------------------
# Status transitions
# ---------------------------------------------------------------------------

def _require_project(project_id: str) -> dict:
    project = get_project(project_id)
    if project is None:
        raise NotFoundError(f"Project '{project_id}' not found.", {"project_id": project_id})
    return project


def mark_questionnaire_started(project_id: str) -> bool:
    """Move a draft project to ``questionnaire``. Other statuses are left alone."""
    project = _require_project(project_id)
    if project.get("status") != ProjectStatus.DRAFT.value:
        return False
    update_project_status(project_id, ProjectStatus.QUESTIONNAIRE.value)
    logger.info("Project %s moved to questionnaire", project_id)
    return True


def _resolve_catalog_id(project_id: str, project: dict, catalog_id: str | None) -> str:
    """Explicit catalog, else the project's catalog, else any public catalog.

    A public catalog picked as fallback is stored on the project.
    """
    if catalog_id:
        return catalog_id
    if project.get("catalog_id"):
        return str(project["catalog_id"])

    catalog = get_first_public_catalog()
    if catalog is None:
        raise CatalogNotFoundError(
            "No catalog assigned to the project and no public catalog available",
            {"project_id": project_id},
        )
    update_project(project_id, {"catalog_id": catalog["id"]})
    logger.info("Assigned public catalog %s to project %s", catalog["id"], project_id)
    return str(catalog["id"])


def regenerate_selections(
    project_id: str,
    catalog_id: str | None = None,
    rng: random.Random | None = None,
) -> GenerationResult:
    """Replace a project's selections with a freshly generated set.

    Not safe against a concurrent regeneration of the same project: the last
    delete-then-insert wins.
    """
    project = _require_project(project_id)
    update_project_status(project_id, ProjectStatus.GENERATING.value)

    try:
        resolved_catalog = _resolve_catalog_id(project_id, project, catalog_id)

        row = get_latest_questionnaire(project_id)
        if row is None:
            raise QuestionnaireNotFoundError(
                "Questionnaire not found", {"project_id": project_id}
            )
        questionnaire = Questionnaire.model_validate(row)

        products = query_catalog_products(resolved_catalog, questionnaire.categories_selected)
        selections = generate_selections(questionnaire, products, rng=rng)
        if not selections:
            raise NoSelectionsGeneratedError(
                "No selections generated for the questionnaire rooms",
                {"project_id": project_id, "rooms": len(questionnaire.room_list)},
            )

        replace_selections(project_id, [s.to_row(project_id) for s in selections])
        update_project_status(project_id, ProjectStatus.REVIEW.value)
    except Exception:
        logger.error("Selection generation failed for project %s", project_id, exc_info=True)
        try:
            update_project_status(project_id, ProjectStatus.QUESTIONNAIRE.value)
        except Exception:
            logger.error(
                "Could not revert status of project %s", project_id, exc_info=True
            )
        raise

    logger.info(
        "Project %s: %d selections from catalog %s",
        project_id, len(selections), resolved_catalog,
    )
    return GenerationResult(
        project_id=project_id,
        catalog_id=resolved_catalog,
        status=ProjectStatus.REVIEW.value,
        selections=selections,
        summary=summarize_selections(selections),
    )
