"""Blueprint analysis service using a Gemini vision model.

Fetches an uploaded blueprint (PDF or image), sends it to Gemini together
with the analysis prompt, and turns the JSON reply into a sanitized
BlueprintAnalysis stored on the ``project_files`` row. The model is a
black box: whatever it returns goes through ``validate`` (logged) and
``sanitize`` (always) before it is persisted.
"""

import base64
import json
import logging
import re
import time
from collections import Counter

import httpx
from google import genai

from buildselect.config import (
    ANALYSABLE_FILE_TYPES,
    BIM_FILE_TYPES,
    BLUEPRINT_ANALYSIS_PROMPT,
    CAD_FILE_TYPES,
    FILE_FETCH_TIMEOUT_SECONDS,
    GEMINI_API_KEY,
    GEMINI_MODEL,
    MAX_BLUEPRINT_BYTES,
    PROJECT_CONTEXT_TEMPLATE,
)
from buildselect.errors import (
    AIResponseParseError,
    AnalysisError,
    NotFoundError,
    UnsupportedFileTypeError,
)
from buildselect.models.room import (
    AnalysisMetadata,
    BlueprintAnalysis,
    ProjectAnalysisSummary,
)
from buildselect.services.analysis_validator import average_confidence, sanitize, validate
from buildselect.storage.supabase_client import (
    get_file,
    get_project,
    list_completed_analyses,
    list_project_files,
    update_file,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Gemini client initialisation
# ---------------------------------------------------------------------------
_client: genai.Client | None = None


def _get_client() -> genai.Client:
    global _client
    if _client is None:
        _client = genai.Client(api_key=GEMINI_API_KEY)
    return _client


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _parse_gemini_json(raw_text: str) -> dict:
    """Strip optional markdown code fencing and parse the JSON payload."""
    text = raw_text.strip()
    # Remove ```json ... ``` or ``` ... ``` wrappers
    text = re.sub(r"^```(?:json)?\s*\n?", "", text)
    text = re.sub(r"\n?```\s*$", "", text)
    return json.loads(text)


def _image_mime_type(file_url: str) -> str:
    lowered = file_url.lower().split("?", 1)[0]
    if lowered.endswith(".png"):
        return "image/png"
    if lowered.endswith(".webp"):
        return "image/webp"
    return "image/jpeg"


def _mime_type_for(file_type: str, file_url: str) -> str:
    """Return the MIME type to send, or raise for unsupported file types."""
    if file_type in CAD_FILE_TYPES:
        raise UnsupportedFileTypeError(
            f"CAD file analysis ({file_type}) not yet implemented. Please convert to PDF.",
            {"file_type": file_type},
        )
    if file_type in BIM_FILE_TYPES:
        raise UnsupportedFileTypeError(
            f"BIM file analysis ({file_type}) not yet implemented. Please convert to PDF.",
            {"file_type": file_type},
        )
    if file_type not in ANALYSABLE_FILE_TYPES:
        raise UnsupportedFileTypeError(
            f"Unsupported file type: {file_type}", {"file_type": file_type}
        )
    if file_type == "image":
        return _image_mime_type(file_url)
    return ANALYSABLE_FILE_TYPES[file_type]


def build_prompt(file_type: str, project_context: dict | None = None) -> str:
    """Fill the analysis prompt with page and project context."""
    if file_type == "pdf":
        page_context = (
            "This PDF may contain several pages showing different floors, sections, "
            "or views of the same building. Analyze ALL pages and combine them into "
            "a single response."
        )
    else:
        page_context = "You are analyzing a single blueprint page."

    context_section = ""
    questionnaire = (project_context or {}).get("questionnaire")
    if isinstance(questionnaire, dict) and questionnaire:
        context_section = PROJECT_CONTEXT_TEMPLATE.format(
            project_name=project_context.get("project_name") or "Unknown",
            project_type=questionnaire.get("project_type") or "residential",
            building_type=questionnaire.get("building_type") or "single family",
            floor_count=questionnaire.get("floor_count") or "unknown",
        )

    return BLUEPRINT_ANALYSIS_PROMPT.format(
        page_context=page_context, project_context=context_section
    )


async def _fetch_file_bytes(file_url: str) -> bytes:
    try:
        async with httpx.AsyncClient(
            timeout=FILE_FETCH_TIMEOUT_SECONDS, follow_redirects=True
        ) as client:
            response = await client.get(file_url)
            response.raise_for_status()
    except httpx.HTTPError as exc:
        raise AnalysisError(f"Could not download blueprint: {exc}", {"url": file_url}) from exc

    if len(response.content) > MAX_BLUEPRINT_BYTES:
        raise AnalysisError(
            "Blueprint file is too large to analyse.",
            {"url": file_url, "size": len(response.content)},
        )
    return response.content


def _load_project_context(project_id: str | None) -> dict | None:
    if not project_id:
        return None
    project = get_project(project_id)
    if project is None:
        return None
    return {
        "project_name": project.get("name"),
        "questionnaire": project.get("questionnaire_json"),
    }


# ---------------------------------------------------------------------------
# Vision model call
# ---------------------------------------------------------------------------

async def perform_ai_analysis(
    file_url: str,
    file_type: str,
    project_context: dict | None = None,
) -> tuple[object, str]:
    """Send a blueprint to Gemini and return ``(parsed_json, raw_text)``.

    The parsed JSON is untrusted and must go through ``sanitize``.
    """
    mime_type = _mime_type_for(file_type, file_url)
    file_bytes = await _fetch_file_bytes(file_url)
    b64_data = base64.b64encode(file_bytes).decode("utf-8")

    try:
        response = await _get_client().aio.models.generate_content(
            model=GEMINI_MODEL,
            contents=[
                {
                    "parts": [
                        {
                            "inline_data": {
                                "mime_type": mime_type,
                                "data": b64_data,
                            }
                        },
                        {
                            "text": build_prompt(file_type, project_context),
                        },
                    ],
                }
            ],
        )
    except Exception as exc:
        raise AnalysisError(f"Vision model request failed: {exc}") from exc

    raw_text = response.text
    if not raw_text:
        raise AnalysisError("Vision model returned an empty response.")

    try:
        parsed = _parse_gemini_json(raw_text)
    except json.JSONDecodeError as exc:
        logger.error("Failed to parse Gemini JSON response: %s", raw_text[:500])
        raise AIResponseParseError("Failed to parse AI response as JSON") from exc

    return parsed, raw_text


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def analyze_blueprint(file_id: str) -> BlueprintAnalysis:
    """Analyse one uploaded file and store the result on its row.

    The new record replaces any earlier analysis. On failure the file is
    marked ``failed`` and the error propagates.
    """
    file_row = get_file(file_id)
    if file_row is None:
        raise NotFoundError(f"File '{file_id}' not found.", {"file_id": file_id})

    file_type = file_row.get("file_type") or ""
    update_file(file_id, {"processing_status": "processing"})
    started = time.monotonic()

    try:
        project_context = _load_project_context(file_row.get("project_id"))
        raw, raw_text = await perform_ai_analysis(
            file_row.get("file_url") or "", file_type, project_context
        )

        warnings = validate(raw)
        if warnings:
            logger.warning(
                "Analysis validation warnings for file %s: %s", file_id, warnings
            )

        analysis = sanitize(raw)
        analysis.extracted_text = raw_text
        analysis.metadata = AnalysisMetadata(
            file_type=file_type,
            processing_time=int((time.monotonic() - started) * 1000),
            confidence=average_confidence(analysis),
        )

        update_file(
            file_id,
            {
                "processing_status": "completed",
                "ai_analysis_json": analysis.to_record(),
            },
        )
    except Exception:
        logger.error("Blueprint analysis failed for file %s", file_id, exc_info=True)
        try:
            update_file(file_id, {"processing_status": "failed"})
        except Exception:
            logger.error("Could not mark file %s as failed", file_id, exc_info=True)
        raise

    logger.info(
        "Analysed file %s: %d rooms, %.0f sq ft",
        file_id, len(analysis.rooms), analysis.total_square_footage,
    )
    return analysis


def get_analysis_results(file_id: str) -> BlueprintAnalysis | None:
    """Stored analysis for a file, or None if it has not been analysed."""
    file_row = get_file(file_id)
    if not file_row or not file_row.get("ai_analysis_json"):
        return None
    return sanitize(file_row["ai_analysis_json"])


async def analyze_project_blueprints(project_id: str) -> list[BlueprintAnalysis]:
    """Analyse every pending or failed file of a project.

    A file that fails is logged and skipped; the others still run.
    """
    files = list_project_files(project_id, statuses=["pending", "failed"])
    results: list[BlueprintAnalysis] = []

    for file_row in files:
        try:
            results.append(await analyze_blueprint(file_row["id"]))
        except Exception as exc:
            logger.error("Failed to analyze file %s: %s", file_row.get("id"), exc)

    return results


def get_project_analysis(project_id: str) -> ProjectAnalysisSummary:
    """Combine every completed analysis of a project into one view."""
    analyses = [sanitize(record) for record in list_completed_analyses(project_id)]

    rooms = [room for analysis in analyses for room in analysis.rooms]
    return ProjectAnalysisSummary(
        total_rooms=len(rooms),
        total_square_footage=sum(a.total_square_footage for a in analyses),
        rooms_by_type=dict(Counter(room.type for room in rooms)),
        all_recommendations=[rec for a in analyses for rec in a.recommendations],
    )
