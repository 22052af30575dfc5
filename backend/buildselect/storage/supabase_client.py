"""
Supabase client for BuildSelect. Handles all database operations for
project files, projects, catalogs, questionnaires, products, and selections.
"""

from datetime import datetime, timezone

from supabase import create_client, Client

from buildselect.config import SUPABASE_URL, SUPABASE_SERVICE_KEY

_client: Client | None = None


def get_client() -> Client:
    """Return the shared Supabase client, creating it on first use."""
    global _client
    if _client is None:
        _client = create_client(SUPABASE_URL, SUPABASE_SERVICE_KEY)
    return _client


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _first_row(result) -> dict | None:
    if result.data:
        return result.data[0]
    return None


# ---------------------------------------------------------------------------
# Project files
# ---------------------------------------------------------------------------

def get_file(file_id: str) -> dict | None:
    """Fetch a single project file by its ID. Returns the row dict or None."""
    result = (
        get_client().table("project_files")
        .select("*")
        .eq("id", file_id)
        .execute()
    )
    return _first_row(result)


def update_file(file_id: str, updates: dict) -> None:
    """Apply a partial update to a project file row."""
    get_client().table("project_files").update(updates).eq("id", file_id).execute()


def list_project_files(project_id: str, statuses: list[str] | None = None) -> list[dict]:
    """Return the project's files, optionally filtered by processing status."""
    query = get_client().table("project_files").select("*").eq("project_id", project_id)
    if statuses:
        query = query.in_("processing_status", statuses)
    result = query.execute()
    return result.data or []


def list_completed_analyses(project_id: str) -> list[dict]:
    """Return the stored ``ai_analysis_json`` of every completed file."""
    result = (
        get_client().table("project_files")
        .select("ai_analysis_json")
        .eq("project_id", project_id)
        .eq("processing_status", "completed")
        .not_.is_("ai_analysis_json", "null")
        .execute()
    )
    return [row["ai_analysis_json"] for row in (result.data or []) if row.get("ai_analysis_json")]


# ---------------------------------------------------------------------------
# Projects & catalogs
# ---------------------------------------------------------------------------

def get_project(project_id: str) -> dict | None:
    """Fetch a single project by its ID. Returns the row dict or None."""
    result = (
        get_client().table("projects")
        .select("*")
        .eq("id", project_id)
        .execute()
    )
    return _first_row(result)


def update_project(project_id: str, updates: dict) -> None:
    """Apply a partial update to a project, stamping ``updated_at``."""
    row = {**updates, "updated_at": _now_iso()}
    get_client().table("projects").update(row).eq("id", project_id).execute()


def update_project_status(project_id: str, status: str) -> None:
    update_project(project_id, {"status": status})


def get_first_public_catalog() -> dict | None:
    """Return any public catalog, used when a project has none assigned."""
    result = (
        get_client().table("catalogs")
        .select("id")
        .eq("is_public", True)
        .limit(1)
        .execute()
    )
    return _first_row(result)


# ---------------------------------------------------------------------------
# Questionnaires & products
# ---------------------------------------------------------------------------

def get_latest_questionnaire(project_id: str) -> dict | None:
    """Return the most recently completed questionnaire for a project."""
    result = (
        get_client().table("questionnaires")
        .select("*")
        .eq("project_id", project_id)
        .order("completed_at", desc=True)
        .limit(1)
        .execute()
    )
    return _first_row(result)


def query_catalog_products(catalog_id: str, categories: list[str]) -> list[dict]:
    """Available products of a catalog restricted to the given categories."""
    if not categories:
        return []
    result = (
        get_client().table("products")
        .select("*")
        .eq("catalog_id", catalog_id)
        .in_("category", categories)
        .eq("is_available", True)
        .execute()
    )
    return result.data or []


# ---------------------------------------------------------------------------
# Selections
# ---------------------------------------------------------------------------

def replace_selections(project_id: str, rows: list[dict]) -> None:
    """Delete every selection of the project, then insert ``rows``."""
    client = get_client()
    client.table("selections").delete().eq("project_id", project_id).execute()
    if rows:
        client.table("selections").insert(rows).execute()


def list_selections(project_id: str) -> list[dict]:
    """Return a project's selections in display order."""
    result = (
        get_client().table("selections")
        .select("*")
        .eq("project_id", project_id)
        .order("sort_order")
        .execute()
    )
    return result.data or []
