"""Unit tests for the blueprint analysis pipeline."""

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from buildselect.errors import (
    AIResponseParseError,
    AnalysisError,
    NotFoundError,
    UnsupportedFileTypeError,
)
from buildselect.services import room_analyzer
from buildselect.services.room_analyzer import (
    _parse_gemini_json,
    analyze_blueprint,
    analyze_project_blueprints,
    build_prompt,
    get_analysis_results,
    get_project_analysis,
    perform_ai_analysis,
)


@pytest.fixture
def file_row():
    return {
        "id": "file-1",
        "project_id": "proj-1",
        "file_url": "https://storage.example.com/plans/first-floor.pdf",
        "file_type": "pdf",
        "processing_status": "pending",
        "ai_analysis_json": None,
    }


@pytest.fixture
def storage(monkeypatch, file_row):
    """Mock the storage functions the analyzer uses."""
    mocks = {
        "get_file": MagicMock(return_value=file_row),
        "update_file": MagicMock(),
        "get_project": MagicMock(return_value={
            "id": "proj-1",
            "name": "Maple Street Remodel",
            "questionnaire_json": {"project_type": "residential", "floor_count": 2},
        }),
        "list_project_files": MagicMock(return_value=[]),
        "list_completed_analyses": MagicMock(return_value=[]),
    }
    for name, mock in mocks.items():
        monkeypatch.setattr(room_analyzer, name, mock)
    return mocks


@pytest.fixture
def gemini(monkeypatch):
    """Mock the Gemini client and the file download."""
    client = MagicMock()
    client.aio.models.generate_content = AsyncMock()
    monkeypatch.setattr(room_analyzer, "_get_client", lambda: client)
    monkeypatch.setattr(
        room_analyzer, "_fetch_file_bytes", AsyncMock(return_value=b"%PDF-1.7 fake")
    )
    return client


def _status_updates(storage):
    return [c.args[1].get("processing_status") for c in storage["update_file"].call_args_list]


class TestParsing:

    def test_parse_plain_json(self):
        assert _parse_gemini_json('{"rooms": []}') == {"rooms": []}

    def test_parse_fenced_json(self):
        assert _parse_gemini_json('```json\n{"floorCount": 2}\n```') == {"floorCount": 2}
        assert _parse_gemini_json('```\n{"floorCount": 3}\n```  ') == {"floorCount": 3}

    def test_parse_invalid_json_raises(self):
        with pytest.raises(json.JSONDecodeError):
            _parse_gemini_json("Sorry, I cannot read this blueprint.")


class TestBuildPrompt:

    def test_includes_project_context(self):
        prompt = build_prompt("pdf", {
            "project_name": "Maple Street",
            "questionnaire": {"project_type": "commercial", "floor_count": 3},
        })

        assert "Analyze ALL pages" in prompt
        assert "Project name: Maple Street" in prompt
        assert "Project type: commercial" in prompt
        assert "Expected floors: 3" in prompt
        assert '"squareFootage"' in prompt

    def test_without_context(self):
        prompt = build_prompt("image")

        assert "single blueprint page" in prompt
        assert "PROJECT CONTEXT" not in prompt


class TestPerformAIAnalysis:
    """Tests for the vision model call."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("file_type", ["dwg", "dxf", "dwf", "rvt", "ifc", "docx"])
    async def test_unsupported_types_rejected(self, gemini, file_type):
        with pytest.raises(UnsupportedFileTypeError):
            await perform_ai_analysis("https://x/plan", file_type)

        room_analyzer._fetch_file_bytes.assert_not_called()

    @pytest.mark.asyncio
    async def test_returns_parsed_payload(self, gemini):
        gemini.aio.models.generate_content.return_value = MagicMock(
            text='```json\n{"rooms": [{"name": "Kitchen"}], "floorCount": 1}\n```'
        )

        parsed, raw_text = await perform_ai_analysis("https://x/plan.pdf", "pdf")

        assert parsed == {"rooms": [{"name": "Kitchen"}], "floorCount": 1}
        assert raw_text.startswith("```json")
        parts = gemini.aio.models.generate_content.call_args.kwargs["contents"][0]["parts"]
        assert parts[0]["inline_data"]["mime_type"] == "application/pdf"

    @pytest.mark.asyncio
    async def test_image_mime_type_from_url(self, gemini):
        gemini.aio.models.generate_content.return_value = MagicMock(text="{}")

        await perform_ai_analysis("https://x/plan.PNG?token=1", "image")

        parts = gemini.aio.models.generate_content.call_args.kwargs["contents"][0]["parts"]
        assert parts[0]["inline_data"]["mime_type"] == "image/png"

    @pytest.mark.asyncio
    async def test_unparseable_reply(self, gemini):
        gemini.aio.models.generate_content.return_value = MagicMock(text="not json")

        with pytest.raises(AIResponseParseError):
            await perform_ai_analysis("https://x/plan.pdf", "pdf")

    @pytest.mark.asyncio
    async def test_empty_reply(self, gemini):
        gemini.aio.models.generate_content.return_value = MagicMock(text="")

        with pytest.raises(AnalysisError):
            await perform_ai_analysis("https://x/plan.pdf", "pdf")

    @pytest.mark.asyncio
    async def test_model_failure_wrapped(self, gemini):
        gemini.aio.models.generate_content.side_effect = RuntimeError("quota")

        with pytest.raises(AnalysisError, match="quota"):
            await perform_ai_analysis("https://x/plan.pdf", "pdf")


class TestAnalyzeBlueprint:
    """Tests for the per-file pipeline."""

    @pytest.mark.asyncio
    async def test_success_stores_sanitized_record(self, storage, gemini, messy_analysis):
        gemini.aio.models.generate_content.return_value = MagicMock(
            text=json.dumps(messy_analysis)
        )

        analysis = await analyze_blueprint("file-1")

        assert _status_updates(storage) == ["processing", "completed"]
        stored = storage["update_file"].call_args_list[-1].args[1]["ai_analysis_json"]
        assert stored["rooms"][0]["dimensions"]["squareFootage"] == 120
        assert stored["metadata"]["fileType"] == "pdf"
        assert stored["metadata"]["confidence"] == analysis.metadata.confidence
        assert len(analysis.rooms) == 4
        prompt = gemini.aio.models.generate_content.call_args.kwargs["contents"][0]["parts"][1]["text"]
        assert "Maple Street Remodel" in prompt

    @pytest.mark.asyncio
    async def test_failure_marks_file_failed(self, storage, gemini):
        gemini.aio.models.generate_content.return_value = MagicMock(text="garbage")

        with pytest.raises(AIResponseParseError):
            await analyze_blueprint("file-1")

        assert _status_updates(storage) == ["processing", "failed"]

    @pytest.mark.asyncio
    async def test_status_write_failure_keeps_original_error(self, storage, gemini):
        gemini.aio.models.generate_content.return_value = MagicMock(text="garbage")
        storage["update_file"].side_effect = [None, ConnectionError("db down")]

        with pytest.raises(AIResponseParseError):
            await analyze_blueprint("file-1")

        assert _status_updates(storage) == ["processing", "failed"]

    @pytest.mark.asyncio
    async def test_unsupported_file_marks_failed(self, storage, gemini, file_row):
        file_row["file_type"] = "dwg"

        with pytest.raises(UnsupportedFileTypeError):
            await analyze_blueprint("file-1")

        assert _status_updates(storage) == ["processing", "failed"]

    @pytest.mark.asyncio
    async def test_unknown_file(self, storage, gemini):
        storage["get_file"].return_value = None

        with pytest.raises(NotFoundError):
            await analyze_blueprint("missing")

        storage["update_file"].assert_not_called()

    @pytest.mark.asyncio
    async def test_non_object_reply_still_produces_record(self, storage, gemini):
        gemini.aio.models.generate_content.return_value = MagicMock(text="[1, 2, 3]")

        analysis = await analyze_blueprint("file-1")

        assert analysis.rooms == []
        assert analysis.floor_count == 1
        assert _status_updates(storage)[-1] == "completed"


class TestProjectAnalysis:

    @pytest.mark.asyncio
    async def test_failed_files_are_skipped(self, storage, monkeypatch):
        storage["list_project_files"].return_value = [{"id": "f-1"}, {"id": "f-2"}]

        async def fake_analyze(file_id):
            if file_id == "f-1":
                raise AnalysisError("boom")
            return room_analyzer.sanitize({"rooms": [{"name": "Den"}]})

        monkeypatch.setattr(room_analyzer, "analyze_blueprint", fake_analyze)

        results = await analyze_project_blueprints("proj-1")

        storage["list_project_files"].assert_called_once_with(
            "proj-1", statuses=["pending", "failed"]
        )
        assert len(results) == 1
        assert results[0].rooms[0].name == "Den"

    def test_aggregates_completed_analyses(self, storage, clean_analysis):
        storage["list_completed_analyses"].return_value = [
            clean_analysis,
            {"rooms": [{"type": "kitchen"}, {"type": "bathroom"}], "totalSquareFootage": 300},
        ]

        summary = get_project_analysis("proj-1")

        assert summary.total_rooms == 4
        assert summary.total_square_footage == 1750
        assert summary.rooms_by_type == {"kitchen": 2, "bedroom": 1, "bathroom": 1}
        assert len(summary.all_recommendations) == 1

    def test_empty_project(self, storage):
        summary = get_project_analysis("proj-1")

        assert summary.total_rooms == 0
        assert summary.rooms_by_type == {}

    def test_get_analysis_results(self, storage, file_row, clean_analysis):
        assert get_analysis_results("file-1") is None

        file_row["ai_analysis_json"] = clean_analysis
        result = get_analysis_results("file-1")

        assert result.rooms[1].name == "Master Bedroom"
