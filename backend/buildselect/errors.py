"""BuildSelect error types.

Data-quality problems in AI output are never raised; they are repaired by
the sanitizer. These exceptions cover missing rows, generation
preconditions, and failures of the analysis pipeline.
"""

from typing import Any


class BuildSelectError(Exception):
    """Base exception carrying a machine-readable code and extra context."""

    code = "BUILDSELECT_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": type(self).__name__,
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(BuildSelectError):
    """A project, file, or other row does not exist."""

    code = "NOT_FOUND"
    status_code = 404


# ---------------------------------------------------------------------------
# Selection generation
# ---------------------------------------------------------------------------

class SelectionGenerationError(BuildSelectError):
    """Nothing valid to generate selections from."""

    code = "SELECTION_GENERATION_FAILED"
    status_code = 422


class QuestionnaireNotFoundError(SelectionGenerationError):
    code = "QUESTIONNAIRE_NOT_FOUND"


class NoEligibleProductsError(SelectionGenerationError):
    code = "NO_ELIGIBLE_PRODUCTS"


class CatalogNotFoundError(SelectionGenerationError):
    code = "CATALOG_NOT_FOUND"


class NoSelectionsGeneratedError(SelectionGenerationError):
    code = "NO_SELECTIONS_GENERATED"


# ---------------------------------------------------------------------------
# Blueprint analysis
# ---------------------------------------------------------------------------

class AnalysisError(BuildSelectError):
    """The blueprint analysis pipeline could not produce a result."""

    code = "ANALYSIS_FAILED"
    status_code = 502


class UnsupportedFileTypeError(AnalysisError):
    code = "UNSUPPORTED_FILE_TYPE"
    status_code = 415


class AIResponseParseError(AnalysisError):
    code = "AI_RESPONSE_UNPARSEABLE"
