"""
Request and result types for the language service analyze-text jobs API.

Requests are built from ``TextDocumentInput`` and
``RecognizeCustomEntitiesAction``. Completed jobs are read back as pages
of ``AnalyzeActionsResult``, each holding one
``RecognizeCustomEntitiesActionResult`` per submitted action, which in
turn holds one ``RecognizeEntitiesResult`` per document.

Reading the results of an errored action or document raises
``LanguageServiceError``, so callers iterating results see the failure
at the point they touch it.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


class LanguageServiceError(Exception):
    """
    Raised for any failure reported by or while talking to the language service.

    Attributes:
        status_code: HTTP status code, when the failure came from a response
        error_code: Service error code (e.g. "InvalidDocument"), if reported
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.error_code = error_code


# ---------------------------------------------------------------------------
#  Request types
# ---------------------------------------------------------------------------

@dataclass
class TextDocumentInput:
    """
    A single document submitted for analysis.

    Attributes:
        id: Document identifier, unique within the batch
        text: Text to analyze
        language: Language code of the text
    """

    id: str
    text: str
    language: str = "en"

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "language": self.language, "text": self.text}


@dataclass
class RecognizeCustomEntitiesAction:
    """
    Custom entity recognition against a trained project deployment.

    Attributes:
        project_name: Custom NER project name
        deployment_name: Deployment of that project to query
        action_name: Optional task name; defaults to a positional name
    """

    project_name: str
    deployment_name: str
    action_name: Optional[str] = None

    def to_task(self, index: int) -> Dict[str, Any]:
        """Serialize as an entry of the job's ``tasks`` array."""
        return {
            "kind": "CustomEntityRecognition",
            "taskName": self.action_name or f"CustomEntityRecognition_{index}",
            "parameters": {
                "projectName": self.project_name,
                "deploymentName": self.deployment_name,
            },
        }


# ---------------------------------------------------------------------------
#  Result types
# ---------------------------------------------------------------------------

@dataclass
class CategorizedEntity:
    """An entity recognized in a document."""

    text: str
    category: str
    confidence_score: float
    offset: int
    length: int
    subcategory: Optional[str] = None


@dataclass
class ServiceError:
    """Error detail reported by the service."""

    code: str = ""
    message: str = ""

    def __str__(self) -> str:
        return f"({self.code}) {self.message}" if self.code else self.message


@dataclass
class RecognizeEntitiesResult:
    """
    Entities recognized in one document.

    Accessing ``entities`` on an errored document raises
    LanguageServiceError.
    """

    id: str
    _entities: List[CategorizedEntity] = field(default_factory=list, repr=False)
    warnings: List[str] = field(default_factory=list)
    error: Optional[ServiceError] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def entities(self) -> List[CategorizedEntity]:
        if self.error is not None:
            raise LanguageServiceError(
                f"Document '{self.id}' failed: {self.error}",
                error_code=self.error.code or None,
            )
        return self._entities


@dataclass
class RecognizeCustomEntitiesActionResult:
    """
    Result of one custom entity recognition action.

    Accessing ``document_results`` on a failed action raises
    LanguageServiceError.
    """

    action_name: str = ""
    _document_results: List[RecognizeEntitiesResult] = field(default_factory=list, repr=False)
    project_name: str = ""
    deployment_name: str = ""
    error: Optional[ServiceError] = None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def document_results(self) -> List[RecognizeEntitiesResult]:
        if self.error is not None:
            raise LanguageServiceError(
                f"Action '{self.action_name}' failed: {self.error}",
                error_code=self.error.code or None,
            )
        return self._document_results


@dataclass
class AnalyzeActionsResult:
    """One page of a completed analyze-actions job."""

    recognize_custom_entities_results: List[RecognizeCustomEntitiesActionResult] = field(
        default_factory=list
    )


__all__ = [
    "LanguageServiceError",
    "TextDocumentInput",
    "RecognizeCustomEntitiesAction",
    "CategorizedEntity",
    "ServiceError",
    "RecognizeEntitiesResult",
    "RecognizeCustomEntitiesActionResult",
    "AnalyzeActionsResult",
]
