"""
Test helpers shared across test modules.

Provides:
- Builders for analyze-text job payloads and mock requests responses
- Builders for parsed result pages
- A fake language service provider with scripted result pages
"""

from typing import Iterator, List, Optional, Sequence, Tuple
from unittest.mock import MagicMock

from video_intel.language.client import AnalyzeOperation, TextAnalyticsProvider
from video_intel.language.models import (
    AnalyzeActionsResult,
    CategorizedEntity,
    RecognizeCustomEntitiesAction,
    RecognizeCustomEntitiesActionResult,
    RecognizeEntitiesResult,
    TextDocumentInput,
)


# ---------------------------------------------------------------------------
#  HTTP payload builders
# ---------------------------------------------------------------------------

def make_response(status_code=200, payload=None, headers=None, reason="OK") -> MagicMock:
    """Build a mock requests.Response; an Exception payload makes .json() raise it."""
    response = MagicMock()
    response.status_code = status_code
    response.reason = reason
    response.headers = headers or {}
    if isinstance(payload, Exception):
        response.json.side_effect = payload
    else:
        response.json.return_value = payload if payload is not None else {}
    return response


def make_entity_payload(text, score, category="Keyword", offset=0, subcategory=None) -> dict:
    """Build one entity as returned in ``results.documents[].entities``."""
    entity = {
        "text": text,
        "category": category,
        "offset": offset,
        "length": len(text),
        "confidenceScore": score,
    }
    if subcategory:
        entity["subcategory"] = subcategory
    return entity


def make_job_payload(status="succeeded", documents=None, errors=None, next_link=None, item_status="succeeded") -> dict:
    """Build an analyze-text job status payload."""
    payload = {
        "jobId": "job-1",
        "status": status,
        "errors": [],
        "tasks": {
            "completed": 1,
            "failed": 0,
            "inProgress": 0,
            "total": 1,
            "items": [
                {
                    "kind": "CustomEntityRecognitionLROResults",
                    "taskName": "CustomEntityRecognition_0",
                    "status": item_status,
                    "results": {
                        "documents": documents or [],
                        "errors": errors or [],
                        "projectName": "video-keywords",
                        "deploymentName": "production",
                    },
                }
            ],
        },
    }
    if next_link:
        payload["nextLink"] = next_link
    return payload


def make_session(operation_url: str) -> MagicMock:
    """Build a mock requests.Session whose POST accepts the job."""
    session = MagicMock()
    session.headers = {}
    session.post.return_value = make_response(202, headers={"Operation-Location": operation_url})
    return session


# ---------------------------------------------------------------------------
#  Parsed result builders
# ---------------------------------------------------------------------------

def make_entity(text: str, score: float, category: str = "Keyword", offset: int = 0) -> CategorizedEntity:
    """Build a CategorizedEntity with a length matching its text."""
    return CategorizedEntity(
        text=text,
        category=category,
        confidence_score=score,
        offset=offset,
        length=len(text),
    )


def make_page(*documents: Sequence[Tuple[str, float]]) -> AnalyzeActionsResult:
    """Build one result page; each argument is one document's (text, score) pairs."""
    document_results = [
        RecognizeEntitiesResult(
            id=str(i + 1),
            _entities=[make_entity(text, score) for text, score in entities],
        )
        for i, entities in enumerate(documents)
    ]
    return AnalyzeActionsResult(
        recognize_custom_entities_results=[
            RecognizeCustomEntitiesActionResult(
                action_name="CustomEntityRecognition_0",
                _document_results=document_results,
            )
        ]
    )


# ---------------------------------------------------------------------------
#  Fake provider
# ---------------------------------------------------------------------------

class FakeOperation(AnalyzeOperation):
    """Operation returning scripted pages, optionally failing part way."""

    def __init__(
        self,
        pages: List[AnalyzeActionsResult],
        wait_error: Optional[Exception] = None,
        page_error: Optional[Exception] = None,
    ) -> None:
        self._pages = pages
        self._wait_error = wait_error
        self._page_error = page_error
        self.wait_calls = 0

    def wait_for_completion(self) -> None:
        self.wait_calls += 1
        if self._wait_error is not None:
            raise self._wait_error

    def pages(self) -> Iterator[AnalyzeActionsResult]:
        for page in self._pages:
            yield page
        if self._page_error is not None:
            raise self._page_error


class FakeProvider(TextAnalyticsProvider):
    """Provider that records submissions and hands out a FakeOperation."""

    def __init__(self, operation: Optional[FakeOperation] = None, submit_error: Optional[Exception] = None):
        self.operation = operation or FakeOperation([])
        self.submit_error = submit_error
        self.submissions: List[Tuple[List[TextDocumentInput], List[RecognizeCustomEntitiesAction]]] = []

    def begin_analyze_actions(self, documents, actions):
        self.submissions.append((list(documents), list(actions)))
        if self.submit_error is not None:
            raise self.submit_error
        return self.operation
