"""
Client for the language service analyze-text jobs API.

Submits custom entity recognition jobs, polls them to completion and
reads the results back page by page. The REST contract is the one
documented for Azure AI Language:

    POST {endpoint}/language/analyze-text/jobs?api-version=...
        -> 202, Operation-Location: {job url}
    GET  {job url}
        -> {"status": "running" | "succeeded" | ..., "tasks": {...}, "nextLink": ...}

API Documentation:
https://learn.microsoft.com/rest/api/language/analyze-text/analyze-text-submit-job

Example:
    >>> client = TextAnalyticsClient.from_config(config)
    >>> operation = client.begin_analyze_actions(documents, actions)
    >>> operation.wait_for_completion()
    >>> for page in operation.pages():
    ...     for action_result in page.recognize_custom_entities_results:
    ...         ...
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence

import requests

from video_intel.config import Config
from video_intel.language.models import (
    AnalyzeActionsResult,
    CategorizedEntity,
    LanguageServiceError,
    RecognizeCustomEntitiesAction,
    RecognizeCustomEntitiesActionResult,
    RecognizeEntitiesResult,
    ServiceError,
    TextDocumentInput,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
#  Constants
# ---------------------------------------------------------------------------

JOBS_PATH = "/language/analyze-text/jobs"
AUTH_HEADER = "Ocp-Apim-Subscription-Key"
CUSTOM_ENTITIES_RESULT_KIND = "CustomEntityRecognitionLROResults"
DEFAULT_API_VERSION = "2022-05-01"
DEFAULT_POLLING_INTERVAL = 5.0  # seconds
REQUEST_TIMEOUT = 15  # seconds
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_FACTOR = 0.8  # seconds, doubled per attempt

COMPLETED_STATUSES = frozenset({"succeeded", "partiallySucceeded", "partiallyCompleted"})
FAILED_STATUSES = frozenset({"failed", "cancelled"})
IN_PROGRESS_STATUSES = frozenset({"notStarted", "running", "cancelling"})
RETRY_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})


# ---------------------------------------------------------------------------
#  Provider interface
# ---------------------------------------------------------------------------

class AnalyzeOperation(ABC):
    """
    Handle to a submitted analyze-actions job.

    ``wait_for_completion()`` blocks until the job is terminal.
    ``pages()`` then returns a lazy, finite sequence of result pages;
    each call starts again from the first page.
    """

    @abstractmethod
    def wait_for_completion(self) -> None:
        """Block until the job has finished, raising if it failed."""

    @abstractmethod
    def pages(self) -> Iterator[AnalyzeActionsResult]:
        """Iterate result pages of the completed job."""


class TextAnalyticsProvider(ABC):
    """Anything that can start an analyze-actions job."""

    @abstractmethod
    def begin_analyze_actions(
        self,
        documents: Sequence[TextDocumentInput],
        actions: Sequence[RecognizeCustomEntitiesAction],
    ) -> AnalyzeOperation:
        """
        Submit documents for analysis.

        Args:
            documents: Documents to analyze
            actions: Actions to run over every document

        Returns:
            Operation handle for the submitted job
        """


# ---------------------------------------------------------------------------
#  REST implementation
# ---------------------------------------------------------------------------

class AnalyzeActionsOperation(AnalyzeOperation):
    """
    Operation handle backed by the job status URL.

    Attributes:
        operation_url: Job status URL from the Operation-Location header
        status: Last status reported by the service
    """

    def __init__(
        self,
        session: requests.Session,
        operation_url: str,
        document_ids: Sequence[str],
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
        request_timeout: float = REQUEST_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    ) -> None:
        self._session = session
        self.operation_url = operation_url
        self._document_order = {doc_id: i for i, doc_id in enumerate(document_ids)}
        self._polling_interval = polling_interval
        self._request_timeout = request_timeout
        self._max_retries = max_retries
        self._backoff_factor = backoff_factor
        self._first_page: Optional[Dict[str, Any]] = None
        self.status = "notStarted"

    @property
    def done(self) -> bool:
        return self._first_page is not None

    def wait_for_completion(self) -> None:
        while True:
            response = self._get(self.operation_url)
            payload = response.json()
            self.status = payload.get("status", "")

            if self.status in COMPLETED_STATUSES:
                self._first_page = payload
                logger.info("Job %s completed with status %s", payload.get("jobId", ""), self.status)
                return

            if self.status in FAILED_STATUSES:
                error = _first_error(payload.get("errors"))
                raise LanguageServiceError(
                    f"Analyze job {self.status}: {error}" if error else f"Analyze job {self.status}",
                    error_code=error.code if error and error.code else None,
                )

            if self.status not in IN_PROGRESS_STATUSES:
                raise LanguageServiceError(
                    f"Analyze job returned unexpected status '{self.status}'"
                    if self.status else "Analyze job status response has no status"
                )

            delay = _retry_after(response, self._polling_interval)
            logger.debug("Job status %s, polling again in %.1fs", self.status, delay)
            if delay > 0:
                time.sleep(delay)

    def pages(self) -> Iterator[AnalyzeActionsResult]:
        if self._first_page is None:
            raise LanguageServiceError("Analyze job has not completed; call wait_for_completion() first")
        return self._iter_pages(self._first_page)

    def _iter_pages(self, payload: Dict[str, Any]) -> Iterator[AnalyzeActionsResult]:
        page_count = 0
        while True:
            page_count += 1
            yield _parse_page(payload, self._document_order)

            next_link = payload.get("nextLink")
            if not next_link:
                break
            payload = self._get(next_link).json()

        logger.debug("Read %d result page(s) from %s", page_count, self.operation_url)

    def _get(self, url: str) -> requests.Response:
        return _send(
            self._session.get,
            url,
            timeout=self._request_timeout,
            max_retries=self._max_retries,
            backoff_factor=self._backoff_factor,
        )


class TextAnalyticsClient(TextAnalyticsProvider):
    """
    Language service client for custom entity recognition jobs.

    Attributes:
        endpoint: Service endpoint URL without trailing slash
        api_version: analyze-text API version sent with every submission
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str,
        api_version: str = DEFAULT_API_VERSION,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
        request_timeout: float = REQUEST_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
        session: Optional[requests.Session] = None,
    ) -> None:
        if not endpoint:
            raise ValueError("endpoint is required")
        if not api_key:
            raise ValueError("api_key is required")

        self.endpoint = endpoint.rstrip("/")
        self.api_version = api_version
        self.polling_interval = polling_interval
        self.request_timeout = request_timeout
        self.max_retries = max_retries
        self.backoff_factor = backoff_factor

        self._session = session or requests.Session()
        self._session.headers.update({AUTH_HEADER: api_key})

    @classmethod
    def from_config(cls, config: Config, session: Optional[requests.Session] = None) -> "TextAnalyticsClient":
        """Build a client from application configuration."""
        return cls(
            endpoint=config.endpoint,
            api_key=config.api_key,
            api_version=config.api_version,
            polling_interval=config.polling_interval,
            request_timeout=config.request_timeout,
            max_retries=config.max_retries,
            backoff_factor=config.retry_backoff,
            session=session,
        )

    def begin_analyze_actions(
        self,
        documents: Sequence[TextDocumentInput],
        actions: Sequence[RecognizeCustomEntitiesAction],
        display_name: Optional[str] = None,
    ) -> AnalyzeActionsOperation:
        if not documents:
            raise ValueError("At least one document is required")
        if not actions:
            raise ValueError("At least one action is required")

        body: Dict[str, Any] = {
            "analysisInput": {"documents": [doc.to_dict() for doc in documents]},
            "tasks": [action.to_task(i) for i, action in enumerate(actions)],
        }
        if display_name:
            body["displayName"] = display_name

        response = _send(
            self._session.post,
            f"{self.endpoint}{JOBS_PATH}",
            timeout=self.request_timeout,
            max_retries=self.max_retries,
            backoff_factor=self.backoff_factor,
            params={"api-version": self.api_version},
            json=body,
        )

        operation_url = response.headers.get("Operation-Location")
        if not operation_url:
            raise LanguageServiceError(
                "Language service accepted the job but returned no Operation-Location",
                status_code=response.status_code,
            )

        logger.info(
            "Submitted %d document(s) with %d action(s) to %s",
            len(documents),
            len(actions),
            self.endpoint,
        )

        return AnalyzeActionsOperation(
            session=self._session,
            operation_url=operation_url,
            document_ids=[doc.id for doc in documents],
            polling_interval=self.polling_interval,
            request_timeout=self.request_timeout,
            max_retries=self.max_retries,
            backoff_factor=self.backoff_factor,
        )


# ---------------------------------------------------------------------------
#  Response parsing helpers
# ---------------------------------------------------------------------------

def _send(
    send: Callable[..., requests.Response],
    url: str,
    timeout: float,
    max_retries: int = DEFAULT_MAX_RETRIES,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    **kwargs: Any,
) -> requests.Response:
    """
    Send a request, retrying throttling, server errors and transport failures.

    Waits for Retry-After seconds when the service sends the header,
    otherwise ``backoff_factor * 2 ** attempt``. Once retries run out the
    last failure is raised as LanguageServiceError.

    Args:
        send: Bound session method (``session.get`` / ``session.post``)
        url: Request URL
        timeout: Per-request timeout in seconds
        max_retries: Retries after the first attempt
        backoff_factor: Base delay in seconds
        **kwargs: Passed through to ``send``

    Returns:
        The successful response
    """
    attempt = 0
    while True:
        backoff = backoff_factor * (2 ** attempt)
        try:
            response = send(url, timeout=timeout, **kwargs)
        except requests.exceptions.RequestException as exc:
            if attempt >= max_retries:
                raise LanguageServiceError(f"Language service request failed: {exc}") from exc
            delay = backoff
            logger.warning("Language service request failed (%s), retrying in %.1fs", exc, delay)
        else:
            if response.status_code not in RETRY_STATUS_CODES or attempt >= max_retries:
                _raise_for_status(response)
                return response
            delay = _retry_after(response, backoff)
            logger.warning(
                "Language service returned HTTP %d, retrying in %.1fs",
                response.status_code,
                delay,
            )

        attempt += 1
        if delay > 0:
            time.sleep(delay)


def _raise_for_status(response: requests.Response) -> None:
    """Raise LanguageServiceError for a non-2xx response."""
    if response.status_code < 400:
        return

    error_code = None
    message = response.reason or f"HTTP {response.status_code}"
    try:
        body = response.json()
    except ValueError:
        body = {}
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error:
        error_code = error.get("code")
        message = error.get("message", message)

    raise LanguageServiceError(
        f"Language service returned HTTP {response.status_code}: {message}",
        status_code=response.status_code,
        error_code=error_code,
    )


def _retry_after(response: requests.Response, default: float) -> float:
    """Seconds to wait before the next poll, from Retry-After if sent."""
    value = response.headers.get("Retry-After")
    if value is None:
        return default
    try:
        return max(float(value), 0.0)
    except ValueError:
        return default


def _parse_error(data: Optional[Dict[str, Any]]) -> Optional[ServiceError]:
    if not data:
        return None
    return ServiceError(code=data.get("code", ""), message=data.get("message", ""))


def _first_error(errors: Optional[List[Dict[str, Any]]]) -> Optional[ServiceError]:
    if not errors:
        return None
    return _parse_error(errors[0])


def _parse_entity(entity_data: Dict[str, Any]) -> CategorizedEntity:
    return CategorizedEntity(
        text=entity_data.get("text", ""),
        category=entity_data.get("category", ""),
        subcategory=entity_data.get("subcategory"),
        confidence_score=float(entity_data.get("confidenceScore", 0.0)),
        offset=int(entity_data.get("offset", 0)),
        length=int(entity_data.get("length", 0)),
    )


def _parse_documents(
    results: Dict[str, Any],
    document_order: Dict[str, int],
) -> List[RecognizeEntitiesResult]:
    """
    Merge successful and errored documents back into submission order.

    Args:
        results: The ``results`` object of a task item
        document_order: Submitted document id -> position

    Returns:
        One RecognizeEntitiesResult per document
    """
    documents = [
        RecognizeEntitiesResult(
            id=str(doc.get("id", "")),
            _entities=[_parse_entity(e) for e in doc.get("entities", [])],
            warnings=[w.get("message", "") for w in doc.get("warnings", [])],
        )
        for doc in results.get("documents", [])
    ]
    documents.extend(
        RecognizeEntitiesResult(id=str(err.get("id", "")), error=_parse_error(err.get("error", {})))
        for err in results.get("errors", [])
    )

    last = len(document_order)
    documents.sort(key=lambda d: document_order.get(d.id, last))
    return documents


def _parse_page(
    payload: Dict[str, Any],
    document_order: Dict[str, int],
) -> AnalyzeActionsResult:
    """Parse one job status payload into an AnalyzeActionsResult."""
    action_results = []
    items = payload.get("tasks", {}).get("items", [])

    for item in items:
        if item.get("kind") != CUSTOM_ENTITIES_RESULT_KIND:
            continue

        task_name = item.get("taskName", "")
        if item.get("status") == "failed":
            error = _parse_error(item.get("error")) or _first_error(payload.get("errors"))
            action_results.append(
                RecognizeCustomEntitiesActionResult(
                    action_name=task_name,
                    error=error or ServiceError(message="Action failed"),
                )
            )
            continue

        results = item.get("results", {})
        action_results.append(
            RecognizeCustomEntitiesActionResult(
                action_name=task_name,
                _document_results=_parse_documents(results, document_order),
                project_name=results.get("projectName", ""),
                deployment_name=results.get("deploymentName", ""),
            )
        )

    return AnalyzeActionsResult(recognize_custom_entities_results=action_results)


__all__ = [
    "AnalyzeOperation",
    "TextAnalyticsProvider",
    "AnalyzeActionsOperation",
    "TextAnalyticsClient",
]
