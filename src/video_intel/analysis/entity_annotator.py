"""
Entity annotation for video descriptions.

Sends a video's raw description to a custom named entity recognition
deployment, waits for the asynchronous job and copies the recognized
entities onto the video. Entities at or above the confidence threshold
are also collected into ``Video.processed_text``, one per line.

Failures never propagate to the caller. They are logged as an error
banner plus the underlying message, and reported in the returned
``AnnotationResult``.

Example:
    >>> from video_intel.analysis.entity_annotator import annotate_video
    >>> result = annotate_video(video, config)
    >>> if result.succeeded:
    ...     print(video.processed_text)
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from video_intel.config import Config, get_config
from video_intel.language.client import TextAnalyticsClient, TextAnalyticsProvider
from video_intel.language.models import (
    CategorizedEntity,
    RecognizeCustomEntitiesAction,
    TextDocumentInput,
)
from video_intel.models.entities import EntityAnnotation, Video

logger = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_THRESHOLD = 0.8
DEFAULT_LANGUAGE = "en"
DOCUMENT_ID = "1"


# ---------------------------------------------------------------------------
#  Result models
# ---------------------------------------------------------------------------

@dataclass
class AnnotationFailure:
    """
    Why an annotation run failed.

    Attributes:
        stage: Where it failed: configuration, submission, polling or results
        error_type: Exception class name
        message: Exception message
        cause: The exception itself (not serialized)
    """

    stage: str
    error_type: str
    message: str
    cause: Optional[BaseException] = field(default=None, repr=False, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"stage": self.stage, "error_type": self.error_type, "message": self.message}


@dataclass
class AnnotationResult:
    """
    Outcome of one annotate_video() call.

    Attributes:
        video_id: Video that was processed
        succeeded: True when every result page was consumed
        skipped: True when the video had no description text
        entities_added: Entities appended to the video in this run
        processed_text: Summary written to the video, if any
        processed_at: ISO-8601 timestamp of the run
        failure: Failure detail when succeeded is False and not skipped
    """

    video_id: str
    succeeded: bool = False
    skipped: bool = False
    entities_added: int = 0
    processed_text: Optional[str] = None
    processed_at: str = ""
    failure: Optional[AnnotationFailure] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "video_id": self.video_id,
            "succeeded": self.succeeded,
            "skipped": self.skipped,
            "entities_added": self.entities_added,
            "processed_text": self.processed_text,
            "processed_at": self.processed_at,
            "failure": self.failure.to_dict() if self.failure else None,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


# ---------------------------------------------------------------------------
#  Helpers
# ---------------------------------------------------------------------------

def build_document_batch(text: str, language: str = DEFAULT_LANGUAGE) -> List[TextDocumentInput]:
    """Wrap a description as the single-document batch sent to the service."""
    return [TextDocumentInput(id=DOCUMENT_ID, text=text, language=language)]


def to_annotation(entity: CategorizedEntity) -> EntityAnnotation:
    """Copy a service entity into a video annotation."""
    return EntityAnnotation(
        text=entity.text,
        category=str(entity.category),
        sub_category=entity.subcategory,
        confidence_score=entity.confidence_score,
        offset=entity.offset,
        length=entity.length,
    )


def summarize_entities(
    entities: Iterable[CategorizedEntity],
    threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
) -> str:
    """
    Join the text of entities scoring at least ``threshold``, one per line.

    Every included entity is followed by a newline, including the last.
    """
    return "".join(f"{e.text}\n" for e in entities if e.confidence_score >= threshold)


# ---------------------------------------------------------------------------
#  Main entry point
# ---------------------------------------------------------------------------

def annotate_video(
    video: Video,
    config: Optional[Config] = None,
    client: Optional[TextAnalyticsProvider] = None,
    log: Optional[logging.Logger] = None,
) -> AnnotationResult:
    """
    Recognize entities in a video description and attach them to the video.

    Every returned entity is appended to ``video.categorized_entities``.
    For each result document, ``video.processed_text`` is overwritten with
    that document's high-confidence entity text, so with several documents
    the last one wins.

    Args:
        video: Video to annotate; mutated in place
        config: Language service configuration; loaded from the
            environment when omitted
        client: Provider to submit the job to; built from config when omitted
        log: Logger receiving start, completion and error messages

    Returns:
        AnnotationResult describing the run. Never raises.
    """
    log = log or logger
    result = AnnotationResult(
        video_id=video.video_id,
        processed_at=datetime.now().isoformat(),
    )

    if not video.description_raw:
        result.skipped = True
        return result

    stage = "configuration"
    try:
        log.info("Start processing AI for videoID: %s", video.video_id)

        if config is None:
            config = get_config()
        if client is None:
            client = TextAnalyticsClient.from_config(config)

        documents = build_document_batch(video.description_raw, config.language)
        actions = [RecognizeCustomEntitiesAction(config.project_name, config.deployment_name)]

        stage = "submission"
        operation = client.begin_analyze_actions(documents, actions)

        stage = "polling"
        operation.wait_for_completion()

        stage = "results"
        for page in operation.pages():
            for action_result in page.recognize_custom_entities_results:
                for document in action_result.document_results:
                    entities = document.entities
                    for entity in entities:
                        video.categorized_entities.append(to_annotation(entity))
                        result.entities_added += 1

                    video.processed_text = summarize_entities(entities, config.confidence_threshold)
                    result.processed_text = video.processed_text

        log.info("Completed processing AI for videoID: %s", video.video_id)
        result.succeeded = True

    except Exception as exc:
        log.error("Error Processing AI for videoID: %s", video.video_id)
        log.error("Message: %s", exc)
        result.failure = AnnotationFailure(
            stage=stage,
            error_type=type(exc).__name__,
            message=str(exc),
            cause=exc,
        )

    return result


__all__ = [
    "AnnotationFailure",
    "AnnotationResult",
    "annotate_video",
    "build_document_batch",
    "summarize_entities",
    "to_annotation",
]
