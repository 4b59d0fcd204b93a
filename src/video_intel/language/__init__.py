"""
Language service client for custom named entity recognition.

Wraps the analyze-text jobs REST API: submit a batch, wait for the
asynchronous job, read paginated results.
"""

from video_intel.language.client import (
    AnalyzeActionsOperation,
    AnalyzeOperation,
    TextAnalyticsClient,
    TextAnalyticsProvider,
)
from video_intel.language.models import (
    AnalyzeActionsResult,
    CategorizedEntity,
    LanguageServiceError,
    RecognizeCustomEntitiesAction,
    RecognizeCustomEntitiesActionResult,
    RecognizeEntitiesResult,
    TextDocumentInput,
)

__all__ = [
    "AnalyzeActionsOperation",
    "AnalyzeOperation",
    "TextAnalyticsClient",
    "TextAnalyticsProvider",
    "AnalyzeActionsResult",
    "CategorizedEntity",
    "LanguageServiceError",
    "RecognizeCustomEntitiesAction",
    "RecognizeCustomEntitiesActionResult",
    "RecognizeEntitiesResult",
    "TextDocumentInput",
]
