"""
Analysis module for video descriptions.

Provides custom named entity recognition over video descriptions,
copying recognized entities onto the video record.
"""

from video_intel.analysis.entity_annotator import (
    AnnotationResult,
    annotate_video,
    summarize_entities,
)

__all__ = ["AnnotationResult", "annotate_video", "summarize_entities"]
