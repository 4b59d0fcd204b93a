"""
Data models for videos and entity annotations.
"""

from video_intel.models.entities import Video, EntityAnnotation

__all__ = [
    "Video",
    "EntityAnnotation",
]
