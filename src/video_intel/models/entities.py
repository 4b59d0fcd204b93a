"""
Pydantic data models for videos and their entity annotations.

A Video is owned by the caller and mutated in place by the entity
annotator; EntityAnnotation records are created per recognized entity
and handed over to the video.
"""

from typing import Optional, List

from pydantic import BaseModel, Field


class EntityAnnotation(BaseModel):
    """
    Named entity recognized in a video description.

    Copied from a provider result; never mutated after it is
    appended to a video.
    """
    text: str
    category: str
    sub_category: Optional[str] = None
    confidence_score: float = Field(ge=0.0, le=1.0)
    offset: int = Field(ge=0)
    length: int = Field(ge=0)

    class Config:
        """Pydantic configuration."""
        from_attributes = True


class Video(BaseModel):
    """
    Video data model.

    Represents a video with its raw description text and the
    annotations derived from it.
    """
    video_id: str
    title: Optional[str] = None
    description_raw: Optional[str] = None
    categorized_entities: List[EntityAnnotation] = Field(default_factory=list)
    processed_text: Optional[str] = None

    class Config:
        """Pydantic configuration."""
        from_attributes = True
