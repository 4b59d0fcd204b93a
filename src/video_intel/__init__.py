"""
Video Intelligence System

Annotates videos with entities recognized by a cloud-hosted custom
named entity recognition model.
"""

__version__ = "0.1.0"
__author__ = "Video Intel Team"

from video_intel.config import Config

__all__ = ["Config", "__version__"]
