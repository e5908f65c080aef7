"""
Bot Models: Export all models
"""

from .pipeline_config import PipelineConfig
from .update import FileReference, InboundUpdate, UpdateKind, parseUpdate

__all__ = [
    "PipelineConfig",
    "FileReference",
    "InboundUpdate",
    "UpdateKind",
    "parseUpdate",
]
