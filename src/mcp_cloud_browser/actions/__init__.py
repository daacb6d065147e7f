"""Pure page-processing actions that run locally on fetched page content."""

from .extraction import (
    extract_json_objects,
    extract_structured_data,
    extract_text_content,
)

__all__ = [
    "extract_json_objects",
    "extract_structured_data",
    "extract_text_content",
]
