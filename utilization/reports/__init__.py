"""Report builders and the summary composer."""

from .composer import SummaryComposer, build_composer

__all__ = [
    "SummaryComposer",
    "build_composer",
]
