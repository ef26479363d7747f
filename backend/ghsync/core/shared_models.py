"""Shared models for the backend."""

from enum import Enum


class EntityType(str, Enum):
    """Upstream collections synced per repository, each with its own cursor."""

    ISSUE = "ISSUE"
    PR = "PR"
    DISCUSSION = "DISCUSSION"


class TerminationReason(str, Enum):
    """Why a sync run stopped."""

    EXHAUSTED = "exhausted"  # upstream reported no further pages
    WATERMARK_BOUNDARY = "watermark_boundary"  # reached an already-synced node
