"""Ideenpool data models."""

from ideenpool.models.actor import Actor
from ideenpool.models.field import FieldDefinition, FieldSection, StatusFieldConfig
from ideenpool.models.idea import (
    DEFAULT_TYPE,
    INITIAL_STATUS,
    REVISION_STATUS,
    BpfPhase,
    CreateIdeaInput,
    EditIdeaInput,
    Idea,
    IdeaStatus,
    IdeaType,
)

__all__ = [
    "DEFAULT_TYPE",
    "INITIAL_STATUS",
    "REVISION_STATUS",
    "Actor",
    "BpfPhase",
    "CreateIdeaInput",
    "EditIdeaInput",
    "FieldDefinition",
    "FieldSection",
    "Idea",
    "IdeaStatus",
    "IdeaType",
    "StatusFieldConfig",
]
