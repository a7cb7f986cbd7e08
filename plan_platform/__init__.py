"""Platform layer: session model, persistence, workflow and export for makeaplan."""

__version__ = "1.0.0"

from .errors import (
    ExportError,
    GenerationError,
    MakeAPlanError,
    NotFoundError,
    StorageError,
    ValidationError,
    WorkflowError,
)
from .models import (
    FileStructureItem,
    Question,
    QuestionRound,
    Session,
    SessionConfig,
    SessionStep,
    SessionSummary,
)
from .session_state_machine import advance_step, step_label

__all__ = [
    "__version__",
    "ExportError",
    "GenerationError",
    "MakeAPlanError",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    "WorkflowError",
    "FileStructureItem",
    "Question",
    "QuestionRound",
    "Session",
    "SessionConfig",
    "SessionStep",
    "SessionSummary",
    "advance_step",
    "step_label",
]
