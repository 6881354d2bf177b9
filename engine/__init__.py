"""Engine-Modul: Kalender, Fortschritt, Deck, Generator und manuelle Anpassungen."""

from .errors import (
    PlannerError,
    PlanConfigurationError,
    AdjustmentError,
    InvalidTransitionError,
    SequenceConflictError,
)
from .generator import GenerationResult, LessonPlanGenerator, generate_lessons, generate_private_chunk

__all__ = [
    "PlannerError",
    "PlanConfigurationError",
    "AdjustmentError",
    "InvalidTransitionError",
    "SequenceConflictError",
    "GenerationResult",
    "LessonPlanGenerator",
    "generate_lessons",
    "generate_private_chunk",
]
