"""AI flows run against the hosted model."""

from physiopro.flows.base import BaseFlow
from physiopro.flows.email_generator import EmailDraftInput, EmailDraftOutput, EmailGeneratorFlow
from physiopro.flows.exercise_search import ExerciseSearchFlow, ExerciseSearchInput, ExerciseSearchOutput
from physiopro.flows.feedback_validation import (
    DEFAULT_SUGGESTION,
    FeedbackValidationFlow,
    FeedbackValidationInput,
    FeedbackValidationOutput,
)
from physiopro.flows.patient_motivator import (
    MotivationInput,
    MotivationOutput,
    PatientMotivatorFlow,
    fallback_message,
)
from physiopro.flows.program_builder import (
    ExistingProgramExercise,
    ProgramBuilderFlow,
    ProgramBuilderInput,
    ProgramBuilderOutput,
    format_library,
    parse_params,
)

__all__ = [
    "BaseFlow",
    "DEFAULT_SUGGESTION",
    "EmailDraftInput",
    "EmailDraftOutput",
    "EmailGeneratorFlow",
    "ExerciseSearchFlow",
    "ExerciseSearchInput",
    "ExerciseSearchOutput",
    "ExistingProgramExercise",
    "FeedbackValidationFlow",
    "FeedbackValidationInput",
    "FeedbackValidationOutput",
    "MotivationInput",
    "MotivationOutput",
    "PatientMotivatorFlow",
    "ProgramBuilderFlow",
    "ProgramBuilderInput",
    "ProgramBuilderOutput",
    "fallback_message",
    "format_library",
    "parse_params",
]
