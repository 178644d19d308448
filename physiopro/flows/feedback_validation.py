"""Checks that patient feedback on an exercise is useful to the clinician."""

from typing import Optional

from pydantic import BaseModel, Field

from physiopro.flows.base import BaseFlow

DEFAULT_SUGGESTION = "Please provide more detailed or clear feedback."


class FeedbackValidationInput(BaseModel):
    exercise_name: str
    pain_level: int = Field(ge=1, le=10, description="Pain experienced, 1 to 10")
    comments: Optional[str] = None


class FeedbackValidationOutput(BaseModel):
    is_valid: bool = Field(
        description=(
            "Whether the feedback is meaningful. Very short or vague comments with a moderate "
            "to high pain level are invalid; minimal comments with pain 1-3 can be valid."
        )
    )
    suggestions: Optional[str] = Field(
        default=None,
        description="How the patient could improve the feedback, e.g. where the pain was felt.",
    )


class FeedbackValidationFlow(BaseFlow[FeedbackValidationInput, FeedbackValidationOutput]):
    name = "feedback_validation"
    temperature = 0.1
    max_tokens = 300

    @property
    def system_prompt(self) -> str:
        return """You are an AI assistant that validates patient feedback on exercises for a clinician.
The goal is to ensure feedback is useful.

Analyze the pain level and comments:
- If comments are very short (e.g. "ok", "good", "it hurts", "felt fine") AND the pain level is moderate to high (4-10), the feedback is NOT valid. Suggest asking for more details about the pain (location, type).
- If comments are very short but the pain level is low (1-3), the feedback is valid.
- If comments are reasonably descriptive (e.g. "Felt a pinch in my left knee", "Easy to do", "Struggled with the last set"), the feedback is valid.
- If no comments are provided and the pain level is high (7-10), it is not valid. Suggest asking for comments.
- If no comments are provided and the pain level is moderate (4-6), it is not valid. Suggest asking for comments.
- If no comments are provided and the pain level is low (1-3), it is valid.

Set is_valid to true or false. When is_valid is false, give constructive suggestions
for the patient to improve their feedback.

Example for invalid feedback:
{"is_valid": false, "suggestions": "Please describe where you felt the pain and what type of pain it was."}

Example for valid feedback:
{"is_valid": true}"""

    @property
    def output_schema(self) -> type[FeedbackValidationOutput]:
        return FeedbackValidationOutput

    def format_input(self, inputs: FeedbackValidationInput) -> str:
        return (
            f"Exercise Name: {inputs.exercise_name}\n"
            f"Pain Level (1-10, where 10 is max pain): {inputs.pain_level}\n"
            f'Patient Comments: "{inputs.comments or ""}"'
        )

    def default_output(self, inputs: FeedbackValidationInput) -> FeedbackValidationOutput:
        return FeedbackValidationOutput(is_valid=True)
