"""AI program builder: initial suggestions, progressions and program edits.

One flow covers three scenarios, chosen by which inputs are present:

1. ``patient_conditions`` only: suggest 3-5 library exercises with parameters.
2. ``exercise_to_modify`` + ``modification_type``: one progression/regression.
3. ``existing_program_exercises`` + ``new_goal_or_feedback``: advice plus
   per-exercise keep/modify/replace/remove/add suggestions.
"""

import re
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field

from physiopro.flows.base import BaseFlow

PARAM_FIELDS = ("sets", "reps", "duration", "rest")


class ExistingProgramExercise(BaseModel):
    exercise_name: str
    sets: Optional[str] = None
    reps: Optional[str] = None
    duration: Optional[str] = None


class ProgramBuilderInput(BaseModel):
    patient_conditions: Optional[str] = Field(
        default=None, description="e.g. post-ACL surgery knee mobility"
    )
    exercise_library: str = Field(description="Available exercise names, separated by ';'")
    exercise_to_modify: Optional[str] = None
    modification_type: Optional[Literal["progression", "regression"]] = None
    existing_program_exercises: Optional[list[ExistingProgramExercise]] = None
    new_goal_or_feedback: Optional[str] = None


class ModifiedExerciseSuggestion(BaseModel):
    exercise_to_replace: str
    new_exercise_name: str
    new_parameters: str
    reason: str


class ExerciseSpecificSuggestion(BaseModel):
    exercise_name: str
    suggested_action: Literal["keep", "modify_params", "replace", "remove", "add"]
    new_exercise_name: Optional[str] = None
    new_parameter_suggestion: Optional[str] = None
    reason: str


class ProgramBuilderOutput(BaseModel):
    suggested_exercises: list[str] = Field(default_factory=list)
    suggested_parameters: list[str] = Field(
        default_factory=list,
        description='Parameters per suggested exercise, e.g. "Sets: 3, Reps: 10"',
    )
    modified_exercise_suggestion: Optional[ModifiedExerciseSuggestion] = None
    overall_program_modification_advice: Optional[str] = None
    exercise_specific_suggestions: list[ExerciseSpecificSuggestion] = Field(default_factory=list)


def format_library(names: list[str]) -> str:
    return ";".join(names)


def parse_params(text: Optional[str]) -> dict[str, Union[int, str]]:
    """Turn ``"Sets: 3, Reps: 10"`` into ``{"sets": 3, "reps": 10}``.

    Keys are matched loosely (``"Rest period"`` maps to ``rest``); numeric
    sets and reps become ints, everything else stays text.
    """
    params: dict[str, Union[int, str]] = {}
    if not text:
        return params
    for part in re.split(r",\s*", text):
        pieces = re.split(r":\s*", part, maxsplit=1)
        if len(pieces) != 2:
            continue
        key, value = pieces[0].strip().lower(), pieces[1].strip()
        if not value:
            continue
        for name in PARAM_FIELDS:
            if name in key:
                if name in ("sets", "reps") and value.isdigit():
                    params[name] = int(value)
                else:
                    params[name] = value
                break
    return params


class ProgramBuilderFlow(BaseFlow[ProgramBuilderInput, ProgramBuilderOutput]):
    name = "program_builder"
    temperature = 0.3
    max_tokens = 1500

    @property
    def system_prompt(self) -> str:
        return """You are an AI assistant helping clinicians build and modify personalized exercise programs.

Scenario 1: Initial Program Suggestion
If patient conditions are provided and neither an exercise to modify nor a new goal/feedback is, suggest
3-5 suitable exercises from the library for the given conditions. Provide suggested_exercises and
suggested_parameters (one per exercise). Parameters should look like "Sets: 3, Reps: 10".

Scenario 2: Exercise Progression/Regression
If an exercise to modify and a modification type are provided:
- Suggest ONE exercise from the library that is a progression or regression of it, as requested.
- Provide new_exercise_name, new_parameters and a reason in modified_exercise_suggestion.
- new_exercise_name must be different from the exercise being modified.
- exercise_to_replace must be the exercise being modified.

Scenario 3: Overall Program Modification
If an existing program and a new goal or feedback are provided:
- Give overall_program_modification_advice (1-2 sentences).
- Give exercise_specific_suggestions for exercises in the existing program, or new ones to add.
  Each has exercise_name, suggested_action (keep, modify_params, replace, remove, add),
  new_exercise_name when replacing or adding, new_parameter_suggestion when modifying
  parameters or for a new/replaced exercise, and a reason.

All suggested exercise names must come strictly from the provided Exercise Library.
If the inputs match no scenario, respond with a helpful message in
overall_program_modification_advice, or leave the fields empty.

Example for initial suggestion:
{"suggested_exercises": ["Squat", "Lunge"], "suggested_parameters": ["Sets: 3, Reps: 12", "Sets: 3, Reps: 10 per leg"]}

Example for progression:
{"modified_exercise_suggestion": {"exercise_to_replace": "Squat", "new_exercise_name": "Goblet Squat", "new_parameters": "Sets: 3, Reps: 10", "reason": "Increases load and core engagement."}}

Example for program modification:
{"overall_program_modification_advice": "Focus on strengthening quads and glutes, reduce direct knee stress.", "exercise_specific_suggestions": [{"exercise_name": "Lunge", "suggested_action": "remove", "reason": "Patient reports knee pain."}, {"exercise_name": "Glute Bridge", "suggested_action": "add", "new_exercise_name": "Glute Bridge", "new_parameter_suggestion": "Sets: 3, Reps: 15", "reason": "Strengthens glutes with less knee stress."}]}"""

    @property
    def output_schema(self) -> type[ProgramBuilderOutput]:
        return ProgramBuilderOutput

    def format_input(self, inputs: ProgramBuilderInput) -> str:
        lines = [f"Exercise Library (names are semi-colon separated): {inputs.exercise_library}"]
        if inputs.patient_conditions:
            lines.append(f"Patient Conditions: {inputs.patient_conditions}")
        if inputs.exercise_to_modify:
            lines.append(f"Exercise to Modify: {inputs.exercise_to_modify} (Type: {inputs.modification_type})")
        if inputs.existing_program_exercises:
            lines.append("Existing Program:")
            for ex in inputs.existing_program_exercises:
                params = [
                    f"{label}: {value}"
                    for label, value in (("Sets", ex.sets), ("Reps", ex.reps), ("Duration", ex.duration))
                    if value
                ]
                lines.append(f"- {ex.exercise_name} ({', '.join(params)})")
            lines.append(f"New Goal/Feedback: {inputs.new_goal_or_feedback or ''}")
        return "\n".join(lines)

    def default_output(self, inputs: ProgramBuilderInput) -> ProgramBuilderOutput:
        return ProgramBuilderOutput()

    def summarize_input(self, inputs: ProgramBuilderInput) -> str:
        if inputs.exercise_to_modify:
            return f"{inputs.modification_type} of {inputs.exercise_to_modify}"
        if inputs.existing_program_exercises:
            return f"modify {len(inputs.existing_program_exercises)} exercises: {inputs.new_goal_or_feedback}"
        return f"initial: {inputs.patient_conditions}"
