"""Natural-language exercise search for clinicians."""

from pydantic import BaseModel, Field

from physiopro.flows.base import BaseFlow


class ExerciseSearchInput(BaseModel):
    query: str = Field(min_length=1, description='e.g. "exercises for rotator cuff rehab"')


class ExerciseSearchOutput(BaseModel):
    results: list[str] = Field(
        default_factory=list,
        description="Exercise names that best match the query, 5-7 when many apply",
    )


class ExerciseSearchFlow(BaseFlow[ExerciseSearchInput, ExerciseSearchOutput]):
    name = "exercise_search"
    temperature = 0.2
    max_tokens = 400

    @property
    def system_prompt(self) -> str:
        return """You are an AI assistant designed to help clinicians find relevant exercises for their patients.
Given a search query, provide a list of exercise names that match the query.
Return ONLY the names of the exercises. Do not provide any additional information, descriptions, or numbering.
Prioritize relevance and aim for 5-7 results if many are applicable."""

    @property
    def output_schema(self) -> type[ExerciseSearchOutput]:
        return ExerciseSearchOutput

    def format_input(self, inputs: ExerciseSearchInput) -> str:
        return f"Query: {inputs.query}"

    def default_output(self, inputs: ExerciseSearchInput) -> ExerciseSearchOutput:
        return ExerciseSearchOutput(results=[])
