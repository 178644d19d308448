"""Tests for AI flows: prompt rendering, defaults and parameter parsing."""

import pytest
from pydantic import ValidationError

from physiopro.flows import (
    EmailDraftInput,
    EmailGeneratorFlow,
    ExerciseSearchFlow,
    ExerciseSearchInput,
    ExerciseSearchOutput,
    ExistingProgramExercise,
    FeedbackValidationFlow,
    FeedbackValidationInput,
    MotivationInput,
    MotivationOutput,
    PatientMotivatorFlow,
    ProgramBuilderFlow,
    ProgramBuilderInput,
    ProgramBuilderOutput,
    format_library,
    parse_params,
)
from physiopro.llm import LLMConnectionError, LLMValidationError, MessageRole


class TestParseParams:
    def test_sets_and_reps_become_ints(self):
        assert parse_params("Sets: 3, Reps: 10") == {"sets": 3, "reps": 10}

    def test_text_values_kept(self):
        assert parse_params("Sets: 2, Reps: 10 per leg, Duration: 30s, Rest period: 60s") == {
            "sets": 2,
            "reps": "10 per leg",
            "duration": "30s",
            "rest": "60s",
        }

    def test_unknown_and_malformed_parts_skipped(self):
        assert parse_params("Tempo: 3-1-1, just do it, Reps:") == {}
        assert parse_params(None) == {}
        assert parse_params("") == {}


def test_format_library():
    assert format_library(["Plank", "Standard Squat"]) == "Plank;Standard Squat"


class TestPromptRendering:
    def test_email_prompt_skips_missing_context(self, mock_llm_router):
        text = EmailGeneratorFlow(mock_llm_router).format_input(EmailDraftInput(prompt="Welcome new clinicians"))
        assert text == "User's Email Prompt: Welcome new clinicians"

    def test_feedback_prompt(self, mock_llm_router):
        text = FeedbackValidationFlow(mock_llm_router).format_input(
            FeedbackValidationInput(exercise_name="Plank", pain_level=5)
        )
        assert "Exercise Name: Plank" in text
        assert "Pain Level (1-10, where 10 is max pain): 5" in text
        assert text.endswith('Patient Comments: ""')

    def test_program_builder_scenarios(self, mock_llm_router):
        flow = ProgramBuilderFlow(mock_llm_router)

        initial = flow.format_input(ProgramBuilderInput(patient_conditions="ACL", exercise_library="Plank;Squat"))
        assert initial.splitlines() == [
            "Exercise Library (names are semi-colon separated): Plank;Squat",
            "Patient Conditions: ACL",
        ]

        progression = flow.format_input(ProgramBuilderInput(
            exercise_library="Plank", exercise_to_modify="Plank", modification_type="progression",
        ))
        assert "Exercise to Modify: Plank (Type: progression)" in progression

        modification = flow.format_input(ProgramBuilderInput(
            exercise_library="Plank;Squat",
            existing_program_exercises=[ExistingProgramExercise(exercise_name="Squat", sets="3", reps="10")],
            new_goal_or_feedback="Knee hurts on squats",
        ))
        assert "- Squat (Sets: 3, Reps: 10)" in modification
        assert "New Goal/Feedback: Knee hurts on squats" in modification

    def test_motivation_prompt(self, mock_llm_router):
        text = PatientMotivatorFlow(mock_llm_router).format_input(MotivationInput(
            patient_name="Alice",
            current_program_name="Knee Rehab",
            current_program_adherence=85,
            workout_streak=4,
            recent_feedback_pain_level=7,
        ))
        assert "Patient's Name: Alice" in text
        assert "  - Adherence: 85%" in text
        assert "- Current Workout Streak: 4 days" in text
        assert "- Exercises for today: Not yet completed." in text
        assert "- Recently reported pain level: 7/10" in text

    def test_feedback_input_bounds(self):
        with pytest.raises(ValidationError):
            FeedbackValidationInput(exercise_name="Plank", pain_level=0)


class TestFlowRun:
    @pytest.mark.asyncio
    async def test_run_sends_system_and_user_messages(self, mock_llm_router):
        mock_llm_router.complete_structured.return_value = ExerciseSearchOutput(results=["Plank"])

        result = await ExerciseSearchFlow(mock_llm_router).run(ExerciseSearchInput(query="core"))

        assert result.results == ["Plank"]
        messages, schema = mock_llm_router.complete_structured.call_args.args
        assert [m.role for m in messages] == [MessageRole.SYSTEM, MessageRole.USER]
        assert messages[1].content == "Query: core"
        assert schema is ExerciseSearchOutput
        assert mock_llm_router.complete_structured.call_args.kwargs["temperature"] == 0.2

    @pytest.mark.asyncio
    async def test_unusable_answer_uses_default(self, mock_llm_router, isolated_observability):
        mock_llm_router.complete_structured.side_effect = LLMValidationError("bad json")

        result = await ProgramBuilderFlow(mock_llm_router).run(
            ProgramBuilderInput(patient_conditions="neck pain", exercise_library="Plank")
        )

        assert result == ProgramBuilderOutput()
        events = isolated_observability.get_recent_events("flows")
        assert events[-1]["flow_name"] == "program_builder"
        assert events[-1]["used_default"] is True

    @pytest.mark.asyncio
    async def test_motivator_default_uses_name(self, mock_llm_router):
        mock_llm_router.complete_structured.side_effect = LLMValidationError("bad json")

        result = await PatientMotivatorFlow(mock_llm_router).run(MotivationInput(patient_name="Bob"))

        assert result == MotivationOutput(motivational_message="Keep up the great work, Bob!")

    @pytest.mark.asyncio
    async def test_email_flow_has_no_default(self, mock_llm_router):
        mock_llm_router.complete_structured.side_effect = LLMValidationError("bad json")

        with pytest.raises(LLMValidationError):
            await EmailGeneratorFlow(mock_llm_router).run(EmailDraftInput(prompt="Hi"))

    @pytest.mark.asyncio
    async def test_outage_propagates(self, mock_llm_router, isolated_observability):
        mock_llm_router.complete_structured.side_effect = LLMConnectionError("down")

        with pytest.raises(LLMConnectionError):
            await ExerciseSearchFlow(mock_llm_router).run(ExerciseSearchInput(query="hips"))

        events = isolated_observability.get_recent_events("flows")
        assert events[-1]["event_type"] == "flow_error"
