"""Short personalised encouragement for the patient dashboard."""

from typing import Optional

from pydantic import BaseModel, Field

from physiopro.flows.base import BaseFlow


class MotivationInput(BaseModel):
    patient_name: str = Field(description="The patient's first name")
    current_program_name: Optional[str] = None
    current_program_adherence: Optional[float] = Field(default=None, ge=0, le=100)
    workout_streak: Optional[int] = Field(default=None, ge=0)
    completed_exercises_today: Optional[bool] = None
    upcoming_difficult_exercise: Optional[str] = None
    recent_feedback_pain_level: Optional[int] = Field(default=None, ge=1, le=10)


class MotivationOutput(BaseModel):
    motivational_message: str = Field(description="1-2 encouraging, relevant sentences")


def fallback_message(patient_name: str) -> str:
    return f"Keep up the great work, {patient_name}!"


class PatientMotivatorFlow(BaseFlow[MotivationInput, MotivationOutput]):
    name = "patient_motivator"
    temperature = 0.8
    max_tokens = 200

    @property
    def system_prompt(self) -> str:
        return """You are an encouraging and insightful AI physiotherapy coach for an app called PhysioPro.
Your goal is to provide short, personalized, and positive motivational messages to patients based on their current context.
Keep the message to 1-2 sentences. Be empathetic and understanding.

Examples:
* Long streak: "Amazing 8-day streak, Sam! Your consistency is paying off."
* Good adherence: "Great job staying on track with Knee Rehab, Sam! Keep up the fantastic effort."
* Exercises not done yet: "Ready to tackle your exercises for Knee Rehab today, Sam? You've got this!"
* Exercises done: "Awesome work completing your exercises for today, Sam! Rest up and feel proud."
* Upcoming difficult exercise: "Remember to focus on your form for Lunge Matrix, Sam. Take it one rep at a time."
* Low recent pain: "Glad to see your pain level was low recently, Sam. Keep listening to your body."
* High recent pain: "Noticed you reported a pain level of 7/10, Sam. Remember to modify if needed and let your clinician know if it persists."
* General: "Every step forward, no matter how small, is progress, Sam!"

Make the message feel personal and relevant."""

    @property
    def output_schema(self) -> type[MotivationOutput]:
        return MotivationOutput

    def format_input(self, inputs: MotivationInput) -> str:
        lines = [f"Patient's Name: {inputs.patient_name}", "", "Context:"]
        if inputs.current_program_name:
            lines.append(f"- Current Program: {inputs.current_program_name}")
            if inputs.current_program_adherence:
                lines.append(f"  - Adherence: {inputs.current_program_adherence:g}%")
        if inputs.workout_streak:
            lines.append(f"- Current Workout Streak: {inputs.workout_streak} days")
        if inputs.completed_exercises_today:
            lines.append("- Exercises for today: Completed!")
        else:
            lines.append("- Exercises for today: Not yet completed.")
        if inputs.upcoming_difficult_exercise:
            lines.append(f"- Upcoming challenging exercise: {inputs.upcoming_difficult_exercise}")
        if inputs.recent_feedback_pain_level:
            lines.append(f"- Recently reported pain level: {inputs.recent_feedback_pain_level}/10")
        return "\n".join(lines)

    def default_output(self, inputs: MotivationInput) -> MotivationOutput:
        return MotivationOutput(motivational_message=fallback_message(inputs.patient_name))
