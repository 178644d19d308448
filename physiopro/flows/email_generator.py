"""Drafts admin email bodies for the communication composer."""

from typing import Optional

from pydantic import BaseModel, Field

from physiopro.flows.base import BaseFlow


class EmailDraftInput(BaseModel):
    prompt: str = Field(
        min_length=1,
        description="Instruction or topic, e.g. 'Draft a welcome email for new clinicians highlighting AI features.'",
    )
    subject: Optional[str] = None
    recipient_context: Optional[str] = Field(
        default=None, description="Who receives it, e.g. 'new clinicians'"
    )


class EmailDraftOutput(BaseModel):
    generated_email_body: str = Field(description="Email body ready to be reviewed and sent")
    suggested_subject: Optional[str] = Field(
        default=None, description="Concise subject line when none was given or it can be improved"
    )


class EmailGeneratorFlow(BaseFlow[EmailDraftInput, EmailDraftOutput]):
    name = "email_generator"
    temperature = 0.7
    max_tokens = 1500

    @property
    def system_prompt(self) -> str:
        return """You are an expert communications assistant for an Exercise Prescription Software platform called PhysioPro.
Your task is to draft a professional and engaging email body based on the user's prompt.

Generate a suitable email body. If the user did not provide a subject or you can improve it,
suggest a subject line as well. Keep the tone appropriate for the context given (welcoming,
informative or urgent). Ensure the email body is well structured and ready to be sent.

Do not include greetings like "Dear [Name]," or sign-offs like "Sincerely, The PhysioPro Team"
unless specifically asked in the prompt, as these are handled by the user. Focus on the core message.
If a subject is suggested, keep it concise and relevant."""

    @property
    def output_schema(self) -> type[EmailDraftOutput]:
        return EmailDraftOutput

    def format_input(self, inputs: EmailDraftInput) -> str:
        lines = [f"User's Email Prompt: {inputs.prompt}"]
        if inputs.subject:
            lines.append(f"Email Subject Context: {inputs.subject}")
        if inputs.recipient_context:
            lines.append(f"Recipient Context: {inputs.recipient_context}")
        return "\n".join(lines)
