from typing import Optional

from pydantic import BaseModel, Field, field_validator

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class CandidateInfo(BaseModel):
    """
    Details submitted before the interview starts.
    """
    name: str = Field(..., min_length=2, description="Name must be at least 2 characters.")
    email: str = Field(..., pattern=EMAIL_PATTERN, description="Please enter a valid email address.")
    phone: str = Field(..., min_length=10, description="Please enter a valid phone number.")
    resumeText: str = Field(..., min_length=50, description="Resume text must be at least 50 characters.")
    fileDataUri: Optional[str] = None

    @field_validator("name", "email", "phone", mode="before")
    @classmethod
    def strip_whitespace(cls, value):
        return value.strip() if isinstance(value, str) else value


class AnswerSubmission(BaseModel):
    answer: str

    @field_validator("answer")
    @classmethod
    def answer_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Answer cannot be empty")
        return value
