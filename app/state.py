from typing import TypedDict, List, Dict, Any, Optional, Literal

Difficulty = Literal["Easy", "Medium", "Hard"]

InterviewStatus = Literal[
    "not-started",
    "collecting-info",
    "in-progress",
    "generating-summary",
    "completed",
    "error",
]

# One question is generated per entry, in this order
INTERVIEW_STRUCTURE: List[Dict[str, Any]] = [
    {"difficulty": "Easy"},
    {"difficulty": "Medium"},
    {"difficulty": "Hard"},
]

STATUS_ORDER: List[str] = [
    "not-started",
    "collecting-info",
    "in-progress",
    "generating-summary",
    "completed",
]

ERROR_QUESTION_TEXT = "Error generating question. Please try again."


class InterviewQuestion(TypedDict, total=False):
    question: str
    difficulty: Difficulty
    answer: str  # Set once the candidate submits an answer


class Candidate(TypedDict):
    id: str
    name: str
    email: str
    phone: str
    resumeText: str
    fileDataUri: Optional[str]  # Original upload as data URI, empty when typed in manually
    status: InterviewStatus
    questions: List[InterviewQuestion]
    currentQuestionIndex: int
    score: Optional[int]  # 0-100 once the summary is generated
    summary: Optional[str]
    createdAt: int  # Epoch milliseconds


class InterviewState(TypedDict):
    candidate_id: str
    status: str  # Mirrors Candidate.status; the workflow writes the next one here
    resume_text: str
    questions: List[InterviewQuestion]
    answers: List[str]
    score: Optional[int]
    summary: Optional[str]
    error: Optional[str]  # Stores any error messages
