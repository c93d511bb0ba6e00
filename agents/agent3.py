from typing import List

from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field, field_validator

from tools.llm_tools import get_llm


class GenerateCandidateSummaryInput(BaseModel):
    resumeText: str = Field(..., description="The text content of the candidate's resume.")
    interviewAnswers: List[str] = Field(..., description="The candidate's answers to the interview questions.")
    jobTitle: str = Field(..., description="The job title for which the candidate is being interviewed.")


class GenerateCandidateSummaryOutput(BaseModel):
    summary: str = Field(..., description="A brief summary of the candidate's performance, highlighting strengths and weaknesses based on their answers.")
    score: int = Field(..., description="A final score for the candidate (0-100), primarily based on interview performance.")

    @field_validator("score", mode="before")
    @classmethod
    def clamp_score(cls, value):
        return max(0, min(100, round(float(value))))


SUMMARY_PROMPT = ChatPromptTemplate.from_template(
    """You are a strict, senior technical hiring manager for a top-tier tech company. Evaluate a candidate for a {job_title} role.

Your evaluation MUST be based PRIMARILY on the quality and depth of their interview answers. The resume provides context about their experience, but it should NOT inflate the score if the answers are poor.

CRITICAL SCORING INSTRUCTIONS:
- If the answers are short, nonsensical, irrelevant, or show a clear lack of understanding (e.g., one-word answers like "jsx", "error", "docs"), you MUST assign a very low score (0-20). Do not be lenient.
- A strong resume CANNOT compensate for weak or non-existent answers. The interview performance is the most critical factor.
- The summary must justify the score by directly referencing the quality of the answers. If the answers are poor, the summary MUST state this clearly and explain why it leads to a low score.

Candidate's Resume for Context:
---
{resume_text}
---

Candidate's Interview Answers:
---
{answers}
---

Evaluate the candidate and provide a final score and a brutally honest summary.

{format_instructions}"""
)


def format_answers(answers: List[str]) -> str:
    return "\n".join(f"- {answer.strip() or '(no answer)'}" for answer in answers)


async def generate_candidate_summary(input_data: GenerateCandidateSummaryInput) -> GenerateCandidateSummaryOutput:
    """Flow: score the interview (0-100) and summarize the candidate's performance."""
    print(f"[Agent3] Generating summary for {len(input_data.interviewAnswers)} answers")

    parser = PydanticOutputParser(pydantic_object=GenerateCandidateSummaryOutput)
    llm = get_llm(temperature=0.2, max_tokens=2048)
    chain = SUMMARY_PROMPT.partial(format_instructions=parser.get_format_instructions()) | llm | parser

    result = await chain.ainvoke({
        "job_title": input_data.jobTitle,
        "resume_text": input_data.resumeText,
        "answers": format_answers(input_data.interviewAnswers),
    })
    print(f"[Agent3] Candidate scored {result.score}/100")
    return result
