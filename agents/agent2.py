from typing import List, Literal

from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from tools.llm_tools import get_llm


class GenerateInterviewQuestionsInput(BaseModel):
    resumeText: str = Field(..., description="The full text content of the candidate's resume.")
    difficulty: Literal["Easy", "Medium", "Hard"] = Field(..., description="The difficulty level of the interview questions.")
    numQuestions: int = Field(1, ge=1, description="The number of questions to generate for the specified difficulty level.")


class GenerateInterviewQuestionsOutput(BaseModel):
    questions: List[str] = Field(..., description="An array of generated interview questions.")


QUESTIONS_PROMPT = ChatPromptTemplate.from_template(
    """You are an expert technical recruiter and interviewer. Generate interview questions based on the provided resume.

The questions should be of {difficulty} difficulty.

Analyze the resume to identify the candidate's skills, technologies, and experiences. Every question MUST be directly related to the content of the resume.

- For 'Easy' questions, ask about a fundamental concept of a technology mentioned.
- For 'Medium' questions, ask about a specific project or experience listed.
- For 'Hard' questions, pose a challenging scenario or a system design question related to their most advanced skills.

Generate exactly {num_questions} question(s).

{format_instructions}

Resume Content:
---
{resume_text}
---"""
)


async def generate_interview_questions(input_data: GenerateInterviewQuestionsInput) -> GenerateInterviewQuestionsOutput:
    """Flow: generate numQuestions resume-based questions of one difficulty tier."""
    print(f"[Agent2] Generating {input_data.numQuestions} {input_data.difficulty} question(s)")

    parser = PydanticOutputParser(pydantic_object=GenerateInterviewQuestionsOutput)
    llm = get_llm(temperature=0.7, max_tokens=1024)
    chain = QUESTIONS_PROMPT.partial(format_instructions=parser.get_format_instructions()) | llm | parser

    output = await chain.ainvoke({
        "difficulty": input_data.difficulty,
        "num_questions": input_data.numQuestions,
        "resume_text": input_data.resumeText,
    })

    questions = [q.strip() for q in output.questions if q and q.strip()][:input_data.numQuestions]
    print(f"[Agent2] Generated {len(questions)} {input_data.difficulty} question(s)")
    return GenerateInterviewQuestionsOutput(questions=questions)
