import asyncio
from typing import List, Dict, Any, Optional

from agents.agent1 import extract_resume_info as extract_resume_info_flow, ExtractResumeInfoInput
from agents.agent2 import generate_interview_questions, GenerateInterviewQuestionsInput
from agents.agent3 import generate_candidate_summary, GenerateCandidateSummaryInput
from agents.agent4 import generate_dashboard_analytics, GenerateDashboardAnalyticsInput
from app.state import INTERVIEW_STRUCTURE, ERROR_QUESTION_TEXT, InterviewQuestion

SUMMARY_JOB_TITLE = "role based on resume"


def _placeholder_questions() -> List[InterviewQuestion]:
    return [
        {"question": ERROR_QUESTION_TEXT, "difficulty": config["difficulty"]}
        for config in INTERVIEW_STRUCTURE
    ]


async def get_interview_question(resume_text: str, difficulty: str) -> Dict[str, Any]:
    """Single question of one difficulty; {"questions": []} on failure."""
    try:
        result = await generate_interview_questions(GenerateInterviewQuestionsInput(
            resumeText=resume_text,
            difficulty=difficulty,
            numQuestions=1,
        ))
        return result.model_dump()
    except Exception as e:
        print(f"[actions Error] Error generating interview questions: {e}")
        return {"questions": []}


async def generate_all_interview_questions(resume_text: str) -> List[InterviewQuestion]:
    """
    Generate one question per configured difficulty tier, all requests in parallel.
    A failed tier gets a placeholder question instead of failing the whole set.
    """
    try:
        results = await asyncio.gather(
            *(
                generate_interview_questions(GenerateInterviewQuestionsInput(
                    resumeText=resume_text,
                    difficulty=config["difficulty"],
                    numQuestions=1,
                ))
                for config in INTERVIEW_STRUCTURE
            ),
            return_exceptions=True,
        )

        all_questions: List[InterviewQuestion] = []
        for config, result in zip(INTERVIEW_STRUCTURE, results):
            if not isinstance(result, BaseException) and result.questions:
                all_questions.append({"question": result.questions[0], "difficulty": config["difficulty"]})
                continue

            reason = result if isinstance(result, BaseException) else "No question returned"
            print(f"[actions Error] Failed to generate question for difficulty: {config['difficulty']} ({reason})")
            all_questions.append({"question": ERROR_QUESTION_TEXT, "difficulty": config["difficulty"]})

        return all_questions

    except Exception as e:
        print(f"[actions Error] Error generating all interview questions: {e}")
        return _placeholder_questions()


async def get_candidate_summary(resume_text: str, interview_answers: List[str]) -> Optional[Dict[str, Any]]:
    try:
        result = await generate_candidate_summary(GenerateCandidateSummaryInput(
            resumeText=resume_text,
            interviewAnswers=interview_answers,
            jobTitle=SUMMARY_JOB_TITLE,
        ))
        return result.model_dump()
    except Exception as e:
        print(f"[actions Error] Error generating candidate summary: {e}")
        return None


async def extract_resume_info(file_data_uri: str) -> Optional[Dict[str, Any]]:
    try:
        result = await extract_resume_info_flow(ExtractResumeInfoInput(fileDataUri=file_data_uri))
        if not result:
            return None
        return result.model_dump()
    except Exception as e:
        print(f"[actions Error] Error extracting resume info: {e}")
        return None


async def get_dashboard_analytics(candidates: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    try:
        result = await generate_dashboard_analytics(GenerateDashboardAnalyticsInput(candidates=candidates))
        return result.model_dump()
    except Exception as e:
        print(f"[actions Error] Error generating dashboard analytics: {e}")
        return None
