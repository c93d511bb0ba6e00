from typing import List, Optional

from langchain_core.output_parsers import PydanticOutputParser
from langchain_core.prompts import ChatPromptTemplate
from pydantic import BaseModel, Field

from tools.dashboard_tools import compute_average_score, compute_score_distribution
from tools.llm_tools import get_llm

MAX_KEYWORDS = 5


class CandidateAnalytics(BaseModel):
    id: str
    name: str
    score: Optional[float] = None
    summary: Optional[str] = None


class GenerateDashboardAnalyticsInput(BaseModel):
    candidates: List[CandidateAnalytics]


class ScoreRangeCount(BaseModel):
    range: str = Field(..., description="The score range (e.g., '0-20', '21-40').")
    count: int = Field(..., description="The number of candidates in this range.")


class GenerateDashboardAnalyticsOutput(BaseModel):
    overallSummary: str = Field(..., description="A high-level summary of the candidate pool's overall performance, key trends, and distribution of skills.")
    averageScore: float = Field(..., description="The average score across all candidates.")
    scoreDistribution: List[ScoreRangeCount] = Field(..., description="The distribution of scores.")
    commonStrengths: List[str] = Field(..., description="The most common strengths or positive keywords across all candidate summaries.")
    commonWeaknesses: List[str] = Field(..., description="The most common weaknesses or areas for improvement across all candidate summaries.")


class PoolInsights(BaseModel):
    overallSummary: str = Field(..., description="A concise, high-level summary of the candidate pool. What are the general trends? Is the pool strong or weak?")
    commonStrengths: List[str] = Field(..., description="Up to 5 common positive keywords or skills mentioned in the summaries (e.g. 'React', 'communication', 'problem-solving').")
    commonWeaknesses: List[str] = Field(..., description="Up to 5 common areas for improvement or negative keywords (e.g. 'nervous', 'lacks depth', 'unfamiliar with X').")


ANALYTICS_PROMPT = ChatPromptTemplate.from_template(
    """You are a senior hiring analyst tasked with providing a high-level overview of a pool of candidates based on their interview scores and AI-generated summaries.

Analyze the following candidate data:
{candidate_data}

Average score: {average_score}

Based on this data, provide:
1. Overall Summary: a concise, high-level summary of the candidate pool.
2. Common Strengths: up to 5 common positive keywords or skills mentioned in the summaries.
3. Common Weaknesses: up to 5 common areas for improvement or negative keywords.

{format_instructions}"""
)


def format_candidate_data(candidates: List[CandidateAnalytics]) -> str:
    lines = []
    for c in candidates:
        score = "N/A" if c.score is None else c.score
        lines.append(f"- Candidate: {c.name}\n  Score: {score}\n  Summary: {c.summary or 'N/A'}")
    return "\n".join(lines)


async def generate_dashboard_analytics(input_data: GenerateDashboardAnalyticsInput) -> GenerateDashboardAnalyticsOutput:
    """
    Flow: aggregate analytics over the completed candidate pool.
    Average score and score distribution are computed from the scores; the model
    writes the pool summary and the strength/weakness keywords.
    """
    print(f"[Agent4] Generating dashboard analytics for {len(input_data.candidates)} candidates")

    scored = [c.model_dump() for c in input_data.candidates]
    average_score = compute_average_score(scored)

    parser = PydanticOutputParser(pydantic_object=PoolInsights)
    llm = get_llm(temperature=0.2, max_tokens=2048)
    chain = ANALYTICS_PROMPT.partial(format_instructions=parser.get_format_instructions()) | llm | parser

    insights = await chain.ainvoke({
        "candidate_data": format_candidate_data(input_data.candidates),
        "average_score": average_score,
    })

    result = GenerateDashboardAnalyticsOutput(
        overallSummary=insights.overallSummary,
        averageScore=average_score,
        scoreDistribution=compute_score_distribution(scored),
        commonStrengths=insights.commonStrengths[:MAX_KEYWORDS],
        commonWeaknesses=insights.commonWeaknesses[:MAX_KEYWORDS],
    )
    print(f"[Agent4] Analytics ready: average score {average_score}")
    return result
