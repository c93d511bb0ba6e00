from typing import Optional

from langgraph.graph import StateGraph, END

from app.actions import generate_all_interview_questions, get_candidate_summary
from app.state import InterviewState, Candidate, INTERVIEW_STRUCTURE
from tools.store_tools import InterviewStore


# Conditional edge function - only reads state
def route_next_step(state: InterviewState) -> str:
    """Pick the next LLM step from the candidate's status."""
    if state["status"] == "in-progress" and not state["questions"]:
        print(f"[workflow] No questions yet for candidate={state['candidate_id']}, generating question set")
        return "questions"
    if state["status"] == "generating-summary":
        if len(state["questions"]) >= len(INTERVIEW_STRUCTURE):
            print(f"[workflow] All answers in for candidate={state['candidate_id']}, generating summary")
            return "summary"
        print(f"[workflow] Incomplete question set for candidate={state['candidate_id']}")
        return "wait"
    print(f"[workflow] Nothing to do for candidate={state['candidate_id']} in status '{state['status']}'")
    return "wait"


def prepare_node(state: InterviewState) -> InterviewState:
    """Check the candidate has resume text before any LLM step."""
    if state["status"] in ("in-progress", "generating-summary") and not state["resume_text"].strip():
        state["status"] = "error"
        state["error"] = "Resume text missing"
        print(f"[workflow] Resume text missing for candidate={state['candidate_id']}")
    return state


async def questions_node(state: InterviewState) -> InterviewState:
    """Generate the full question set, one per difficulty tier."""
    try:
        state["questions"] = await generate_all_interview_questions(state["resume_text"])
        print(f"[workflow] Generated {len(state['questions'])} questions for candidate={state['candidate_id']}")
    except Exception as e:
        state["status"] = "error"
        state["error"] = f"Could not fetch interview questions: {str(e)}"
        print(f"[workflow] Error generating questions for candidate={state['candidate_id']}: {e}")
    return state


async def summary_node(state: InterviewState) -> InterviewState:
    """Score the finished interview and write the summary."""
    answers = [q.get("answer") or "" for q in state["questions"]]
    summary_data = await get_candidate_summary(state["resume_text"], answers)

    if summary_data:
        state["score"] = summary_data["score"]
        state["summary"] = summary_data["summary"]
        state["status"] = "completed"
        print(f"[workflow] Candidate={state['candidate_id']} completed with score {state['score']}")
    else:
        state["status"] = "error"
        state["error"] = "Could not generate interview summary."
        print(f"[workflow] Summary failed for candidate={state['candidate_id']}")
    return state


# Build the workflow graph
def build_workflow() -> StateGraph:
    workflow = StateGraph(InterviewState)

    workflow.add_node("prepare", prepare_node)
    workflow.add_node("questions", questions_node)
    workflow.add_node("summary", summary_node)

    workflow.set_entry_point("prepare")
    workflow.add_conditional_edges(
        "prepare",
        route_next_step,
        {
            "questions": "questions",
            "summary": "summary",
            "wait": END
        }
    )

    workflow.add_edge("questions", END)
    workflow.add_edge("summary", END)

    return workflow.compile()


# Export the compiled workflow
graph_app = build_workflow()


def build_interview_state(candidate: Candidate) -> InterviewState:
    return InterviewState(
        candidate_id=candidate["id"],
        status=candidate["status"],
        resume_text=candidate.get("resumeText") or "",
        questions=[dict(q) for q in candidate.get("questions", [])],
        answers=[q.get("answer") or "" for q in candidate.get("questions", [])],
        score=candidate.get("score"),
        summary=candidate.get("summary"),
        error=None,
    )


async def run_interview_workflow(store: InterviewStore, candidate_id: str) -> Optional[InterviewState]:
    """
    Run the workflow for one candidate and write its outcome back to the store.

    Returns:
        InterviewState: Final workflow state, None if the candidate does not exist
    """
    candidate = store.get_candidate(candidate_id)
    if candidate is None:
        print(f"[workflow] Candidate not found: {candidate_id}")
        return None

    result = await graph_app.ainvoke(build_interview_state(candidate))
    print(f"[workflow] Workflow result for candidate={candidate_id}: {result['status']}")
    if result["error"]:
        print(f"[workflow] Workflow error: {result['error']}")

    if not candidate["questions"] and result["questions"]:
        store.update_candidate(candidate_id, questions=result["questions"])

    if result["status"] == "completed":
        store.update_candidate(candidate_id, status="completed", score=result["score"], summary=result["summary"])
    elif result["status"] != candidate["status"]:
        store.update_candidate(candidate_id, status=result["status"])

    return result
