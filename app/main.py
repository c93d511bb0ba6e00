import os
from pathlib import Path
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, UploadFile, File, Form, Depends, HTTPException, Query
from fastapi.responses import HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError

from agents.agent1 import NOT_SPECIFIED
from app.actions import extract_resume_info, get_dashboard_analytics
from app.schemas import CandidateInfo, AnswerSubmission
from app.state import INTERVIEW_STRUCTURE
from app.workflow import run_interview_workflow
from tools.dashboard_tools import (
    get_completed_candidates,
    search_and_sort_candidates,
    get_score_badge,
    get_score_spread,
    to_analytics_input,
)
from tools.resume_tools import (
    ResumeFileError,
    ResumeFileTooLargeError,
    validate_resume_upload,
    encode_data_uri,
    decode_data_uri,
    resume_download_name,
    attachment_header,
)
from tools.store_tools import InterviewStore, InvalidTransitionError

app = FastAPI(title="AssessAI", description="AI-powered technical interview assistant")

# Paths
BASE_DIR = Path(__file__).resolve().parent
DATA_DIR = Path(os.getenv("ASSESS_AI_DATA_DIR", str(BASE_DIR.parent / "data")))

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

_store: Optional[InterviewStore] = None


def get_store() -> InterviewStore:
    """Interview store, restored from disk on first use."""
    global _store
    if _store is None:
        _store = InterviewStore(DATA_DIR).restore()
    return _store


def candidate_overview(candidate: dict) -> dict:
    """Candidate fields for list views, without the embedded resume file."""
    overview = {k: v for k, v in candidate.items() if k != "fileDataUri"}
    overview["hasResumeFile"] = bool(candidate.get("fileDataUri"))
    overview["scoreBadge"] = get_score_badge(candidate.get("score"))
    return overview


def current_question_view(candidate: dict) -> dict:
    index = candidate["currentQuestionIndex"]
    total = len(INTERVIEW_STRUCTURE)
    questions = candidate["questions"]
    return {
        "index": index,
        "total": total,
        "progress": index / total * 100,
        "question": questions[index] if index < len(questions) else None,
    }


def require_active_candidate(store: InterviewStore) -> dict:
    candidate = store.active_candidate
    if candidate is None:
        raise HTTPException(status_code=404, detail="No active interview")
    return candidate


def update_status(store: InterviewStore, candidate_id: str, **changes) -> dict:
    try:
        return store.update_candidate(candidate_id, **changes)
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


async def build_dashboard(store: InterviewStore) -> dict:
    completed = get_completed_candidates(store.candidates)
    if not completed:
        return {
            "totalCandidates": 0,
            "scoreSpread": None,
            "analytics": None,
            "candidates": [],
            "message": "There are no completed interviews yet. Analytics will be shown here once candidates complete their interviews.",
        }

    analytics = await get_dashboard_analytics(to_analytics_input(completed))
    if analytics is None:
        raise HTTPException(status_code=502, detail="Could not generate dashboard analytics. Please try again later.")

    spread = get_score_spread(completed)
    return {
        "totalCandidates": len(completed),
        "scoreSpread": f"{spread[0]}-{spread[1]}" if spread else None,
        "analytics": analytics,
        "candidates": [candidate_overview(c) for c in completed],
    }


def start_active_interview(store: InterviewStore) -> dict:
    candidate = require_active_candidate(store)
    return update_status(store, candidate["id"], status="collecting-info")


async def submit_candidate_info(store: InterviewStore, info: CandidateInfo) -> dict:
    """Store the candidate's details, then generate the question set."""
    candidate = require_active_candidate(store)
    if candidate["status"] != "collecting-info":
        raise HTTPException(status_code=409, detail=f"Cannot submit details while interview is '{candidate['status']}'")

    update_status(store, candidate["id"], **info.model_dump(), status="in-progress")
    await run_interview_workflow(store, candidate["id"])
    return store.get_candidate(candidate["id"])


async def record_answer(store: InterviewStore, answer: str) -> dict:
    """Answer the current question; the last answer triggers the summary."""
    candidate = require_active_candidate(store)
    if candidate["status"] != "in-progress":
        raise HTTPException(status_code=409, detail=f"Interview is '{candidate['status']}'")
    if candidate["currentQuestionIndex"] >= len(candidate["questions"]):
        raise HTTPException(status_code=409, detail="No open question to answer")

    store.add_answer_to_active_candidate(answer)

    if candidate["currentQuestionIndex"] >= len(INTERVIEW_STRUCTURE):
        update_status(store, candidate["id"], status="generating-summary")
        await run_interview_workflow(store, candidate["id"])

    return store.get_candidate(candidate["id"])


def render_home(request: Request, store: InterviewStore, message: Optional[str] = None):
    candidate = store.active_candidate
    return templates.TemplateResponse(request, "index.html", {
        "candidate": candidate,
        "current": current_question_view(candidate) if candidate and candidate["status"] == "in-progress" else None,
        "show_welcome_back": store.should_welcome_back(),
        "message": message,
    })


def validation_message(error: ValidationError) -> str:
    return "; ".join(f"{err['loc'][-1]}: {err['msg']}" for err in error.errors())


# Routes
@app.get("/", response_class=HTMLResponse)
async def home(request: Request, store: InterviewStore = Depends(get_store)):
    return render_home(request, store)


# Form posts from the interviewee page; each redirects back to it
@app.post("/interview/start", response_class=HTMLResponse)
async def start_interview_form(request: Request, store: InterviewStore = Depends(get_store)):
    try:
        start_active_interview(store)
    except HTTPException as e:
        print(f"[start_interview_form] {e.detail}")
        return render_home(request, store, e.detail)
    return RedirectResponse("/", status_code=303)


@app.post("/interview/resume", response_class=HTMLResponse)
async def resume_interview_form(store: InterviewStore = Depends(get_store)):
    store.resume_interview()
    return RedirectResponse("/", status_code=303)


@app.post("/interview/reset", response_class=HTMLResponse)
async def reset_interview_form(store: InterviewStore = Depends(get_store)):
    store.reset_active_interview()
    return RedirectResponse("/", status_code=303)


@app.post("/interview/info", response_class=HTMLResponse)
async def submit_info_form(
    request: Request,
    name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    resumeText: str = Form(""),
    fileDataUri: Optional[str] = Form(None),
    store: InterviewStore = Depends(get_store),
):
    try:
        info = CandidateInfo(name=name, email=email, phone=phone, resumeText=resumeText, fileDataUri=fileDataUri or None)
        await submit_candidate_info(store, info)
    except ValidationError as e:
        return render_home(request, store, validation_message(e))
    except HTTPException as e:
        print(f"[submit_info_form] {e.detail}")
        return render_home(request, store, e.detail)
    return RedirectResponse("/", status_code=303)


@app.post("/interview/answer", response_class=HTMLResponse)
async def submit_answer_form(request: Request, answer: str = Form(""), store: InterviewStore = Depends(get_store)):
    try:
        submission = AnswerSubmission(answer=answer)
        await record_answer(store, submission.answer)
    except ValidationError as e:
        return render_home(request, store, validation_message(e))
    except HTTPException as e:
        print(f"[submit_answer_form] {e.detail}")
        return render_home(request, store, e.detail)
    return RedirectResponse("/", status_code=303)


@app.get("/api/state")
async def get_state(store: InterviewStore = Depends(get_store)):
    return {
        "isRestored": store.is_restored,
        "activeCandidateId": store.active_candidate_id,
        "activeCandidate": store.active_candidate,
        "candidates": [candidate_overview(c) for c in store.candidates],
        "showWelcomeBack": store.should_welcome_back(),
    }


@app.post("/api/interview/start")
async def start_interview(store: InterviewStore = Depends(get_store)):
    return start_active_interview(store)


@app.post("/api/interview/resume")
async def resume_interview(store: InterviewStore = Depends(get_store)):
    store.resume_interview()
    return require_active_candidate(store)


@app.post("/api/interview/reset")
async def reset_interview(store: InterviewStore = Depends(get_store)):
    return store.reset_active_interview()


@app.post("/api/resume/parse")
async def parse_resume(file: UploadFile = File(...)):
    content = await file.read()
    try:
        mime_type = validate_resume_upload(file.filename, content)
    except ResumeFileTooLargeError as e:
        raise HTTPException(status_code=413, detail=str(e))
    except ResumeFileError as e:
        raise HTTPException(status_code=400, detail=str(e))

    data_uri = encode_data_uri(content, mime_type)
    result = await extract_resume_info(data_uri)

    if not result or not result["resumeText"]:
        print(f"[parse_resume] Could not extract any information from {file.filename}")
        return {
            "parseStatus": "failed",
            "message": "Failed to parse resume. The AI could not extract any information. Please try another file or fill the form manually.",
        }

    partial = result["name"] == NOT_SPECIFIED or result["email"] == NOT_SPECIFIED
    print(f"[parse_resume] Parsed {file.filename} ({'partial' if partial else 'success'})")
    return {
        "parseStatus": "partial" if partial else "success",
        "message": "AI parsed your resume, but some fields might be missing. Please review." if partial else "Resume parsed successfully.",
        "name": "" if result["name"] == NOT_SPECIFIED else result["name"],
        "email": "" if result["email"] == NOT_SPECIFIED else result["email"],
        "phone": "" if result["phone"] == NOT_SPECIFIED else result["phone"],
        "resumeText": result["resumeText"],
        "fileDataUri": data_uri,
    }


@app.post("/api/interview/info")
async def submit_info(info: CandidateInfo, store: InterviewStore = Depends(get_store)):
    return await submit_candidate_info(store, info)


@app.get("/api/interview/question")
async def get_current_question(store: InterviewStore = Depends(get_store)):
    candidate = require_active_candidate(store)
    if candidate["status"] != "in-progress":
        raise HTTPException(status_code=409, detail=f"Interview is '{candidate['status']}'")
    return current_question_view(candidate)


@app.post("/api/interview/answer")
async def submit_answer(submission: AnswerSubmission, store: InterviewStore = Depends(get_store)):
    return await record_answer(store, submission.answer)


@app.get("/api/candidates")
async def list_candidates(
    search: str = "",
    sort_by: str = Query("date", pattern="^(score|date|name)$"),
    store: InterviewStore = Depends(get_store),
):
    return [candidate_overview(c) for c in search_and_sort_candidates(store.candidates, search, sort_by)]


@app.get("/api/candidates/{candidate_id}")
async def get_candidate_detail(candidate_id: str, store: InterviewStore = Depends(get_store)):
    candidate = store.get_candidate(candidate_id)
    if candidate is None:
        raise HTTPException(status_code=404, detail="Candidate not found")
    return {**candidate_overview(candidate), "questions": candidate["questions"]}


@app.get("/api/candidates/{candidate_id}/resume")
async def download_resume(candidate_id: str, store: InterviewStore = Depends(get_store)):
    candidate = store.get_candidate(candidate_id)
    if candidate is None:
        raise HTTPException(status_code=404, detail="Candidate not found")
    if not candidate.get("fileDataUri"):
        raise HTTPException(status_code=404, detail="The original resume file was not saved.")

    try:
        mime_type, content = decode_data_uri(candidate["fileDataUri"])
    except ResumeFileError as e:
        print(f"[download_resume] Stored file for {candidate_id} is invalid: {e}")
        raise HTTPException(status_code=500, detail="Stored resume file is corrupted")

    filename = resume_download_name(candidate["name"], candidate["fileDataUri"])
    return Response(
        content=content,
        media_type=mime_type,
        headers={"Content-Disposition": attachment_header(filename)},
    )


@app.get("/api/dashboard")
async def dashboard_data(store: InterviewStore = Depends(get_store)):
    return await build_dashboard(store)


@app.get("/dashboard", response_class=HTMLResponse)
async def dashboard_page(request: Request, store: InterviewStore = Depends(get_store)):
    try:
        dashboard = await build_dashboard(store)
        error_message = None
    except HTTPException as e:
        dashboard = None
        error_message = e.detail
    return templates.TemplateResponse(request, "dashboard.html", {
        "dashboard": dashboard,
        "error_message": error_message,
    })


if __name__ == "__main__":
    uvicorn.run("app.main:app", host="0.0.0.0", port=8080, reload=True)
