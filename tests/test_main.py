from unittest.mock import patch, AsyncMock
from urllib.parse import quote

from fastapi.testclient import TestClient

from app.main import app, get_store
from conftest import make_candidate, RESUME_TEXT
from tools.resume_tools import MAX_RESUME_SIZE
from tools.store_tools import InterviewStore, save_store_state, STORAGE_KEY

QUESTIONS = [
    {"question": "What is a Python decorator?", "difficulty": "Easy"},
    {"question": "How did you partition the Kafka topics?", "difficulty": "Medium"},
    {"question": "Design an event pipeline for 20M events per day.", "difficulty": "Hard"},
]

CANDIDATE_INFO = {
    "name": "Jane Doe",
    "email": "jane.doe@example.com",
    "phone": "+1 555 010 2030",
    "resumeText": RESUME_TEXT,
}

ANALYTICS = {
    "overallSummary": "One strong backend candidate.",
    "averageScore": 72.0,
    "scoreDistribution": [
        {"range": "0-20", "count": 0},
        {"range": "21-40", "count": 0},
        {"range": "41-60", "count": 0},
        {"range": "61-80", "count": 1},
        {"range": "81-100", "count": 0},
    ],
    "commonStrengths": ["Kafka"],
    "commonWeaknesses": ["system design depth"],
}


def complete_interview(client):
    assert client.post("/api/interview/start").json()["status"] == "collecting-info"

    with patch("app.workflow.generate_all_interview_questions", new=AsyncMock(return_value=QUESTIONS)):
        candidate = client.post("/api/interview/info", json=CANDIDATE_INFO).json()
    assert candidate["status"] == "in-progress"
    assert candidate["questions"] == QUESTIONS

    summary = AsyncMock(return_value={"summary": "Good grasp of streaming systems.", "score": 72})
    with patch("app.workflow.get_candidate_summary", new=summary):
        for answer in ["Wraps a function.", "By customer id.", "Partitioned consumers with backpressure."]:
            candidate = client.post("/api/interview/answer", json={"answer": answer}).json()
    return candidate


def test_full_interview_flow(client):
    state = client.get("/api/state").json()
    assert state["activeCandidate"]["status"] == "not-started"
    assert state["showWelcomeBack"] is False

    candidate = complete_interview(client)

    assert candidate["status"] == "completed"
    assert candidate["score"] == 72
    assert candidate["currentQuestionIndex"] == 3
    assert [q["answer"] for q in candidate["questions"]] == [
        "Wraps a function.", "By customer id.", "Partitioned consumers with backpressure.",
    ]


def test_current_question_progress(client):
    client.post("/api/interview/start")
    with patch("app.workflow.generate_all_interview_questions", new=AsyncMock(return_value=QUESTIONS)):
        client.post("/api/interview/info", json=CANDIDATE_INFO)
    client.post("/api/interview/answer", json={"answer": "Wraps a function."})

    current = client.get("/api/interview/question").json()

    assert current["index"] == 1
    assert current["total"] == 3
    assert current["question"]["difficulty"] == "Medium"


def test_completed_candidate_shows_in_interviewer_views(client, store):
    candidate = complete_interview(client)

    listing = client.get("/api/candidates", params={"search": "jane", "sort_by": "score"}).json()
    assert [c["id"] for c in listing] == [candidate["id"]]
    assert listing[0]["scoreBadge"] == "medium"
    assert "fileDataUri" not in listing[0]

    detail = client.get(f"/api/candidates/{candidate['id']}").json()
    assert detail["summary"] == "Good grasp of streaming systems."
    assert len(detail["questions"]) == 3

    assert client.get(f"/api/candidates/{candidate['id']}/resume").status_code == 404
    assert client.get("/api/candidates/candidate-missing").status_code == 404

    with patch("app.main.get_dashboard_analytics", new=AsyncMock(return_value=ANALYTICS)):
        dashboard = client.get("/api/dashboard").json()
        page = client.get("/dashboard")
    assert dashboard["totalCandidates"] == 1
    assert dashboard["scoreSpread"] == "72-72"
    assert dashboard["analytics"]["overallSummary"] == "One strong backend candidate."
    assert "JANE DOE" in page.text


def test_resume_download_returns_original_file(client, store):
    done = make_candidate(
        id="candidate-1",
        name="Jane Doe",
        status="completed",
        score=90,
        fileDataUri="data:application/pdf;base64,JVBERi0xLjQ=",
    )
    store.candidates.append(done)

    response = client.get("/api/candidates/candidate-1/resume")

    assert response.status_code == 200
    assert response.content == b"%PDF-1.4"
    assert response.headers["content-type"] == "application/pdf"
    assert 'filename="resume-Jane_Doe.pdf"' in response.headers["content-disposition"]


def test_dashboard_without_completed_interviews(client):
    dashboard = client.get("/api/dashboard").json()
    assert dashboard["totalCandidates"] == 0
    assert dashboard["analytics"] is None
    assert "no completed interviews" in dashboard["message"]


def test_dashboard_analytics_failure(client, store):
    store.candidates.append(make_candidate(id="candidate-1", name="Ann", status="completed", score=40))

    with patch("app.main.get_dashboard_analytics", new=AsyncMock(return_value=None)):
        assert client.get("/api/dashboard").status_code == 502
        page = client.get("/dashboard")
    assert page.status_code == 200
    assert "Could not generate dashboard analytics" in page.text


def test_out_of_order_requests_are_rejected(client):
    assert client.post("/api/interview/info", json=CANDIDATE_INFO).status_code == 409
    assert client.post("/api/interview/answer", json={"answer": "early"}).status_code == 409
    assert client.get("/api/interview/question").status_code == 409

    client.post("/api/interview/start")
    assert client.post("/api/interview/start").json()["status"] == "collecting-info"


def test_invalid_candidate_details_are_rejected(client):
    client.post("/api/interview/start")

    response = client.post("/api/interview/info", json={**CANDIDATE_INFO, "email": "not-an-email", "resumeText": "short"})

    assert response.status_code == 422
    fields = {error["loc"][-1] for error in response.json()["detail"]}
    assert fields == {"email", "resumeText"}


def test_blank_answer_is_rejected(client):
    assert client.post("/api/interview/answer", json={"answer": "   "}).status_code == 422


def test_resume_upload_validation(client):
    too_big = client.post("/api/resume/parse", files={"file": ("cv.pdf", b"x" * (MAX_RESUME_SIZE + 1), "application/pdf")})
    wrong_type = client.post("/api/resume/parse", files={"file": ("cv.txt", b"hello", "text/plain")})

    assert too_big.status_code == 413
    assert wrong_type.status_code == 400


def test_resume_upload_with_missing_fields_is_partial(client):
    parsed = {"name": "Jane Doe", "email": "Not specified", "phone": "Not specified", "resumeText": RESUME_TEXT}
    with patch("app.main.extract_resume_info", new=AsyncMock(return_value=parsed)):
        result = client.post("/api/resume/parse", files={"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")}).json()

    assert result["parseStatus"] == "partial"
    assert result["name"] == "Jane Doe"
    assert result["email"] == ""
    assert result["fileDataUri"].startswith("data:application/pdf;base64,")


def test_resume_upload_that_cannot_be_read_fails(client):
    with patch("app.main.extract_resume_info", new=AsyncMock(return_value=None)):
        result = client.post("/api/resume/parse", files={"file": ("cv.doc", b"\xd0\xcf", "application/msword")}).json()

    assert result["parseStatus"] == "failed"


def test_reset_starts_new_interview_and_keeps_completed(client):
    completed = complete_interview(client)

    new_candidate = client.post("/api/interview/reset").json()
    state = client.get("/api/state").json()

    assert state["activeCandidateId"] == new_candidate["id"]
    assert [c["id"] for c in state["candidates"]] == [completed["id"], new_candidate["id"]]


def test_home_page_renders_current_status(client):
    page = client.get("/")
    assert page.status_code == 200
    assert "Get Started" in page.text

    client.post("/api/interview/start")
    assert "Start Your Interview" in client.get("/").text


def test_resume_download_with_non_latin_name(client, store):
    store.candidates.append(make_candidate(
        id="candidate-1",
        name="李雷",
        status="completed",
        score=90,
        fileDataUri="data:application/pdf;base64,JVBERi0xLjQ=",
    ))

    response = client.get("/api/candidates/candidate-1/resume")

    assert response.status_code == 200
    disposition = response.headers["content-disposition"]
    assert 'filename="resume-__.pdf"' in disposition
    assert f"filename*=UTF-8''{quote('resume-李雷.pdf', safe='')}" in disposition


def test_state_poll_keeps_welcome_back_prompt(tmp_path):
    current = make_candidate(id="candidate-1", name="Bob", status="in-progress", resumeText=RESUME_TEXT, questions=QUESTIONS)
    save_store_state(tmp_path / f"{STORAGE_KEY}.json", [current], "candidate-1")
    restored = InterviewStore(tmp_path).restore()
    app.dependency_overrides[get_store] = lambda: restored
    try:
        with TestClient(app) as client:
            assert client.get("/api/state").json()["showWelcomeBack"] is True
            assert "Welcome Back!" in client.get("/").text

            page = client.post("/interview/resume")

            assert "Welcome Back!" not in page.text
            assert "Question 1 of 3" in page.text
            assert client.get("/api/state").json()["showWelcomeBack"] is False
    finally:
        app.dependency_overrides.clear()


def test_interview_through_html_forms(client, store):
    response = client.post("/interview/start", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/"

    with patch("app.workflow.generate_all_interview_questions", new=AsyncMock(return_value=QUESTIONS)):
        page = client.post("/interview/info", data=CANDIDATE_INFO)
    assert "Question 1 of 3" in page.text

    summary = AsyncMock(return_value={"summary": "Good grasp of streaming systems.", "score": 72})
    with patch("app.workflow.get_candidate_summary", new=summary):
        for answer in ["Wraps a function.", "By customer id.", "Partitioned consumers with backpressure."]:
            page = client.post("/interview/answer", data={"answer": answer})

    assert "Interview Complete!" in page.text
    assert "72 / 100" in page.text
    assert store.active_candidate["status"] == "completed"


def test_invalid_form_details_are_shown_on_page(client, store):
    client.post("/interview/start")

    page = client.post("/interview/info", data={**CANDIDATE_INFO, "email": "not-an-email"})

    assert page.status_code == 200
    assert "email:" in page.text
    assert store.active_candidate["status"] == "collecting-info"
