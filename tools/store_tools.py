"""
Store Tools
Holds the candidate list and the active interview, mirrored to a single JSON blob.
The blob is read once when the store is restored and rewritten after every change.
"""

import json
import time
from pathlib import Path
from typing import List, Dict, Any, Optional, Tuple

from app.state import Candidate, InterviewQuestion, STATUS_ORDER

STORAGE_KEY = "assess-ai-state"


class InvalidTransitionError(ValueError):
    """Raised when a candidate status change skips or reverses the interview flow."""


def check_transition(current: str, new: str) -> None:
    """
    Validate a status change against the linear interview flow.

    not-started -> collecting-info -> in-progress -> generating-summary -> completed,
    with "error" reachable from every non-terminal status and never left again.
    """
    if new == current:
        return
    if current == "error":
        raise InvalidTransitionError(f"Candidate is in error state, cannot move to '{new}'")
    if new == "error":
        if current == "completed":
            raise InvalidTransitionError("Completed interview cannot move to 'error'")
        return
    if new not in STATUS_ORDER:
        raise InvalidTransitionError(f"Unknown status '{new}'")
    if current in STATUS_ORDER and STATUS_ORDER.index(new) == STATUS_ORDER.index(current) + 1:
        return
    raise InvalidTransitionError(f"Illegal status transition '{current}' -> '{new}'")


def create_new_candidate(existing_ids: Optional[set] = None) -> Candidate:
    """Return a blank candidate with a time-based id that is unique within existing_ids."""
    created_at = int(time.time() * 1000)
    stamp = created_at
    existing_ids = existing_ids or set()
    while f"candidate-{stamp}" in existing_ids:
        stamp += 1
    return Candidate(
        id=f"candidate-{stamp}",
        name="",
        email="",
        phone="",
        resumeText="",
        fileDataUri="",
        status="not-started",
        questions=[],
        currentQuestionIndex=0,
        score=None,
        summary=None,
        createdAt=created_at,
    )


def load_store_state(storage_file: Path) -> Tuple[List[Dict[str, Any]], Optional[str]]:
    """
    Read the persisted candidate list and active candidate id.

    Args:
        storage_file: Path to the JSON blob

    Returns:
        Tuple: (candidates, active_candidate_id); ([], None) if the file is missing or invalid
    """
    if not storage_file.exists():
        print(f"[load_store_state] No saved state found at {storage_file}")
        return [], None

    try:
        with open(storage_file, "r", encoding="utf-8") as f:
            data = json.load(f)

        if not isinstance(data, dict):
            print(f"[load_store_state] Invalid state format in {storage_file}: expected object, got {type(data)}")
            return [], None

        candidates = data.get("candidates")
        if not isinstance(candidates, list):
            candidates = []

        print(f"[load_store_state] Loaded {len(candidates)} candidates from {storage_file}")
        return candidates, data.get("activeCandidateId")

    except json.JSONDecodeError as e:
        print(f"[load_store_state] Invalid JSON in {storage_file}: {e}")
        return [], None

    except Exception as e:
        print(f"[load_store_state] Failed to load state from {storage_file}: {e}")
        return [], None


def save_store_state(storage_file: Path, candidates: List[Dict[str, Any]], active_candidate_id: Optional[str]) -> None:
    """
    Write the candidate list and active candidate id as one JSON blob.

    Raises:
        Exception: If save operation fails
    """
    try:
        storage_file.parent.mkdir(parents=True, exist_ok=True)
        with open(storage_file, "w", encoding="utf-8") as f:
            json.dump(
                {"candidates": candidates, "activeCandidateId": active_candidate_id},
                f,
                ensure_ascii=False,
                indent=2,
            )
    except Exception as e:
        error_msg = f"Error saving state to {storage_file}: {e}"
        print(f"[save_store_state] {error_msg}")
        raise Exception(error_msg)


class InterviewStore:
    """In-memory interview state with a write-through JSON mirror."""

    def __init__(self, data_dir: Path):
        self.storage_file = Path(data_dir) / f"{STORAGE_KEY}.json"
        self.candidates: List[Candidate] = []
        self.active_candidate_id: Optional[str] = None
        self.is_restored = False
        self._welcome_back_pending = False

    # ------------------- RESTORE / SAVE -------------------

    def restore(self) -> "InterviewStore":
        """Load saved state; start a fresh interview unless an unfinished one is active."""
        restored_candidates: List[Candidate] = []
        restored_active_id = None
        try:
            restored_candidates, saved_active_id = load_store_state(self.storage_file)
            active = next((c for c in restored_candidates if c.get("id") == saved_active_id), None)
            if active and active.get("status") not in ("completed", "error"):
                restored_active_id = saved_active_id
        except Exception as e:
            print(f"[InterviewStore] Failed to restore state: {e}")
        finally:
            if not restored_active_id:
                new_candidate = create_new_candidate({c.get("id") for c in restored_candidates})
                restored_candidates.append(new_candidate)
                restored_active_id = new_candidate["id"]
            self.candidates = restored_candidates
            self.active_candidate_id = restored_active_id
            self.is_restored = True

        self._welcome_back_pending = bool(
            self.active_candidate and self.active_candidate["status"] == "in-progress"
        )
        self.save()
        return self

    def save(self) -> None:
        if not self.is_restored:
            return
        try:
            save_store_state(self.storage_file, self.candidates, self.active_candidate_id)
        except Exception as e:
            print(f"[InterviewStore] Failed to save state: {e}")

    # ------------------- QUERIES -------------------

    def get_candidate(self, candidate_id: str) -> Optional[Candidate]:
        return next((c for c in self.candidates if c["id"] == candidate_id), None)

    @property
    def active_candidate(self) -> Optional[Candidate]:
        if not self.active_candidate_id:
            return None
        return self.get_candidate(self.active_candidate_id)

    def should_welcome_back(self) -> bool:
        """True after restore when the active interview was left in progress, until it is resumed or reset."""
        return self._welcome_back_pending

    # ------------------- MUTATIONS -------------------

    def update_candidate(self, candidate_id: str, **changes: Any) -> Optional[Candidate]:
        """Shallow-merge changes into a candidate; status changes must follow the interview flow."""
        candidate = self.get_candidate(candidate_id)
        if candidate is None:
            print(f"[InterviewStore] No candidate found for id={candidate_id}")
            return None

        if "status" in changes:
            check_transition(candidate["status"], changes["status"])

        candidate.update(changes)
        self.save()
        return candidate

    def update_active_candidate(self, **changes: Any) -> Optional[Candidate]:
        if not self.active_candidate_id:
            return None
        return self.update_candidate(self.active_candidate_id, **changes)

    def set_all_questions_for_active_candidate(self, questions: List[InterviewQuestion]) -> None:
        candidate = self.active_candidate
        if candidate is None:
            return
        candidate["questions"] = [dict(q) for q in questions]
        self.save()

    def add_answer_to_active_candidate(self, answer: str) -> None:
        """Record the answer for the current question and move to the next one."""
        candidate = self.active_candidate
        if candidate is None:
            return

        index = candidate["currentQuestionIndex"]
        if 0 <= index < len(candidate["questions"]):
            candidate["questions"][index] = {**candidate["questions"][index], "answer": answer}
        candidate["currentQuestionIndex"] = index + 1
        self.save()

    def resume_interview(self) -> None:
        # State is already restored; only the welcome-back prompt is dismissed
        self._welcome_back_pending = False

    def reset_active_interview(self) -> Candidate:
        """Keep completed interviews only and start a new blank one."""
        kept = [c for c in self.candidates if c["status"] == "completed"]
        new_candidate = create_new_candidate({c["id"] for c in kept})
        self.candidates = kept + [new_candidate]
        self.active_candidate_id = new_candidate["id"]
        self._welcome_back_pending = False
        self.save()
        print(f"[InterviewStore] Started new interview {new_candidate['id']}")
        return new_candidate
