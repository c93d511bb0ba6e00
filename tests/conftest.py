import json

import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models.fake_chat_models import FakeListChatModel

from app.main import app, get_store
from tools.store_tools import InterviewStore, create_new_candidate

RESUME_TEXT = (
    "Jane Doe\njane.doe@example.com\n+1 555 010 2030\n\n"
    "Senior Python developer. Built FastAPI services, PostgreSQL schemas and "
    "a Kafka event pipeline processing 2M events per day."
)


def fake_llm(*responses):
    """Chat model stand-in that replies with the given strings (or dicts as JSON), in order."""
    return FakeListChatModel(
        responses=[r if isinstance(r, str) else json.dumps(r) for r in responses]
    )


def make_candidate(**overrides):
    candidate = create_new_candidate()
    candidate.update(overrides)
    return candidate


@pytest.fixture
def store(tmp_path):
    return InterviewStore(tmp_path).restore()


@pytest.fixture
def client(store):
    app.dependency_overrides[get_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
