"""
Shared test fixtures and utilities.

This module provides common test infrastructure used across all test modules.
"""

import json

import pytest

from shared.config import get_settings
from modules.debates.gateway import reset_gateway_client
from modules.debates.models import Evaluation, LiveDebateRequest, Project
from modules.debates.service import reset_live_debate_service
from modules.voice.tts_client import reset_tts_client


def sse_frame(content: str) -> str:
    """Build one SSE data line carrying a chat completion delta."""
    payload = {"choices": [{"delta": {"content": content}}]}
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n"


def sse_stream(*contents: str, done: bool = True) -> bytes:
    """Build a complete SSE body from delta tokens."""
    body = "".join(sse_frame(c) + "\n" for c in contents)
    if done:
        body += "data: [DONE]\n\n"
    return body.encode("utf-8")


def jsonl(record: dict) -> str:
    """Render one debate record as a JSONL line."""
    return json.dumps(record, ensure_ascii=False) + "\n"


def chunked(data: bytes, size: int) -> list[bytes]:
    """Split bytes into fixed-size chunks."""
    return [data[i:i + size] for i in range(0, len(data), size)]


class FakeGateway:
    """Gateway double that yields prepared chunks."""

    def __init__(self, chunks: list[bytes], error: Exception | None = None):
        self.chunks = chunks
        self.error = error
        self.requests = []
        self.closed = False

    async def stream(self, request):
        self.requests.append(request)
        try:
            for chunk in self.chunks:
                yield chunk
            if self.error is not None:
                raise self.error
        finally:
            self.closed = True


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset module singletons and cached settings around each test."""
    get_settings.cache_clear()
    reset_gateway_client()
    reset_live_debate_service()
    reset_tts_client()
    yield
    get_settings.cache_clear()
    reset_gateway_client()
    reset_live_debate_service()
    reset_tts_client()


@pytest.fixture
def project() -> Project:
    """A project under evaluation."""
    return Project(
        id="project-123",
        name="Voice Notes",
        description="Turns voice memos into tasks",
        architecture="React frontend, Supabase backend",
    )


@pytest.fixture
def evaluations() -> list[Evaluation]:
    """Two judges' evaluations of the project."""
    return [
        Evaluation(
            judge_name="Dr. Alex Chen",
            judge_type="technical",
            score=8.0,
            strengths=["Clean architecture"],
            weaknesses=["No tests"],
            reasoning="Solid implementation",
        ),
        Evaluation(
            judge_name="Maya Patel",
            judge_type="business",
            score=7.0,
            concerns=["Crowded market"],
            reasoning="Clear value proposition",
        ),
    ]


@pytest.fixture
def debate_request(project: Project, evaluations: list[Evaluation]) -> LiveDebateRequest:
    """A valid live debate request."""
    return LiveDebateRequest(evaluations=evaluations, project=project)


@pytest.fixture
def debate_request_json(debate_request: LiveDebateRequest) -> dict:
    """The request as a JSON body."""
    return debate_request.model_dump(mode="json")
