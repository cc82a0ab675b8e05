import pytest

from app import create_app
from config import TestConfig
from models import db
from services import interview_service


class AIEnabledConfig(TestConfig):
    GEMINI_API_KEY = "test-key"


class FakeGateway:
    """Stands in for GeminiGateway; each reply is a value or an exception to raise."""

    configured = True

    def __init__(self):
        self.questions_reply = None
        self.evaluation_reply = None
        self.feedback_reply = None
        self.calls = []

    def _answer(self, reply):
        if isinstance(reply, Exception):
            raise reply
        return reply

    def generate_questions(self, job_role, difficulty, total_questions):
        self.calls.append(("generate_questions", job_role, difficulty, total_questions))
        return self._answer(self.questions_reply)

    def evaluate_answer(self, question_text, question_type, expected_answer, answer):
        self.calls.append(("evaluate_answer", question_text, question_type, answer))
        return self._answer(self.evaluation_reply)

    def synthesize_feedback(self, transcript, average_score):
        self.calls.append(("synthesize_feedback", transcript, average_score))
        return self._answer(self.feedback_reply)


@pytest.fixture
def app():
    app = create_app(TestConfig)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def fake_gateway():
    return FakeGateway()


@pytest.fixture
def ai_app(fake_gateway):
    app = create_app(AIEnabledConfig, gateway=fake_gateway)
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def worker(app):
    return app.extensions["interview_worker"]


def make_interview(app, user_id="alice", total_questions=3, job_role="Senior Software Engineer", difficulty="intermediate"):
    with app.app_context():
        return interview_service.create_interview(
            user_id,
            title="Practice round",
            job_role=job_role,
            difficulty=difficulty,
            total_questions=total_questions,
        )


def answer_all(app, interview_id, answers, user_id="alice"):
    """Open the session and answer questions in order; returns the submit results."""
    results = []
    with app.app_context():
        interview_service.open_session(user_id, interview_id)
    for answer in answers:
        with app.app_context():
            current = interview_service.get_current_question(user_id, interview_id)
            results.append(
                interview_service.submit_answer(
                    user_id, interview_id, current["question"]["id"], answer, time_spent=42
                )
            )
    return results
