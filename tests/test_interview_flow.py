import pytest

from conftest import answer_all, make_interview
from errors import AccessDenied, DuplicateResponse, InvalidInput, InvalidTransition, NotAuthenticated, NotFound
from models import Response, db
from services import interview_service, repository
from services.evaluation_service import calculate_fallback_score, generate_fallback_feedback
from services.feedback_service import SECTION_TITLES, average_score, performance_label
from services.jobs import EVALUATE_ANSWER, SYNTHESIZE_FEEDBACK


ANSWERS = [
    "I build APIs.",
    "For example, in one situation our team cut costs by 3 percent. " + " ".join(["detail"] * 48) + ".",
    "",
]


def ready_interview(app, worker, **kwargs):
    interview_id = make_interview(app, **kwargs)
    worker.drain()
    return interview_id


def questions_of(app, interview_id, user_id="alice"):
    with app.app_context():
        return interview_service.get_questions(user_id, interview_id)


def call(app, func, *args, **kwargs):
    with app.app_context():
        return func(*args, **kwargs)


def test_new_interview_is_pending_until_questions_are_generated(app, worker):
    interview_id = make_interview(app, total_questions=4)
    interview = call(app, interview_service.get_interview, "alice", interview_id)
    assert interview["status"] == "pending"
    assert interview["currentQuestionIndex"] == 0
    assert interview["title"] == "Practice round"
    assert questions_of(app, interview_id) == []

    assert worker.drain() == 1
    questions = questions_of(app, interview_id)
    assert [q["order"] for q in questions] == [0, 1, 2, 3]
    assert all(q["difficulty"] == "intermediate" for q in questions)
    assert all(q["timeLimit"] for q in questions)


def test_question_generation_is_idempotent(app, worker):
    interview_id = ready_interview(app, worker, total_questions=3)
    before = questions_of(app, interview_id)
    orchestrator = app.extensions["interview_jobs"]
    call(app, orchestrator.generate_questions, interview_id)
    assert questions_of(app, interview_id) == before


@pytest.mark.parametrize(
    "overrides",
    [
        {"difficulty": "expert"},
        {"total_questions": 0},
        {"total_questions": 21},
        {"total_questions": "5"},
        {"total_questions": True},
        {"title": "   "},
        {"job_role": None},
    ],
)
def test_create_interview_validates_input(app, overrides):
    arguments = {
        "title": "Round",
        "job_role": "Backend Developer",
        "difficulty": "beginner",
        "total_questions": 3,
    }
    arguments.update(overrides)
    with pytest.raises(InvalidInput):
        call(app, interview_service.create_interview, "alice", **arguments)


def test_operations_require_a_user(app, worker):
    interview_id = ready_interview(app, worker)
    with pytest.raises(NotAuthenticated):
        call(app, interview_service.get_interview, "  ", interview_id)
    with pytest.raises(NotAuthenticated):
        call(app, interview_service.list_interviews, None)


def test_interviews_are_private_to_their_owner(app, worker):
    interview_id = ready_interview(app, worker)
    for operation in (
        interview_service.get_interview,
        interview_service.get_questions,
        interview_service.start_interview,
        interview_service.get_current_question,
        interview_service.get_results,
        interview_service.retry_evaluation,
    ):
        with pytest.raises(AccessDenied):
            call(app, operation, "bob", interview_id)
    with pytest.raises(NotFound):
        call(app, interview_service.get_interview, "alice", 9999)


def test_list_interviews_shows_own_interviews_newest_first(app):
    first = make_interview(app)
    second = make_interview(app)
    make_interview(app, user_id="bob")
    listed = call(app, interview_service.list_interviews, "alice")
    assert [item["id"] for item in listed] == [second, first]


def test_start_only_from_pending(app, worker):
    interview_id = ready_interview(app, worker)
    started = call(app, interview_service.start_interview, "alice", interview_id)
    assert started["status"] == "in_progress"
    assert started["startedAt"] is not None
    with pytest.raises(InvalidTransition):
        call(app, interview_service.start_interview, "alice", interview_id)


def test_open_session_starts_a_pending_interview(app, worker):
    interview_id = ready_interview(app, worker, total_questions=4)
    session = call(app, interview_service.open_session, "alice", interview_id)
    assert session["currentIndex"] == 0
    assert session["totalQuestions"] == 4
    assert session["progressPercent"] == 0
    assert session["question"]["order"] == 0
    assert call(app, interview_service.get_interview, "alice", interview_id)["status"] == "in_progress"

    # A second open does not restart it.
    again = call(app, interview_service.open_session, "alice", interview_id)
    assert again["currentIndex"] == 0


def test_cannot_answer_before_starting(app, worker):
    interview_id = ready_interview(app, worker)
    first = questions_of(app, interview_id)[0]
    with pytest.raises(InvalidTransition):
        call(app, interview_service.submit_answer, "alice", interview_id, first["id"], "answer", 10)


def test_answers_advance_the_cursor_and_complete_the_interview(app, worker):
    interview_id = ready_interview(app, worker, total_questions=3)
    results = answer_all(app, interview_id, ANSWERS)
    assert results == [
        {"isCompleted": False, "nextQuestionIndex": 1},
        {"isCompleted": False, "nextQuestionIndex": 2},
        {"isCompleted": True, "nextQuestionIndex": 3},
    ]
    interview = call(app, interview_service.get_interview, "alice", interview_id)
    assert interview["status"] == "completed"
    assert interview["currentQuestionIndex"] == 3
    assert interview["completedAt"] is not None

    current = call(app, interview_service.get_current_question, "alice", interview_id)
    assert current["question"] is None
    assert current["progressPercent"] == 100


def test_progress_reflects_answered_questions(app, worker):
    interview_id = ready_interview(app, worker, total_questions=4)
    answer_all(app, interview_id, ["one answer"])
    current = call(app, interview_service.get_current_question, "alice", interview_id)
    assert current["currentIndex"] == 1
    assert current["progressPercent"] == 25
    assert current["question"]["order"] == 1


def test_submission_rules(app, worker):
    interview_id = ready_interview(app, worker, total_questions=3)
    other_id = ready_interview(app, worker, total_questions=1)
    questions = questions_of(app, interview_id)
    call(app, interview_service.start_interview, "alice", interview_id)

    with pytest.raises(InvalidTransition):
        call(app, interview_service.submit_answer, "alice", interview_id, questions[2]["id"], "skip ahead", 5)

    call(app, interview_service.submit_answer, "alice", interview_id, questions[0]["id"], "first", 5)
    with pytest.raises(DuplicateResponse):
        call(app, interview_service.submit_answer, "alice", interview_id, questions[0]["id"], "again", 5)

    foreign = questions_of(app, other_id)[0]
    with pytest.raises(NotFound):
        call(app, interview_service.submit_answer, "alice", interview_id, foreign["id"], "wrong", 5)


@pytest.mark.parametrize(
    "question_id,answer,time_spent",
    [("first", "text", 5), (None, "text", 5), (1, 42, 5), (1, "text", -1), (1, "text", "fast")],
)
def test_submission_validates_input(app, worker, question_id, answer, time_spent):
    interview_id = ready_interview(app, worker)
    call(app, interview_service.start_interview, "alice", interview_id)
    with pytest.raises(InvalidInput):
        call(app, interview_service.submit_answer, "alice", interview_id, question_id, answer, time_spent)


def test_completed_interview_rejects_further_changes(app, worker):
    interview_id = ready_interview(app, worker, total_questions=1)
    answer_all(app, interview_id, ["only answer"])
    question = questions_of(app, interview_id)[0]
    with pytest.raises(InvalidTransition):
        call(app, interview_service.submit_answer, "alice", interview_id, question["id"], "late", 5)
    with pytest.raises(InvalidTransition):
        call(app, interview_service.start_interview, "alice", interview_id)


def test_results_and_retry_require_completion(app, worker):
    interview_id = ready_interview(app, worker, total_questions=2)
    with pytest.raises(InvalidTransition):
        call(app, interview_service.get_results, "alice", interview_id)
    with pytest.raises(InvalidTransition):
        call(app, interview_service.retry_evaluation, "alice", interview_id)

    answer_all(app, interview_id, ["one answer"])
    with pytest.raises(InvalidTransition):
        call(app, interview_service.get_results, "alice", interview_id)
    with pytest.raises(InvalidTransition):
        call(app, interview_service.retry_evaluation, "alice", interview_id)


def test_feedback_synthesis_is_scheduled_after_evaluations(app, worker):
    interview_id = ready_interview(app, worker, total_questions=3)
    answer_all(app, interview_id, ANSWERS)
    pending = app.extensions["interview_jobs"].queue.pending()
    assert [job.name for job in pending] == [EVALUATE_ANSWER] * 3 + [SYNTHESIZE_FEEDBACK]
    assert pending[-1].kwargs == {"interview_id": interview_id, "deferrals": 0}
    assert pending[-1].run_at - pending[-2].run_at >= 3.0 - 1e-6


def test_end_to_end_with_fallbacks(app, worker):
    interview_id = ready_interview(app, worker, total_questions=3, job_role="Backend Developer")
    answer_all(app, interview_id, ANSWERS)
    worker.drain()

    results = call(app, interview_service.get_results, "alice", interview_id)
    assert len(results["results"]) == 3
    scores = []
    for item, answer in zip(results["results"], ANSWERS):
        assert item["answer"] == answer
        assert item["timeSpent"] == 42
        assert item["score"] == calculate_fallback_score(answer, item["questionType"])
        assert item["feedback"] == generate_fallback_feedback(answer, item["questionType"])
        scores.append(item["score"])

    assert results["results"][2]["score"] == 1.0
    assert results["overallScore"] == average_score(scores)
    assert results["overallFeedback"].startswith("Overall Performance Summary:")
    assert [section["title"] for section in results["feedbackSections"]] == list(SECTION_TITLES)
    assert results["performanceLabel"] == performance_label(results["overallScore"])[0]
    assert results["interview"]["status"] == "completed"


def test_retry_requeues_only_unscored_responses(app, worker):
    interview_id = ready_interview(app, worker, total_questions=3)
    answer_all(app, interview_id, ANSWERS)
    worker.drain()

    with app.app_context():
        response = Response.query.filter_by(interview_id=interview_id).order_by(Response.id).first()
        response.score = None
        response.feedback = None
        db.session.commit()
        target = response.id
        outcome = interview_service.retry_evaluation("alice", interview_id)

    assert outcome == {"success": True, "requeuedEvaluations": 1}
    pending = app.extensions["interview_jobs"].queue.pending()
    assert [(job.name, job.kwargs) for job in pending] == [
        (EVALUATE_ANSWER, {"response_id": target}),
        (SYNTHESIZE_FEEDBACK, {"interview_id": interview_id, "deferrals": 0}),
    ]
    assert pending[1].run_at - pending[0].run_at >= 5.0 - 1e-6

    worker.drain()
    with app.app_context():
        assert repository.get_response(target).score is not None


def test_retry_with_everything_scored_only_resynthesizes(app, worker):
    interview_id = ready_interview(app, worker, total_questions=2)
    answer_all(app, interview_id, ["first answer", "second answer"])
    worker.drain()
    outcome = call(app, interview_service.retry_evaluation, "alice", interview_id)
    assert outcome["requeuedEvaluations"] == 0
    assert [job.name for job in app.extensions["interview_jobs"].queue.pending()] == [SYNTHESIZE_FEEDBACK]
