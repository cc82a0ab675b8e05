# FILE: services/interview_service.py
from datetime import datetime

from flask import current_app
from sqlalchemy.exc import IntegrityError

from errors import AccessDenied, DuplicateResponse, InvalidInput, InvalidTransition, NotAuthenticated, NotFound
from models import (
    DIFFICULTIES,
    STATUS_COMPLETED,
    STATUS_IN_PROGRESS,
    STATUS_PENDING,
    Interview,
    Response,
    db,
)
from services import repository
from services.feedback_service import performance_label, split_feedback_sections
from services.jobs import get_orchestrator


def _require_user(user_id) -> str:
    if isinstance(user_id, str):
        user_id = user_id.strip()
    if not user_id:
        raise NotAuthenticated("Must be logged in")
    return user_id


def _owned_interview(user_id, interview_id) -> Interview:
    user_id = _require_user(user_id)
    interview = repository.get_interview(interview_id)
    if interview is None:
        raise NotFound(f"Interview {interview_id} not found")
    if interview.user_id != user_id:
        raise AccessDenied("Interview not found or access denied")
    return interview


def _clean_text(value, field: str, required: bool = True, max_length: int = 200):
    if value is not None and not isinstance(value, str):
        raise InvalidInput(f"{field} must be a string")
    text = (value or "").strip()
    if required and not text:
        raise InvalidInput(f"{field} is required")
    if len(text) > max_length:
        raise InvalidInput(f"{field} must be at most {max_length} characters")
    return text or None


def create_interview(user_id, title, job_role, difficulty, total_questions, company=None) -> int:
    user_id = _require_user(user_id)
    title = _clean_text(title, "title")
    job_role = _clean_text(job_role, "jobRole", max_length=120)
    company = _clean_text(company, "company", required=False, max_length=120)
    if difficulty not in DIFFICULTIES:
        raise InvalidInput(f"difficulty must be one of {', '.join(DIFFICULTIES)}")
    max_questions = current_app.config.get("MAX_TOTAL_QUESTIONS", 20)
    if isinstance(total_questions, bool) or not isinstance(total_questions, int):
        raise InvalidInput("totalQuestions must be an integer")
    if not 1 <= total_questions <= max_questions:
        raise InvalidInput(f"totalQuestions must be between 1 and {max_questions}")

    interview = Interview(
        user_id=user_id,
        title=title,
        job_role=job_role,
        company=company,
        difficulty=difficulty,
        status=STATUS_PENDING,
        total_questions=total_questions,
        current_question_index=0,
    )
    db.session.add(interview)
    db.session.commit()

    get_orchestrator().schedule_question_generation(interview.id)
    current_app.logger.info("Created interview %s for %s (%d questions)", interview.id, job_role, total_questions)
    return interview.id


def list_interviews(user_id):
    user_id = _require_user(user_id)
    return [interview.to_dict() for interview in repository.interviews_for_user(user_id)]


def get_interview(user_id, interview_id) -> dict:
    return _owned_interview(user_id, interview_id).to_dict()


def get_questions(user_id, interview_id):
    interview = _owned_interview(user_id, interview_id)
    return [question.to_dict() for question in repository.questions_for(interview.id)]


def start_interview(user_id, interview_id) -> dict:
    interview = _owned_interview(user_id, interview_id)
    if interview.status != STATUS_PENDING:
        raise InvalidTransition("Interview already started or completed")
    interview.status = STATUS_IN_PROGRESS
    interview.started_at = datetime.utcnow()
    db.session.commit()
    return interview.to_dict()


def _current_question_payload(interview: Interview) -> dict:
    questions = repository.questions_for(interview.id)
    index = interview.current_question_index
    current = questions[index] if index < len(questions) else None
    return {
        "question": current.to_dict() if current else None,
        "currentIndex": index,
        "totalQuestions": interview.total_questions,
        "progressPercent": index / interview.total_questions * 100,
    }


def get_current_question(user_id, interview_id) -> dict:
    return _current_question_payload(_owned_interview(user_id, interview_id))


def open_session(user_id, interview_id) -> dict:
    # First read of a pending interview starts it.
    interview = _owned_interview(user_id, interview_id)
    if interview.status == STATUS_PENDING:
        start_interview(user_id, interview_id)
    return _current_question_payload(interview)


def submit_answer(user_id, interview_id, question_id, answer, time_spent) -> dict:
    interview = _owned_interview(user_id, interview_id)
    if interview.status == STATUS_PENDING:
        raise InvalidTransition("Interview has not been started")
    if interview.status == STATUS_COMPLETED:
        raise InvalidTransition("Interview is already completed")

    if answer is None:
        answer = ""
    if not isinstance(answer, str):
        raise InvalidInput("answer must be a string")
    if isinstance(time_spent, bool) or not isinstance(time_spent, (int, float)) or time_spent < 0:
        raise InvalidInput("timeSpent must be a non-negative number")
    if isinstance(question_id, bool) or not isinstance(question_id, int):
        raise InvalidInput("questionId must be an integer")

    question = repository.get_question(question_id)
    if question is None or question.interview_id != interview.id:
        raise NotFound(f"Question {question_id} not found in interview {interview.id}")
    if repository.response_for_question(interview.id, question.id) is not None:
        raise DuplicateResponse("An answer was already submitted for this question")
    if question.order != interview.current_question_index:
        raise InvalidTransition("Only the current question can be answered")

    response = Response(
        interview_id=interview.id,
        question_id=question.id,
        user_id=interview.user_id,
        answer=answer,
        time_spent=int(time_spent),
    )
    db.session.add(response)

    next_index = interview.current_question_index + 1
    is_completed = next_index >= interview.total_questions
    interview.current_question_index = next_index
    if is_completed:
        interview.status = STATUS_COMPLETED
        interview.completed_at = datetime.utcnow()

    try:
        db.session.commit()
    except IntegrityError as exc:
        db.session.rollback()
        raise DuplicateResponse("An answer was already submitted for this question") from exc

    orchestrator = get_orchestrator()
    orchestrator.schedule_answer_evaluation(response.id)
    if is_completed:
        orchestrator.schedule_feedback_synthesis(interview.id)
        current_app.logger.info("Interview %s completed", interview.id)

    return {"isCompleted": is_completed, "nextQuestionIndex": next_index}


def get_results(user_id, interview_id) -> dict:
    interview = _owned_interview(user_id, interview_id)
    if interview.status != STATUS_COMPLETED:
        raise InvalidTransition("Interview not completed yet")

    responses = {response.question_id: response for response in repository.responses_for(interview.id)}
    results = []
    for question in repository.questions_for(interview.id):
        response = responses.get(question.id)
        results.append(
            {
                "questionId": question.id,
                "question": question.question_text,
                "questionType": question.question_type,
                "answer": response.answer if response else "",
                "score": response.score if response else None,
                "feedback": response.feedback if response else None,
                "timeSpent": response.time_spent if response else 0,
            }
        )

    label = performance_label(interview.score) if interview.score is not None else (None, None)
    return {
        "interview": interview.to_dict(),
        "results": results,
        "overallScore": interview.score,
        "overallFeedback": interview.feedback,
        "feedbackSections": split_feedback_sections(interview.feedback),
        "performanceLabel": label[0],
        "performanceTone": label[1],
    }


def retry_evaluation(user_id, interview_id) -> dict:
    interview = _owned_interview(user_id, interview_id)
    if interview.status != STATUS_COMPLETED:
        raise InvalidTransition("Interview must be completed to retry evaluation")

    orchestrator = get_orchestrator()
    requeued = 0
    for response in repository.responses_for(interview.id):
        if response.score is None:
            orchestrator.schedule_answer_evaluation(response.id)
            requeued += 1
    orchestrator.schedule_feedback_synthesis(interview.id, delay=orchestrator.retry_feedback_delay)
    current_app.logger.info("Retrying evaluation for interview %s (%d responses)", interview.id, requeued)
    return {"success": True, "requeuedEvaluations": requeued}
