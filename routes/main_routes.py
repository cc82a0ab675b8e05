# FILE: routes/main_routes.py
from flask import Blueprint, current_app, jsonify, request

from errors import InterviewError, InvalidInput
from services import interview_service
from services.ai_gateway import ai_mode_from_config


main_bp = Blueprint("main", __name__)


def _caller_id():
    # Identity is resolved upstream; the gateway forwards it in this header.
    return request.headers.get("X-User-Id", "")


def _json_body() -> dict:
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        raise InvalidInput("Request body must be a JSON object")
    return payload


@main_bp.app_errorhandler(InterviewError)
def handle_interview_error(exc: InterviewError):
    return jsonify(exc.to_dict()), exc.status_code


@main_bp.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok", "aiMode": ai_mode_from_config(current_app.config).value})


@main_bp.route("/interviews", methods=["GET"])
def list_interviews():
    return jsonify(interview_service.list_interviews(_caller_id()))


@main_bp.route("/interviews", methods=["POST"])
def create_interview():
    payload = _json_body()
    interview_id = interview_service.create_interview(
        _caller_id(),
        title=payload.get("title"),
        job_role=payload.get("jobRole"),
        company=payload.get("company"),
        difficulty=payload.get("difficulty", "intermediate"),
        total_questions=payload.get("totalQuestions", 5),
    )
    return jsonify({"interviewId": interview_id}), 201


@main_bp.route("/interviews/<int:interview_id>", methods=["GET"])
def get_interview(interview_id: int):
    return jsonify(interview_service.get_interview(_caller_id(), interview_id))


@main_bp.route("/interviews/<int:interview_id>/questions", methods=["GET"])
def get_questions(interview_id: int):
    return jsonify(interview_service.get_questions(_caller_id(), interview_id))


@main_bp.route("/interviews/<int:interview_id>/start", methods=["POST"])
def start_interview(interview_id: int):
    return jsonify(interview_service.start_interview(_caller_id(), interview_id))


@main_bp.route("/interviews/<int:interview_id>/session", methods=["GET"])
def open_session(interview_id: int):
    return jsonify(interview_service.open_session(_caller_id(), interview_id))


@main_bp.route("/interviews/<int:interview_id>/current-question", methods=["GET"])
def current_question(interview_id: int):
    return jsonify(interview_service.get_current_question(_caller_id(), interview_id))


@main_bp.route("/interviews/<int:interview_id>/answers", methods=["POST"])
def submit_answer(interview_id: int):
    payload = _json_body()
    result = interview_service.submit_answer(
        _caller_id(),
        interview_id,
        question_id=payload.get("questionId"),
        answer=payload.get("answer", ""),
        time_spent=payload.get("timeSpent", 0),
    )
    return jsonify(result)


@main_bp.route("/interviews/<int:interview_id>/results", methods=["GET"])
def get_results(interview_id: int):
    return jsonify(interview_service.get_results(_caller_id(), interview_id))


@main_bp.route("/interviews/<int:interview_id>/retry-evaluation", methods=["POST"])
def retry_evaluation(interview_id: int):
    return jsonify(interview_service.retry_evaluation(_caller_id(), interview_id))
