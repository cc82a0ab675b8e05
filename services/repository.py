# FILE: services/repository.py
from models import Interview, Question, Response, db


def get_interview(interview_id):
    return db.session.get(Interview, interview_id)


def get_question(question_id):
    return db.session.get(Question, question_id)


def get_response(response_id):
    return db.session.get(Response, response_id)


def interviews_for_user(user_id: str):
    return (
        Interview.query.filter_by(user_id=user_id)
        .order_by(Interview.created_at.desc(), Interview.id.desc())
        .all()
    )


def questions_for(interview_id):
    return Question.query.filter_by(interview_id=interview_id).order_by(Question.order.asc()).all()


def responses_for(interview_id):
    return Response.query.filter_by(interview_id=interview_id).order_by(Response.id.asc()).all()


def response_for_question(interview_id, question_id):
    return Response.query.filter_by(interview_id=interview_id, question_id=question_id).first()


def has_questions(interview_id) -> bool:
    return Question.query.filter_by(interview_id=interview_id).first() is not None


def insert_questions(interview: Interview, questions) -> int:
    # One commit for the whole set.
    for item in questions:
        db.session.add(
            Question(
                interview_id=interview.id,
                question_text=item["questionText"],
                question_type=item["questionType"],
                difficulty=interview.difficulty,
                order=item["order"],
                expected_answer=item.get("expectedAnswer"),
                time_limit=item.get("timeLimit"),
            )
        )
    db.session.commit()
    return len(questions)


def update_response_score(response_id, score: float, feedback: str) -> bool:
    response = get_response(response_id)
    if response is None:
        return False
    response.score = score
    response.feedback = feedback
    db.session.commit()
    return True


def update_interview_score(interview_id, score: float, feedback: str) -> bool:
    interview = get_interview(interview_id)
    if interview is None:
        return False
    interview.score = score
    interview.feedback = feedback
    db.session.commit()
    return True
