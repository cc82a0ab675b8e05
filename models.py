# FILE: models.py
from datetime import datetime
from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()

DIFFICULTIES = ("beginner", "intermediate", "advanced")
QUESTION_TYPES = ("technical", "behavioral", "situational", "coding")

STATUS_PENDING = "pending"
STATUS_IN_PROGRESS = "in_progress"
STATUS_COMPLETED = "completed"


def _timestamp(value):
    return value.isoformat() if value else None


class Interview(db.Model):
    __tablename__ = "interviews"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(64), nullable=False, index=True)
    title = db.Column(db.String(200), nullable=False)
    job_role = db.Column(db.String(120), nullable=False)
    company = db.Column(db.String(120), nullable=True)
    difficulty = db.Column(db.String(20), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING)
    total_questions = db.Column(db.Integer, nullable=False)
    current_question_index = db.Column(db.Integer, nullable=False, default=0)
    score = db.Column(db.Float, nullable=True)
    feedback = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    started_at = db.Column(db.DateTime, nullable=True)
    completed_at = db.Column(db.DateTime, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "title": self.title,
            "jobRole": self.job_role,
            "company": self.company,
            "difficulty": self.difficulty,
            "status": self.status,
            "totalQuestions": self.total_questions,
            "currentQuestionIndex": self.current_question_index,
            "score": self.score,
            "feedback": self.feedback,
            "createdAt": _timestamp(self.created_at),
            "startedAt": _timestamp(self.started_at),
            "completedAt": _timestamp(self.completed_at),
        }


class Question(db.Model):
    __tablename__ = "questions"
    __table_args__ = (db.UniqueConstraint("interview_id", "order", name="uq_question_order"),)

    id = db.Column(db.Integer, primary_key=True)
    interview_id = db.Column(db.Integer, db.ForeignKey("interviews.id"), nullable=False, index=True)
    question_text = db.Column(db.Text, nullable=False)
    question_type = db.Column(db.String(20), nullable=False)
    difficulty = db.Column(db.String(20), nullable=False)
    order = db.Column(db.Integer, nullable=False)
    expected_answer = db.Column(db.Text, nullable=True)
    time_limit = db.Column(db.Integer, nullable=True)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "interviewId": self.interview_id,
            "questionText": self.question_text,
            "questionType": self.question_type,
            "difficulty": self.difficulty,
            "order": self.order,
            "expectedAnswer": self.expected_answer,
            "timeLimit": self.time_limit,
        }


class Response(db.Model):
    __tablename__ = "responses"
    __table_args__ = (db.UniqueConstraint("interview_id", "question_id", name="uq_response_question"),)

    id = db.Column(db.Integer, primary_key=True)
    interview_id = db.Column(db.Integer, db.ForeignKey("interviews.id"), nullable=False, index=True)
    question_id = db.Column(db.Integer, db.ForeignKey("questions.id"), nullable=False, index=True)
    user_id = db.Column(db.String(64), nullable=False)
    answer = db.Column(db.Text, nullable=False)
    time_spent = db.Column(db.Integer, nullable=False, default=0)
    score = db.Column(db.Float, nullable=True)
    feedback = db.Column(db.Text, nullable=True)
    submitted_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "interviewId": self.interview_id,
            "questionId": self.question_id,
            "answer": self.answer,
            "timeSpent": self.time_spent,
            "score": self.score,
            "feedback": self.feedback,
            "submittedAt": _timestamp(self.submitted_at),
        }
