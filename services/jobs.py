# FILE: services/jobs.py
import random

from flask import current_app

from errors import AIMalformedResponse, EmptyResultSet
from models import STATUS_COMPLETED
from services import repository
from services.ai_gateway import AIMode
from services.evaluation_service import score_answer
from services.feedback_service import average_score, build_fallback_feedback, build_transcript, mean_score
from services.question_service import EXPECTED_ANSWERS, TIME_LIMITS, fallback_questions


GENERATE_QUESTIONS = "generate_questions"
EVALUATE_ANSWER = "evaluate_answer"
SYNTHESIZE_FEEDBACK = "synthesize_feedback"


def _fill_question_defaults(questions, difficulty: str):
    for item in questions:
        if not item.get("expectedAnswer"):
            item["expectedAnswer"] = EXPECTED_ANSWERS[item["questionType"]]
        if item.get("timeLimit") is None:
            item["timeLimit"] = TIME_LIMITS[item["questionType"]][difficulty]
    return questions


class JobOrchestrator:
    """
    Schedules and runs the three deferred interview jobs.

    Every job tries the AI path once (only when ``mode`` is enabled) and falls
    back to the deterministic algorithms on any failure, so each run ends
    with a written result. Results are always recomputed from stored rows,
    which makes overlapping runs of the same job safe.
    """

    def __init__(
        self,
        queue,
        gateway,
        mode: AIMode,
        rng: random.Random = None,
        question_pool: str = "balanced",
        feedback_delay: float = 3.0,
        retry_feedback_delay: float = 5.0,
        max_deferrals: int = 2,
    ):
        self.queue = queue
        self.gateway = gateway
        self.mode = mode
        self.rng = rng or random.Random()
        self.question_pool = question_pool
        self.feedback_delay = feedback_delay
        self.retry_feedback_delay = retry_feedback_delay
        self.max_deferrals = max_deferrals

    @classmethod
    def from_config(cls, config, queue, gateway, mode: AIMode) -> "JobOrchestrator":
        seed = config.get("QUESTION_SHUFFLE_SEED")
        return cls(
            queue=queue,
            gateway=gateway,
            mode=mode,
            rng=random.Random(seed) if seed is not None else random.Random(),
            question_pool=config.get("QUESTION_POOL", "balanced"),
            feedback_delay=config.get("FEEDBACK_DELAY_SECONDS", 3.0),
            retry_feedback_delay=config.get("RETRY_FEEDBACK_DELAY_SECONDS", 5.0),
            max_deferrals=config.get("SYNTHESIS_MAX_DEFERRALS", 2),
        )

    @property
    def ai_enabled(self) -> bool:
        return self.mode is AIMode.ENABLED

    @property
    def handlers(self):
        return {
            GENERATE_QUESTIONS: self.generate_questions,
            EVALUATE_ANSWER: self.evaluate_answer,
            SYNTHESIZE_FEEDBACK: self.synthesize_feedback,
        }

    # Scheduling

    def schedule_question_generation(self, interview_id):
        return self.queue.enqueue(GENERATE_QUESTIONS, run_after=0, interview_id=interview_id)

    def schedule_answer_evaluation(self, response_id):
        return self.queue.enqueue(EVALUATE_ANSWER, run_after=0, response_id=response_id)

    def schedule_feedback_synthesis(self, interview_id, delay: float = None, deferrals: int = 0):
        run_after = self.feedback_delay if delay is None else delay
        return self.queue.enqueue(
            SYNTHESIZE_FEEDBACK, run_after=run_after, interview_id=interview_id, deferrals=deferrals
        )

    # Jobs

    def generate_questions(self, interview_id):
        logger = current_app.logger
        interview = repository.get_interview(interview_id)
        if interview is None:
            logger.error("Interview %s not found for question generation", interview_id)
            return
        if repository.has_questions(interview.id):
            logger.info("Interview %s already has questions. Skipping generation.", interview.id)
            return

        questions = None
        if self.ai_enabled:
            try:
                questions = self.gateway.generate_questions(
                    interview.job_role, interview.difficulty, interview.total_questions
                )
            except AIMalformedResponse as exc:
                logger.warning("Gemini questions rejected for interview %s: %s", interview.id, exc)
            except Exception as exc:
                logger.exception("Gemini question generation failed: %s", exc)
        else:
            logger.warning("GEMINI_API_KEY is empty. Using fallback questions.")

        if questions is None:
            questions = fallback_questions(
                interview.job_role,
                interview.difficulty,
                interview.total_questions,
                rng=self.rng,
                pool=self.question_pool,
            )
            source = "fallback"
        else:
            source = "ai"

        count = repository.insert_questions(interview, _fill_question_defaults(questions, interview.difficulty))
        logger.info(
            "Saved %d %s questions for interview %s (%s, %s)",
            count, source, interview.id, interview.job_role, interview.difficulty,
        )

    def evaluate_answer(self, response_id):
        logger = current_app.logger
        response = repository.get_response(response_id)
        if response is None:
            logger.error("Response %s not found for evaluation", response_id)
            return
        question = repository.get_question(response.question_id)
        if question is None:
            logger.error("Question not found for evaluation: %s", response.question_id)
            return

        result = None
        if self.ai_enabled:
            try:
                result = self.gateway.evaluate_answer(
                    question.question_text, question.question_type, question.expected_answer, response.answer
                )
            except AIMalformedResponse as exc:
                logger.warning("Gemini evaluation rejected for response %s: %s", response.id, exc)
            except Exception as exc:
                logger.exception("Gemini answer evaluation failed: %s", exc)
        else:
            logger.warning("GEMINI_API_KEY is empty. Using fallback scoring.")

        if result is None:
            result = score_answer(response.answer, question.question_type)

        score, feedback = result
        repository.update_response_score(response.id, score, feedback)
        logger.info("Evaluated response %s: score %.1f", response.id, score)

    def _collect_responses(self, interview_id):
        responses = repository.responses_for(interview_id)
        if not responses:
            raise EmptyResultSet(f"No responses found for interview {interview_id}")
        return responses

    def synthesize_feedback(self, interview_id, deferrals: int = 0):
        logger = current_app.logger
        interview = repository.get_interview(interview_id)
        if interview is None:
            logger.error("Interview %s not found for feedback synthesis", interview_id)
            return
        if interview.status != STATUS_COMPLETED:
            logger.warning("Interview %s is %s; feedback is only written once completed", interview.id, interview.status)
            return
        try:
            responses = self._collect_responses(interview.id)
        except EmptyResultSet as exc:
            logger.error("%s", exc)
            return

        unscored = sum(1 for response in responses if response.score is None)
        if unscored and deferrals < self.max_deferrals:
            logger.info(
                "Interview %s has %d unscored responses. Deferring feedback (%d/%d).",
                interview.id, unscored, deferrals + 1, self.max_deferrals,
            )
            self.schedule_feedback_synthesis(interview.id, deferrals=deferrals + 1)
            return

        scores = [response.score for response in responses]
        avg = average_score(scores)
        feedback = None
        if self.ai_enabled:
            transcript = build_transcript(repository.questions_for(interview.id), responses)
            try:
                feedback = self.gateway.synthesize_feedback(transcript, avg)
            except AIMalformedResponse as exc:
                logger.warning("Gemini feedback rejected for interview %s: %s", interview.id, exc)
            except Exception as exc:
                logger.exception("Gemini feedback generation failed: %s", exc)
        else:
            logger.warning("GEMINI_API_KEY is empty. Using fallback feedback.")

        if not feedback:
            feedback = build_fallback_feedback(
                [response.answer for response in responses], mean_score(scores), interview.total_questions
            )

        repository.update_interview_score(interview.id, avg, feedback)
        logger.info("Generated feedback for interview %s: score %.1f", interview.id, avg)


def get_orchestrator() -> JobOrchestrator:
    return current_app.extensions["interview_jobs"]
