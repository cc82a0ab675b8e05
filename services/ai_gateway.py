# FILE: services/ai_gateway.py
import json
import math
from enum import Enum

from errors import AIMalformedResponse, AIUnavailable
from models import QUESTION_TYPES


class AIMode(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"


def ai_mode_from_config(config) -> AIMode:
    api_key = (config.get("GEMINI_API_KEY") or "").strip()
    return AIMode.ENABLED if api_key else AIMode.DISABLED


def _extract_response_text(response) -> str:
    # Prefer direct text field if present.
    text = (getattr(response, "text", "") or "").strip()
    if text:
        return text
    # Fallback: join candidate parts.
    candidates = getattr(response, "candidates", None) or []
    parts = []
    for candidate in candidates:
        content = getattr(candidate, "content", None)
        candidate_parts = getattr(content, "parts", None) or []
        for part in candidate_parts:
            value = getattr(part, "text", "") or ""
            if value:
                parts.append(value.strip())
    return "\n".join(parts).strip()


def _strip_code_fence(text: str) -> str:
    if "```json" in text:
        text = text.split("```json", 1)[1].split("```", 1)[0]
    elif "```" in text:
        text = text.split("```", 1)[1].split("```", 1)[0]
    return text.strip()


def _load_json(text: str):
    if not text or not text.strip():
        raise AIMalformedResponse("Empty content received")
    try:
        return json.loads(_strip_code_fence(text))
    except json.JSONDecodeError as exc:
        raise AIMalformedResponse(f"Invalid JSON: {exc}") from exc


def _is_number(value) -> bool:
    # json.loads accepts NaN and Infinity literals.
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def parse_questions_payload(text: str, total_questions: int):
    """
    Validate a generated question list.

    The whole payload is rejected when any of the first ``total_questions``
    items is invalid or there are fewer than that many; extra items are
    dropped. Returned dicts use the same keys as the fallback pools.
    """
    payload = _load_json(text)
    if not isinstance(payload, list) or not payload:
        raise AIMalformedResponse("Expected a non-empty JSON array of questions")
    if len(payload) < total_questions:
        raise AIMalformedResponse(f"Expected {total_questions} questions, got {len(payload)}")

    questions = []
    for order, item in enumerate(payload[:total_questions]):
        if not isinstance(item, dict):
            raise AIMalformedResponse(f"Question {order} is not an object")
        question_text = item.get("questionText")
        question_type = item.get("questionType")
        if not isinstance(question_text, str) or not question_text.strip():
            raise AIMalformedResponse(f"Question {order} has no questionText")
        if question_type not in QUESTION_TYPES:
            raise AIMalformedResponse(f"Question {order} has unknown questionType {question_type!r}")
        time_limit = item.get("timeLimit")
        if time_limit is not None and not _is_number(time_limit):
            raise AIMalformedResponse(f"Question {order} has non-numeric timeLimit")
        expected_answer = item.get("expectedAnswer")
        questions.append(
            {
                "questionText": question_text.strip(),
                "questionType": question_type,
                "expectedAnswer": expected_answer if isinstance(expected_answer, str) else None,
                "timeLimit": int(time_limit) if time_limit is not None else None,
                "order": order,
            }
        )
    return questions


def parse_evaluation_payload(text: str):
    payload = _load_json(text)
    if not isinstance(payload, dict):
        raise AIMalformedResponse("Expected a JSON object")
    score = payload.get("score")
    feedback = payload.get("feedback")
    if not _is_number(score):
        raise AIMalformedResponse("Evaluation score is not numeric")
    if not isinstance(feedback, str) or not feedback.strip():
        raise AIMalformedResponse("Evaluation feedback is empty")
    # Clamp regardless of what the model returned.
    return max(1.0, min(10.0, float(score))), feedback.strip()


class GeminiGateway:
    """Single-attempt, bounded calls to Gemini; every failure raises an AIError."""

    def __init__(self, api_key: str, model: str = "gemini-2.5-flash", timeout_seconds: float = 30.0):
        self.api_key = (api_key or "").strip()
        self.model = model
        self.timeout_seconds = timeout_seconds
        self._client = None

    @classmethod
    def from_config(cls, config) -> "GeminiGateway":
        return cls(
            api_key=config.get("GEMINI_API_KEY", ""),
            model=config.get("GEMINI_MODEL", "gemini-2.5-flash"),
            timeout_seconds=config.get("AI_TIMEOUT_SECONDS", 30.0),
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def _get_client(self):
        if self._client is None:
            # Lazy import so app can run without Gemini package.
            from google import genai

            self._client = genai.Client(
                api_key=self.api_key,
                http_options={"timeout": int(self.timeout_seconds * 1000)},
            )
        return self._client

    def complete(self, prompt: str, temperature: float = 0.7, json_output: bool = False) -> str:
        if not self.configured:
            raise AIUnavailable("GEMINI_API_KEY is empty")
        generation_config = {"temperature": temperature}
        if json_output:
            generation_config["response_mime_type"] = "application/json"
        try:
            response = self._get_client().models.generate_content(
                model=self.model,
                contents=prompt,
                config=generation_config,
            )
        except Exception as exc:
            raise AIUnavailable(f"Gemini call failed: {exc}") from exc
        text = _extract_response_text(response)
        if not text:
            raise AIMalformedResponse("No content generated")
        return text

    def generate_questions(self, job_role: str, difficulty: str, total_questions: int):
        prompt = f"""
Generate {total_questions} interview questions for a {difficulty} level {job_role} position.

Include a mix of:
- Technical questions (40%)
- Behavioral questions (30%)
- Situational questions (20%)
- Coding questions (10%)

For each question, provide:
1. The question text
2. Question type (technical/behavioral/situational/coding)
3. Expected answer guidelines (brief)
4. Time limit in seconds (60-300 seconds based on complexity)

Return only a JSON array with objects containing: questionText, questionType, expectedAnswer, timeLimit.
Make questions realistic and relevant to the {job_role} role.
""".strip()
        text = self.complete(prompt, temperature=0.7, json_output=True)
        return parse_questions_payload(text, total_questions)

    def evaluate_answer(self, question_text: str, question_type: str, expected_answer: str, answer: str):
        prompt = f"""
Evaluate this interview answer on a scale of 1-10 and provide constructive feedback.

Question: {question_text}
Question Type: {question_type}
Expected Answer Guidelines: {expected_answer or "General interview best practices"}

Candidate's Answer: {answer}

Provide:
1. Score (1-10)
2. Brief feedback (2-3 sentences) highlighting strengths and areas for improvement

Return only JSON: {{"score": number, "feedback": "string"}}
""".strip()
        text = self.complete(prompt, temperature=0.3, json_output=True)
        return parse_evaluation_payload(text)

    def synthesize_feedback(self, transcript, average_score: float) -> str:
        blocks = []
        for index, item in enumerate(transcript, start=1):
            score_text = f"{item['score']}/10" if item["score"] is not None else "not scored"
            blocks.append(
                f"Question {index}: {item['questionText']}\n"
                f"Answer: {item['answer']}\n"
                f"Score: {score_text}\n"
                f"Individual Feedback: {item['feedback'] or 'none'}"
            )
        joined = "\n\n".join(blocks)
        prompt = f"""
Generate overall interview feedback based on these responses:

{joined}

Average Score: {average_score:.1f}/10

Structure your feedback with these section headers, in this order:

Overall Performance Summary:
[2-3 sentence summary of overall performance and score interpretation]

Key Strengths:
• [3-4 specific strengths, with examples from the answers]

Areas for Improvement:
• [3-4 specific, constructive, actionable areas]

Recommendations for Future Interviews:
• [4-5 specific recommendations, study suggestions and practice areas]

Keep it professional, constructive, and actionable.
""".strip()
        text = self.complete(prompt, temperature=0.4)
        if not text.strip():
            raise AIMalformedResponse("No feedback received")
        return text
