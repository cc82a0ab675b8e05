# FILE: services/evaluation_service.py
import math
import re


ACTION_VERBS = re.compile(r"\b(implement|develop|design|manage|lead|create|build|analyze|optimize|solve)\b")
EXEMPLAR_CUES = ("example", "instance", "time when", "experience")
SENTENCE_SPLIT = re.compile(r"[.!?]+")
PLACEHOLDER_ANSWERS = {
    "no answer provided",
    "no answer provided (time limit exceeded).",
}

NO_ANSWER_FEEDBACK = (
    "No answer was provided for this question. Consider taking time to think through your response "
    "and provide specific examples or explanations that demonstrate your knowledge and experience."
)
ADD_EXAMPLES_FEEDBACK = (
    " Remember to include specific examples from your experience to make your answers more credible "
    "and memorable."
)
QUANTIFY_FEEDBACK = (
    " When possible, include metrics, percentages, or timeframes to quantify your impact and achievements."
)

# (question_type, bucket) -> paragraph. Buckets: short (<20 words), medium (<50), long.
FEEDBACK_TEMPLATES = {
    "technical": {
        "short": (
            "Your technical answer needs more depth. Consider explaining the concept step-by-step, "
            "mentioning specific technologies or methodologies you've used, and providing concrete "
            "examples from your experience."
        ),
        "medium": (
            "Good start on the technical explanation. To strengthen your answer, add more specific details "
            "about implementation, challenges you've faced, and how you solved them. Mention relevant tools "
            "or frameworks."
        ),
        "long": (
            "Solid technical response with good detail. Make sure each claim is backed by a concrete "
            "technique or tool, and include metrics or outcomes when possible."
        ),
    },
    "behavioral": {
        "short": (
            "Behavioral questions require specific examples. Use the STAR method (Situation, Task, Action, "
            "Result) to structure your response. Describe a real situation, what you did, and what the "
            "outcome was."
        ),
        "medium": (
            "Your answer has a good foundation. To improve, provide more context about the situation, "
            "explain your specific actions and decision-making process, and quantify the results when "
            "possible."
        ),
        "long": (
            "Well-structured behavioral response. Strong answers also include lessons learned and how "
            "you'd apply this experience in future situations."
        ),
    },
    "situational": {
        "short": (
            "Situational questions need detailed problem-solving approaches. Explain how you would assess "
            "the situation, what steps you'd take, who you'd involve, and how you'd measure success."
        ),
        "medium": (
            "Good approach to the scenario. Enhance your answer by explaining your reasoning, discussing "
            "potential challenges, and describing how you'd adapt if your initial approach didn't work."
        ),
        "long": (
            "Comprehensive situational response. Excellent situational answers also address risk "
            "management and stakeholder communication."
        ),
    },
    "coding": {
        "short": (
            "Coding questions require clear problem-solving logic. Explain your approach, walk through your "
            "solution step-by-step, mention time/space complexity, and discuss alternative approaches or "
            "optimizations."
        ),
        "medium": (
            "Good start on the coding solution. Strengthen your answer by explaining edge cases, discussing "
            "algorithm efficiency, and mentioning how you would test your solution."
        ),
        "long": (
            "Detailed coding response. Strong coding answers also state time/space complexity, cover error "
            "handling and mention potential optimizations."
        ),
    },
}
DEFAULT_TEMPLATES = {
    "short": (
        "Your answer needs more elaboration. Provide specific examples, explain your reasoning, and connect "
        "your response to relevant experience or knowledge."
    ),
    "medium": (
        "Solid response with good detail. Consider adding more specific examples and quantifiable results "
        "to make your answer even more compelling."
    ),
}
DEFAULT_TEMPLATES["long"] = DEFAULT_TEMPLATES["medium"]


def _is_blank(answer: str) -> bool:
    normalized = (answer or "").strip().lower()
    return not normalized or normalized in PLACEHOLDER_ANSWERS


def _word_count(answer: str) -> int:
    return len(answer.split())


def _has_exemplar(lowered: str) -> bool:
    return any(cue in lowered for cue in EXEMPLAR_CUES)


def _has_digit(answer: str) -> bool:
    return any(ch.isdigit() for ch in answer)


def _sentence_count(answer: str) -> int:
    return len([part for part in SENTENCE_SPLIT.split(answer) if part.strip()])


def _round_one_decimal(value: float) -> float:
    # Half-up rounding; round() would apply banker's rounding.
    return math.floor(value * 10 + 0.5) / 10


def _bucket(word_count: int) -> str:
    if word_count < 20:
        return "short"
    if word_count < 50:
        return "medium"
    return "long"


def calculate_fallback_score(answer: str, question_type: str) -> float:
    if _is_blank(answer):
        return 1.0

    lowered = answer.lower()
    words = _word_count(answer)
    has_exemplar = _has_exemplar(lowered)
    has_digit = _has_digit(answer)
    has_action_verb = ACTION_VERBS.search(lowered) is not None

    if words < 10:
        score = 2.0
    elif words < 30:
        score = 4.0
    elif words < 80:
        score = 6.0
    elif words < 150:
        score = 7.0
    else:
        score = 8.0

    if question_type == "technical":
        if has_action_verb:
            score += 1
        if has_digit:
            score += 0.5
        if words < 40:
            score -= 1
    elif question_type == "behavioral":
        if has_exemplar:
            score += 1
        if "situation" in lowered or ("task" in lowered and "action" in lowered):
            score += 1
        if has_digit:
            score += 0.5
        if words < 50:
            score -= 1
    elif question_type == "situational":
        if has_action_verb:
            score += 0.5
        if "would" in lowered or "approach" in lowered:
            score += 0.5
        if words < 40:
            score -= 0.5
    elif question_type == "coding":
        if has_action_verb:
            score += 1
        if "complexity" in lowered or "efficient" in lowered:
            score += 1
        if words < 30:
            score -= 1

    if has_exemplar and question_type != "coding":
        score += 0.5
    if has_digit:
        score += 0.3
    if _sentence_count(answer) > 1:
        score += 0.2

    return max(1.0, min(10.0, _round_one_decimal(score)))


def generate_fallback_feedback(answer: str, question_type: str) -> str:
    if _is_blank(answer):
        return NO_ANSWER_FEEDBACK

    lowered = answer.lower()
    templates = FEEDBACK_TEMPLATES.get(question_type, DEFAULT_TEMPLATES)
    feedback = templates[_bucket(_word_count(answer))]

    if not _has_exemplar(lowered) and question_type not in {"technical", "coding"}:
        feedback += ADD_EXAMPLES_FEEDBACK
    if not _has_digit(answer) and question_type in {"technical", "behavioral"}:
        feedback += QUANTIFY_FEEDBACK
    return feedback


def score_answer(answer: str, question_type: str):
    # Deterministic fallback for the EvaluateAnswer job.
    return calculate_fallback_score(answer, question_type), generate_fallback_feedback(answer, question_type)
