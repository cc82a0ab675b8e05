# FILE: services/feedback_service.py
import math

from services.evaluation_service import PLACEHOLDER_ANSWERS


SECTION_TITLES = (
    "Overall Performance Summary",
    "Key Strengths",
    "Areas for Improvement",
    "Recommendations for Future Interviews",
)


def _round_half_up(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def mean_score(scores) -> float:
    # Unset or non-positive scores are ignored; nothing scored defaults to 5.0.
    valid = [score for score in scores if score is not None and score > 0]
    if not valid:
        return 5.0
    return sum(valid) / len(valid)


def average_score(scores) -> float:
    # Stored and displayed value; thresholds use mean_score.
    return _round_half_up(mean_score(scores))


def _is_answered(answer: str) -> bool:
    normalized = (answer or "").strip().lower()
    return bool(normalized) and normalized not in PLACEHOLDER_ANSWERS


def _word_count(answer: str) -> int:
    return len((answer or "").split())


def performance_label(avg_score: float):
    if avg_score >= 8:
        return "Excellent", "excellent"
    if avg_score >= 6:
        return "Good", "good"
    if avg_score >= 4:
        return "Average", "average"
    return "Needs Improvement", "needs-improvement"


def _summary_line(avg_score: float) -> str:
    shown = f"{_round_half_up(avg_score):.1f}/10"
    if avg_score >= 8:
        return (
            f"Outstanding Performance: You demonstrated excellent knowledge and communication skills throughout "
            f"the interview with an overall score of {shown}. Your responses showed depth, clarity, and strong "
            f"professional experience."
        )
    if avg_score >= 6:
        return (
            f"Good Performance: You showed solid understanding and provided thoughtful responses with an overall "
            f"score of {shown}. Your answers demonstrate competence and good communication skills."
        )
    if avg_score >= 4:
        return (
            f"Developing Performance: You have a foundation to build upon with an overall score of {shown}. "
            f"There are clear opportunities to strengthen your interview responses."
        )
    return (
        f"Areas for Growth: There are significant opportunities to strengthen your interview skills with an "
        f"overall score of {shown}. Focus on preparation and practice will help improve your performance."
    )


def build_fallback_feedback(answers, avg_score: float, total_questions: int) -> str:
    """
    Four-section feedback document built from thresholds only.

    ``answers`` is the list of submitted answer texts; ``avg_score`` is the
    unrounded mean and ``total_questions`` the interview's question count.
    """
    total = total_questions
    answered = sum(1 for answer in answers if _is_answered(answer))
    comprehensive = sum(1 for answer in answers if _word_count(answer) > 50)
    short = sum(1 for answer in answers if answer and _word_count(answer) < 20)

    strengths = []
    if answered == total:
        strengths.append(f"Excellent completion rate - you addressed all {total} questions")
    else:
        strengths.append(f"Attempted {answered} out of {total} questions")
    if avg_score >= 7:
        strengths.append("Strong communication and articulation skills")
        strengths.append("Good depth in your responses")
    elif avg_score >= 5:
        strengths.append("Clear effort to provide detailed responses")
        strengths.append("Basic understanding of interview expectations")
    if comprehensive > 0:
        strengths.append(f"Provided comprehensive answers for {comprehensive} questions")

    improvements = []
    if answered < total:
        improvements.append(f"Complete all questions - {total - answered} questions were left unanswered")
    if avg_score < 6:
        improvements.append("Provide more specific examples and details in your responses")
        improvements.append("Practice articulating your thoughts more clearly")
    if short > total / 2:
        improvements.append("Expand your answers with more detail and examples")

    recommendations = [
        "Prepare specific examples from your experience using the STAR method",
        "Practice common interview questions for your field",
        "Research the company and role thoroughly before interviews",
    ]
    if avg_score < 7:
        recommendations.append("Work on structuring your answers more clearly")
        recommendations.append("Practice explaining complex concepts in simple terms")
    recommendations.append("Continue practicing mock interviews to build confidence")

    lines = [f"{SECTION_TITLES[0]}:", _summary_line(avg_score), ""]
    for title, bullets in zip(SECTION_TITLES[1:], (strengths, improvements, recommendations)):
        lines.append(f"{title}:")
        lines.extend(f"• {bullet}" for bullet in bullets)
        lines.append("")
    lines.append(
        "Remember: Interview skills improve with practice. Keep working on your responses and you'll see "
        "continued improvement. Good luck with your job search!"
    )
    return "\n".join(lines)


def build_transcript(questions, responses):
    """Pair responses with their questions in presentation order."""
    by_question = {response.question_id: response for response in responses}
    transcript = []
    for question in sorted(questions, key=lambda q: q.order):
        response = by_question.get(question.id)
        if response is None:
            continue
        transcript.append(
            {
                "questionText": question.question_text,
                "questionType": question.question_type,
                "answer": response.answer,
                "score": response.score,
                "feedback": response.feedback,
            }
        )
    return transcript


def _match_section(line: str):
    lowered = line.lower()
    if "overall performance" in lowered or "performance summary" in lowered:
        return SECTION_TITLES[0]
    if "strength" in lowered:
        return SECTION_TITLES[1]
    if "improvement" in lowered:
        return SECTION_TITLES[2]
    if "recommendation" in lowered or "future interviews" in lowered:
        return SECTION_TITLES[3]
    return None


def split_feedback_sections(feedback: str):
    # Display helper only: never raises, never changes the stored text.
    if not feedback or not feedback.strip():
        return []

    sections = []
    current = None
    for raw_line in feedback.splitlines():
        line = raw_line.strip().strip("#*").strip()
        if not line:
            continue
        is_bullet = line.startswith(("•", "-"))
        title = _match_section(line) if len(line) <= 60 and not is_bullet else None
        if title:
            current = {"title": title, "content": []}
            sections.append(current)
            remainder = line.split(":", 1)[1].strip() if ":" in line else ""
            if remainder:
                current["content"].append(remainder)
            continue
        if current is None:
            current = {"title": "Overall Feedback", "content": []}
            sections.append(current)
        current["content"].append(line)

    return [{"title": section["title"], "content": "\n".join(section["content"])} for section in sections]
