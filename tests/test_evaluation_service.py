import pytest

from services.evaluation_service import (
    ADD_EXAMPLES_FEEDBACK,
    FEEDBACK_TEMPLATES,
    NO_ANSWER_FEEDBACK,
    QUANTIFY_FEEDBACK,
    calculate_fallback_score,
    generate_fallback_feedback,
    score_answer,
)


QUESTION_TYPES = ("technical", "behavioral", "situational", "coding")

SAMPLE_ANSWERS = [
    "Yes.",
    "I build APIs.",
    "I would approach it by talking to the team.",
    "For example, in one situation our team cut costs by 3 percent. " + " ".join(["detail"] * 48) + ".",
    " ".join(["word"] * 200),
    "I implement efficient code! The complexity is O(n log n). For instance, 42 tests passed.",
]


def words(count: int, token: str = "word") -> str:
    return " ".join([token] * count)


@pytest.mark.parametrize("answer", ["", "   ", "\n\t", "No answer provided", "No answer provided (time limit exceeded)."])
@pytest.mark.parametrize("question_type", QUESTION_TYPES)
def test_blank_answers_score_one(answer, question_type):
    assert calculate_fallback_score(answer, question_type) == 1.0
    assert generate_fallback_feedback(answer, question_type) == NO_ANSWER_FEEDBACK


@pytest.mark.parametrize("answer", SAMPLE_ANSWERS)
@pytest.mark.parametrize("question_type", QUESTION_TYPES + ("unknown",))
def test_score_is_bounded_and_deterministic(answer, question_type):
    first = calculate_fallback_score(answer, question_type)
    assert 1.0 <= first <= 10.0
    assert first == calculate_fallback_score(answer, question_type)
    assert round(first, 1) == first


def test_short_technical_answer_is_penalised():
    # base 2, action verb +1, under 40 words -1
    assert calculate_fallback_score("I build APIs.", "technical") == 2.0


def test_short_situational_answer():
    # base 2, "would" +0.5, under 40 words -0.5
    assert calculate_fallback_score("I would approach it by talking to the team.", "situational") == 2.0


def test_detailed_behavioral_answer_collects_bonuses():
    answer = "For example, in one situation our team cut costs by 3 percent. " + words(48, "detail") + "."
    # base 6, exemplar +1, situation +1, digit +0.5, exemplar +0.5, digit +0.3, two sentences +0.2
    assert calculate_fallback_score(answer, "behavioral") == 9.5


def test_task_and_action_count_as_structure():
    answer = "My task was clear and the action I took fixed it. " + words(60, "detail")
    without = "My job was clear and what I did fixed it. " + words(60, "detail")
    assert calculate_fallback_score(answer, "behavioral") - calculate_fallback_score(without, "behavioral") == pytest.approx(1.0)


def test_coding_answer_is_clamped_at_ten():
    answer = "I implement an efficient solution. The complexity is linear in 1 pass. " + words(200)
    assert calculate_fallback_score(answer, "coding") == 10.0


def test_coding_ignores_exemplar_bonus():
    plain = words(100)
    with_example = "example " + words(99)
    assert calculate_fallback_score(plain, "coding") == calculate_fallback_score(with_example, "coding")
    assert calculate_fallback_score(with_example, "technical") > calculate_fallback_score(plain, "technical")


def test_unknown_type_uses_generic_adjustments_only():
    assert calculate_fallback_score(words(35), "unknown") == 6.0
    assert calculate_fallback_score(words(35) + " 7", "unknown") == 6.3


@pytest.mark.parametrize(
    "count,bucket",
    [(1, "short"), (19, "short"), (20, "medium"), (49, "medium"), (50, "long"), (300, "long")],
)
def test_feedback_bucket_boundaries(count, bucket):
    feedback = generate_fallback_feedback(words(count), "coding")
    assert feedback == FEEDBACK_TEMPLATES["coding"][bucket]


def test_technical_feedback_asks_for_numbers_not_examples():
    feedback = generate_fallback_feedback(words(10), "technical")
    assert feedback.startswith(FEEDBACK_TEMPLATES["technical"]["short"])
    assert feedback.endswith(QUANTIFY_FEEDBACK)
    assert ADD_EXAMPLES_FEEDBACK not in feedback


def test_situational_feedback_asks_for_examples_not_numbers():
    feedback = generate_fallback_feedback(words(30), "situational")
    assert feedback == FEEDBACK_TEMPLATES["situational"]["medium"] + ADD_EXAMPLES_FEEDBACK


def test_behavioral_feedback_without_examples_or_numbers_gets_both():
    feedback = generate_fallback_feedback(words(30), "behavioral")
    assert feedback == FEEDBACK_TEMPLATES["behavioral"]["medium"] + ADD_EXAMPLES_FEEDBACK + QUANTIFY_FEEDBACK


def test_complete_behavioral_answer_gets_plain_template():
    answer = "For example, we grew revenue 20 percent. " + words(60)
    assert generate_fallback_feedback(answer, "behavioral") == FEEDBACK_TEMPLATES["behavioral"]["long"]


def test_experience_counts_as_exemplar():
    feedback = generate_fallback_feedback("In my experience " + words(30), "situational")
    assert ADD_EXAMPLES_FEEDBACK not in feedback


def test_score_answer_pairs_score_and_feedback():
    score, feedback = score_answer("I build APIs.", "technical")
    assert score == calculate_fallback_score("I build APIs.", "technical")
    assert feedback == generate_fallback_feedback("I build APIs.", "technical")
