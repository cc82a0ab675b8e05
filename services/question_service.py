# FILE: services/question_service.py
import math
import random


QUESTION_POOLS = {
    "behavioral": [
        "Tell me about yourself and your background.",
        "What interests you about this role?",
        "What are your greatest strengths and weaknesses?",
        "Describe a time when you had to work with a difficult team member.",
        "Tell me about a time you made a mistake and how you handled it.",
        "What motivates you in your work?",
        "How do you handle criticism or feedback?",
        "Describe your ideal work environment.",
        "Where do you see yourself in 5 years?",
        "Why are you leaving your current position?",
        "What accomplishment are you most proud of?",
        "How do you prioritize your work when you have multiple deadlines?",
    ],
    "situational": [
        "Describe a challenging project you worked on recently.",
        "How do you handle working under pressure?",
        "Tell me about a time you had to learn something new quickly.",
        "Describe a situation where you had to work with limited resources.",
        "How would you handle a conflict with a colleague?",
        "Tell me about a time you had to make a difficult decision.",
        "Describe a situation where you had to adapt to change.",
        "How do you handle multiple competing priorities?",
        "Tell me about a time you had to persuade someone to see your point of view.",
        "Describe a situation where you exceeded expectations.",
        "How would you approach a project with unclear requirements?",
        "Tell me about a time you had to work with someone from a different background.",
    ],
    "coding": [
        "Write a function to reverse a string without using built-in methods.",
        "How would you find the largest element in an array?",
        "Explain how you would implement a simple caching mechanism.",
        "Write pseudocode for a function that checks if a string is a palindrome.",
        "How would you approach sorting an array of objects by a specific property?",
        "Describe how you would implement a basic search functionality.",
        "Write a function to remove duplicates from an array.",
        "How would you validate user input in a form?",
        "Explain how you would implement pagination for a large dataset.",
        "Describe your approach to handling errors in your code.",
    ],
}

TECHNICAL_POOLS = {
    "software": [
        "Explain the difference between synchronous and asynchronous programming.",
        "What is the difference between SQL and NoSQL databases?",
        "How do you ensure code quality in your projects?",
        "Explain the concept of version control and its importance.",
        "What are the key principles of object-oriented programming?",
        "How do you approach debugging complex issues?",
        "What is the importance of testing in software development?",
        "Explain the concept of API design and best practices.",
        "How do you handle security considerations in your applications?",
        "What are the benefits of using design patterns?",
    ],
    "marketing": [
        "How do you measure the success of a marketing campaign?",
        "Explain the difference between B2B and B2C marketing strategies.",
        "What role does data analytics play in modern marketing?",
        "How do you approach customer segmentation?",
        "What are the key components of a successful content strategy?",
        "How do you stay current with marketing trends and tools?",
        "Explain the customer journey and how to optimize it.",
        "What metrics do you consider most important for digital marketing?",
        "How do you approach A/B testing for marketing campaigns?",
        "What is the role of social media in modern marketing?",
    ],
    "sales": [
        "How do you approach qualifying leads?",
        "Describe your sales process from prospect to close.",
        "How do you handle objections from potential customers?",
        "What tools do you use to track and manage your sales pipeline?",
        "How do you build rapport with new prospects?",
        "What strategies do you use to overcome price objections?",
        "How do you stay motivated during slow periods?",
        "Describe your approach to following up with prospects.",
        "How do you identify customer pain points?",
        "What role does social selling play in your strategy?",
    ],
    "general": [
        "How do you stay updated with industry trends?",
        "What tools and technologies are you familiar with?",
        "How do you approach problem-solving in your field?",
        "What professional development have you pursued recently?",
        "How do you measure success in your role?",
        "What industry challenges are you most interested in solving?",
        "How do you collaborate with other departments?",
        "What best practices do you follow in your work?",
        "How do you ensure quality in your deliverables?",
        "What emerging trends excite you most about your field?",
    ],
}

# Checked in order; first match wins.
ROLE_KEYWORDS = (
    ("software", ("developer", "engineer", "programmer")),
    ("marketing", ("marketing", "digital")),
    ("sales", ("sales", "account")),
)

TIME_LIMITS = {
    "behavioral": {"beginner": 90, "intermediate": 120, "advanced": 150},
    "technical": {"beginner": 120, "intermediate": 150, "advanced": 180},
    "situational": {"beginner": 120, "intermediate": 180, "advanced": 240},
    "coding": {"beginner": 180, "intermediate": 240, "advanced": 300},
}

EXPECTED_ANSWERS = {
    "technical": "Demonstrate technical knowledge and problem-solving approach",
    "behavioral": "Provide specific examples and demonstrate soft skills",
    "situational": "Use STAR method (Situation, Task, Action, Result)",
    "coding": "Write clean, working code with good logic",
}

DEFAULT_QUESTIONS = [
    {
        "questionText": "Tell me about yourself and your background.",
        "questionType": "behavioral",
        "timeLimit": 120,
        "expectedAnswer": "Professional background, relevant experience, career goals",
    },
    {
        "questionText": "What interests you about this role?",
        "questionType": "behavioral",
        "timeLimit": 90,
        "expectedAnswer": "Specific aspects of the role, company alignment, growth opportunities",
    },
    {
        "questionText": "Describe a challenging project you worked on recently.",
        "questionType": "situational",
        "timeLimit": 180,
        "expectedAnswer": "Project details, challenges faced, solutions implemented, outcomes",
    },
    {
        "questionText": "What are your greatest strengths and weaknesses?",
        "questionType": "behavioral",
        "timeLimit": 120,
        "expectedAnswer": "Honest self-assessment with examples and improvement plans",
    },
    {
        "questionText": "How do you handle working under pressure?",
        "questionType": "situational",
        "timeLimit": 90,
        "expectedAnswer": "Specific strategies, examples, stress management techniques",
    },
]


def technical_pool_key(job_role: str) -> str:
    role = (job_role or "").lower()
    for key, keywords in ROLE_KEYWORDS:
        if any(keyword in role for keyword in keywords):
            return key
    return "general"


def category_quotas(total_questions: int) -> dict:
    quotas = {
        "technical": math.ceil(total_questions * 0.4),
        "behavioral": math.ceil(total_questions * 0.3),
        "situational": math.ceil(total_questions * 0.2),
        "coding": max(1, math.floor(total_questions * 0.1)),
    }
    overflow = sum(quotas.values()) - total_questions
    if overflow > 0:
        quotas["coding"] = max(0, quotas["coding"] - overflow)
    return quotas


def _shuffled(items, rng: random.Random):
    return rng.sample(list(items), len(items))


def build_question_set(job_role: str, difficulty: str, total_questions: int, rng: random.Random = None):
    """
    Category-balanced question set drawn from the fixed pools.

    Each category pool is shuffled on its own and sliced to its quota, so a
    question never repeats. The mix is shuffled again and truncated to
    ``total_questions``; ``order`` follows the final sequence.
    """
    rng = rng or random.Random()
    pools = dict(QUESTION_POOLS)
    pools["technical"] = TECHNICAL_POOLS[technical_pool_key(job_role)]

    mix = []
    for question_type, quota in category_quotas(total_questions).items():
        if quota <= 0:
            continue
        for text in _shuffled(pools[question_type], rng)[:quota]:
            mix.append(
                {
                    "questionText": text,
                    "questionType": question_type,
                    "expectedAnswer": EXPECTED_ANSWERS[question_type],
                    "timeLimit": TIME_LIMITS[question_type][difficulty],
                }
            )

    selected = _shuffled(mix, rng)[:total_questions]
    for order, question in enumerate(selected):
        question["order"] = order
    return selected


def default_questions(total_questions: int):
    # Unrandomized; at most len(DEFAULT_QUESTIONS) entries.
    selected = [dict(item) for item in DEFAULT_QUESTIONS[:total_questions]]
    for order, question in enumerate(selected):
        question["order"] = order
    return selected


def fallback_questions(job_role: str, difficulty: str, total_questions: int, rng: random.Random = None, pool: str = "balanced"):
    # The default pool only serves interviews it can fill completely.
    if pool == "default" and total_questions <= len(DEFAULT_QUESTIONS):
        return default_questions(total_questions)
    return build_question_set(job_role, difficulty, total_questions, rng=rng)
