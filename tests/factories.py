"""Shared request bodies for the test suite."""

API = "/api/v1"
PASSWORD = "correct-horse-1"

SAMPLE_EXAM = {
    "title": "Algebra basics",
    "description": "Warm-up quiz",
    "duration_minutes": 30,
    "category": "math",
    "questions": [
        {
            "question_id": "q1",
            "text": "What is 2 + 2?",
            "type": "single_choice",
            "points": 1,
            "options": [
                {"option_id": "o1", "text": "4", "is_correct": True},
                {"option_id": "o2", "text": "5"},
            ],
        },
        {
            "question_id": "q2",
            "text": "Which numbers are prime?",
            "type": "multiple_choice",
            "points": 1,
            "options": [
                {"option_id": "o3", "text": "2", "is_correct": True},
                {"option_id": "o4", "text": "3", "is_correct": True},
                {"option_id": "o5", "text": "4"},
            ],
        },
    ],
}
