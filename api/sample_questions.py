"""
api/sample_questions.py — 체험용 샘플 퀴즈와 기본 학생 계정
"""

import os

from timed_quiz.models.question_model import Option, Question, QuestionType, QuizData

_TRUE_FALSE = [Option(id="true", text="True"), Option(id="false", text="False")]

SAMPLE_QUIZ = QuizData(
    id="quiz-1",
    title="General Knowledge Quiz",
    description="Test your knowledge with MCQ and True/False questions.",
    time_limit=120,
    questions=[
        Question(
            id="q1",
            question_type=QuestionType.MCQ,
            text="Which planet is known as the Red Planet?",
            options=[
                Option(id="a", text="Venus"),
                Option(id="b", text="Mars"),
                Option(id="c", text="Jupiter"),
                Option(id="d", text="Saturn"),
            ],
            correct_answer="b",
        ),
        Question(
            id="q2",
            question_type=QuestionType.TRUE_FALSE,
            text="The Great Wall of China is visible from space with the naked eye.",
            options=_TRUE_FALSE,
            correct_answer="false",
        ),
        Question(
            id="q3",
            question_type=QuestionType.MCQ,
            text="What is the chemical symbol for gold?",
            options=[
                Option(id="a", text="Go"),
                Option(id="b", text="Gd"),
                Option(id="c", text="Au"),
                Option(id="d", text="Ag"),
            ],
            correct_answer="c",
        ),
        Question(
            id="q4",
            question_type=QuestionType.TRUE_FALSE,
            text="JavaScript was originally called LiveScript.",
            options=_TRUE_FALSE,
            correct_answer="true",
        ),
        Question(
            id="q5",
            question_type=QuestionType.MCQ,
            text="Which data structure uses FIFO (First In, First Out)?",
            options=[
                Option(id="a", text="Stack"),
                Option(id="b", text="Queue"),
                Option(id="c", text="Tree"),
                Option(id="d", text="Graph"),
            ],
            correct_answer="b",
        ),
        Question(
            id="q6",
            question_type=QuestionType.SHORT_ANSWER,
            text="What keyword defines a function in Python?",
            correct_answer="def",
        ),
    ],
)

SAMPLE_STUDENT_EMAIL = os.getenv("SAMPLE_STUDENT_EMAIL", "student@example.com")
SAMPLE_STUDENT_PASSWORD = os.getenv("SAMPLE_STUDENT_PASSWORD", "student1234")
SAMPLE_STUDENT_NAME = "Sample Student"
