from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Tuple, Union


QuestionRef = Union[int, str]


@dataclass(frozen=True)
class Question:
    id: str
    text: str
    options: Tuple[str, ...]

    def to_dict(self):
        return {
            'id': self.id,
            'question': self.text,
            'options': list(self.options),
        }


@dataclass(frozen=True)
class AnswerKey:
    question_id: str
    correct_option: str
    description: str = ''

    def to_dict(self):
        data = {
            'question_id': self.question_id,
            'answer': self.correct_option,
        }
        if self.description:
            data['description'] = self.description
        return data


@dataclass(frozen=True)
class Profile:
    """A non-overlapping slice of the question ID space, e.g. CRD0001..CRD0016."""
    name: str
    prefix: str
    size: int
    aliases: Tuple[str, ...] = ()

    def question_id(self, ordinal: int) -> str:
        return f"{self.prefix}{ordinal:04d}"

    def question_ids(self) -> List[str]:
        return [self.question_id(n) for n in range(1, self.size + 1)]

    def to_dict(self):
        return {
            'name': self.name,
            'prefix': self.prefix,
            'size': self.size,
            'aliases': list(self.aliases),
        }


@dataclass
class Submission:
    question_ids: List[QuestionRef]
    answers: List[str]

    def to_dict(self):
        return {
            'questionIds': list(self.question_ids),
            'userAnswers': list(self.answers),
        }


@dataclass
class Session:
    user_email: str
    session_id: str
    created_at: Optional[datetime] = None
    submissions: List[Submission] = field(default_factory=list)

    @property
    def key(self) -> Tuple[str, str]:
        return (self.user_email, self.session_id)

    def to_dict(self, include_submissions=True):
        data = {
            'userEmail': self.user_email,
            'sessionId': self.session_id,
            'createdAt': self.created_at.isoformat() if self.created_at else None,
        }
        if include_submissions:
            data['submissions'] = [s.to_dict() for s in self.submissions]
        return data


@dataclass(frozen=True)
class ItemResult:
    question_id: str
    user_answer: str
    correct_answer: str
    is_correct: bool
    description: str = ''

    def to_dict(self):
        data = {
            'questionId': self.question_id,
            'userAnswer': self.user_answer,
            'correctAnswer': self.correct_answer,
            'isCorrect': self.is_correct,
        }
        if self.description:
            data['description'] = self.description
        return data


@dataclass(frozen=True)
class EvaluationResult:
    items: Tuple[ItemResult, ...]
    total: int
    correct_count: int
    incorrect_count: int
    score_percentage: float

    def to_dict(self):
        return {
            'totalQuestions': self.total,
            'correctAnswers': self.correct_count,
            'incorrectAnswers': self.incorrect_count,
            'scorePercentage': self.score_percentage,
            'results': [item.to_dict() for item in self.items],
        }
