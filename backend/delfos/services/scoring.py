from typing import Sequence

from delfos.errors import InvalidInput
from delfos.models import EvaluationResult, ItemResult, QuestionRef
from delfos.services.bank import QuestionBank


def evaluate(question_ids: Sequence[QuestionRef], user_answers: Sequence[str], bank: QuestionBank) -> EvaluationResult:
    """Grade a batch of answers against the bank's answer keys.

    Every item gets a result: a question the bank does not know is graded
    incorrect with an empty correct answer. Nothing is persisted here.
    """
    if not question_ids or not user_answers:
        raise InvalidInput("questionIds and userAnswers are required")
    if len(question_ids) != len(user_answers):
        raise InvalidInput(
            f"questionIds and userAnswers must have the same length ({len(question_ids)} != {len(user_answers)})"
        )

    items = []
    correct = 0
    for raw_id, answer in zip(question_ids, user_answers):
        if not isinstance(answer, str):
            raise InvalidInput(f"Answer for {raw_id} must be a string")
        qid = str(raw_id).strip()
        key = bank.find_answer(qid)
        correct_answer = key.correct_option if key else ''
        is_correct = bool(correct_answer) and answer.strip().lower() == correct_answer.strip().lower()
        if is_correct:
            correct += 1
        items.append(ItemResult(
            question_id=qid,
            user_answer=answer,
            correct_answer=correct_answer,
            is_correct=is_correct,
            description=key.description if key else '',
        ))

    total = len(items)
    return EvaluationResult(
        items=tuple(items),
        total=total,
        correct_count=correct,
        incorrect_count=total - correct,
        score_percentage=100.0 * correct / total,
    )
