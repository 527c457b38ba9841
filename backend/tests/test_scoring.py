import pytest

from delfos.errors import InvalidInput
from delfos.services.scoring import evaluate


def test_mixed_result(bank):
    # CRD0001 -> a, CRD0007 -> d
    result = evaluate(['CRD0001', 'CRD0007'], ['a', 'c'], bank)
    assert result.total == 2
    assert result.correct_count == 1
    assert result.incorrect_count == 1
    assert result.score_percentage == 50.0
    first, second = result.items
    assert first.is_correct and first.correct_answer == 'a'
    assert first.description == '220.317.663.560'
    assert not second.is_correct and second.correct_answer == 'd'


def test_case_and_whitespace_insensitive(bank):
    # CRD0003 -> b
    padded = evaluate(['CRD0003'], ['  b '], bank)
    upper = evaluate(['CRD0003'], ['B'], bank)
    assert padded.correct_count == upper.correct_count == 1
    assert padded.score_percentage == upper.score_percentage == 100.0
    assert padded.items[0].user_answer == '  b '


def test_unknown_question_is_graded_wrong(bank):
    result = evaluate(['NOPE0001', 'SRV0001'], ['a', 'b'], bank)
    assert result.items[0].correct_answer == ''
    assert result.items[0].is_correct is False
    assert result.items[1].is_correct is True
    assert result.correct_count + result.incorrect_count == result.total


def test_empty_answer_against_unknown_question_is_wrong(bank):
    result = evaluate(['NOPE0001'], [''], bank)
    assert result.correct_count == 0


def test_counts_and_percentage_bounds(bank):
    ids = bank.profile('expansion').question_ids()
    answers = ['a'] * len(ids)
    result = evaluate(ids, answers, bank)
    assert result.correct_count + result.incorrect_count == result.total == 16
    assert 0 <= result.score_percentage <= 100


@pytest.mark.parametrize('ids,answers', [
    ([], []),
    (['CRD0001'], []),
    ([], ['a']),
    (['CRD0001', 'CRD0002'], ['a']),
    (['CRD0001'], [1]),
])
def test_invalid_input(bank, ids, answers):
    with pytest.raises(InvalidInput):
        evaluate(ids, answers, bank)


def test_result_serialization(bank):
    data = evaluate(['CRD0002'], ['c'], bank).to_dict()
    assert data['totalQuestions'] == 1
    assert data['correctAnswers'] == 1
    assert data['incorrectAnswers'] == 0
    assert data['results'][0] == {
        'questionId': 'CRD0002',
        'userAnswer': 'c',
        'correctAnswer': 'c',
        'isCorrect': True,
        'description': '2.112.445.004.347',
    }
