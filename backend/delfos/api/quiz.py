from flask import Blueprint, current_app, jsonify, request

from delfos import bank
from delfos.api import json_body
from delfos.errors import InvalidInput
from delfos.services.scoring import evaluate
from delfos.services.selector import select_question_ids


quiz = Blueprint('quiz', __name__)


@quiz.route('/profiles', methods=['GET'])
def list_profiles():
    return jsonify({'profiles': [p.to_dict() for p in bank.profiles()]})


@quiz.route('/question', methods=['GET'])
def get_question():
    question_id = request.args.get('id')
    if not question_id:
        raise InvalidInput('id is required')
    return jsonify(bank.lookup_question(question_id).to_dict())


@quiz.route('/answer', methods=['GET'])
def get_answer():
    question_id = request.args.get('question_id')
    if not question_id:
        raise InvalidInput('question_id is required')
    return jsonify(bank.lookup_answer(question_id).to_dict())


@quiz.route('/choose-questions', methods=['GET'])
def choose_questions():
    cfg = current_app.config
    profile = bank.profile(request.args.get('profile') or cfg.get('DEFAULT_PROFILE', 'credit'))
    raw_count = request.args.get('count')
    if raw_count is None or raw_count == '':
        count = int(cfg.get('QUESTIONS_PER_SAMPLE', 8))
    else:
        try:
            count = int(raw_count)
        except ValueError:
            raise InvalidInput(f"count must be an integer, got {raw_count!r}") from None
    ids = select_question_ids(profile, count)
    current_app.logger.info(f"[choose] profile={profile.name} count={count} ids={ids}")
    return jsonify({
        'profile': profile.name,
        'questionIds': ids,
    })


@quiz.route('/evaluate-answers', methods=['POST'])
def evaluate_answers():
    data = json_body()
    question_ids = data.get('questionIds')
    user_answers = data.get('userAnswers')
    if not isinstance(question_ids, list) or not isinstance(user_answers, list):
        raise InvalidInput('questionIds and userAnswers are required')
    result = evaluate(question_ids, user_answers, bank)
    payload = {
        'status': 'success',
        'message': 'Answers evaluated successfully',
    }
    payload.update(result.to_dict())
    return jsonify(payload)
