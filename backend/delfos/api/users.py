from flask import Blueprint, jsonify, request

from delfos import sessions
from delfos.api import json_body
from delfos.services.sessions import parse_submission


users = Blueprint('users', __name__)


@users.route('/create', methods=['POST'])
def create_user():
    data = json_body()
    session = sessions.create_session(data.get('userEmail'), data.get('sessionId'))
    return jsonify({
        'status': 'success',
        'message': 'User session file created successfully',
        'filename': f"{session.user_email}_{session.session_id}.txt",
        'user': session.to_dict(include_submissions=False),
    }), 201


@users.route('/update', methods=['POST'])
def update_user():
    data = json_body()
    submission = parse_submission(data)
    sessions.append_submission(data.get('userEmail'), data.get('sessionId'), submission)
    return jsonify({
        'status': 'success',
        'message': f"User file updated with {len(submission.question_ids)} questions and {len(submission.answers)} answers",
    })


@users.route('/session', methods=['GET'])
def get_session():
    session = sessions.load_session(request.args.get('userEmail'), request.args.get('sessionId'))
    return jsonify(session.to_dict())
