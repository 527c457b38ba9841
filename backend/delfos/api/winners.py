from datetime import datetime, timezone

from flask import Blueprint, jsonify

from delfos import socketio, winners
from delfos.api import json_body


winner = Blueprint('winner', __name__)


@winner.route('/count', methods=['GET'])
def get_winner_count():
    return jsonify({
        'status': 'success',
        'message': 'Winner count retrieved successfully',
        'winnerCount': winners.read(),
    })


@winner.route('/increment', methods=['POST'])
def increment_winner_count():
    # userEmail and sessionId are optional and only logged
    data = json_body(optional=True)
    new_count = winners.increment(data.get('userEmail'), data.get('sessionId'))
    updated_at = datetime.now(timezone.utc).isoformat()
    socketio.emit('winner_update', {'winnerCount': new_count, 'updatedAt': updated_at}, namespace='/ws')
    return jsonify({
        'status': 'success',
        'message': f"Winner count updated to {new_count}",
        'winnerCount': new_count,
        'updatedAt': updated_at,
    })
