from flask_socketio import emit

from delfos import socketio, winners
from delfos.errors import StorageError


def handle_connect():
    try:
        count = winners.read()
    except StorageError:
        count = None
    emit('connected', {'message': 'Connected to /ws', 'winnerCount': count})


def handle_ping(data):
    emit('pong', data or {})


def handle_winner_count(data=None):
    try:
        count = winners.read()
    except StorageError as exc:
        emit('error', exc.to_dict())
        return
    emit('winner_update', {'winnerCount': count})


def register_socketio_handlers(testing: bool = False) -> None:
    """Bind the /ws handlers: connect, ping, and winner_count lookups.

    New counts reach clients from POST /winner/increment, which emits
    winner_update on /ws. Test apps also listen on the root namespace.
    """
    socketio.on_event('connect', handle_connect, namespace='/ws')
    socketio.on_event('ping', handle_ping, namespace='/ws')
    socketio.on_event('winner_count', handle_winner_count, namespace='/ws')

    if testing:
        socketio.on_event('connect', handle_connect, namespace='/')
        socketio.on_event('ping', handle_ping, namespace='/')
        socketio.on_event('winner_count', handle_winner_count, namespace='/')
