import time

import click
from flask import Flask, g, jsonify, request
from flask_cors import CORS
from flask_socketio import SocketIO

from config import Config
from delfos.errors import ProfilerError
from delfos.services.bank import QuestionBank
from delfos.services.sessions import SessionStore
from delfos.services.winners import WinnerLedger

bank = QuestionBank()
sessions = SessionStore()
winners = WinnerLedger()
socketio = SocketIO(async_mode=None)


def create_app(config_class=Config):
    flask_app = Flask(__name__)
    flask_app.config.from_object(config_class)
    # app.logger is the "delfos" logger, so service loggers inherit its handler
    flask_app.logger.setLevel(flask_app.config.get('LOG_LEVEL', 'INFO'))

    origins = flask_app.config.get('CORS_ORIGINS') or ['*']
    if '*' in origins:
        origins = '*'
    CORS(flask_app, origins=origins)
    socketio.init_app(flask_app, cors_allowed_origins=origins)

    # A malformed bank raises BankLoadError here and aborts startup
    bank.init_app(flask_app)
    sessions.init_app(flask_app)
    winners.init_app(flask_app)

    from delfos.main import main
    flask_app.register_blueprint(main)

    from delfos.api.quiz import quiz
    flask_app.register_blueprint(quiz)

    from delfos.api.users import users
    flask_app.register_blueprint(users, url_prefix='/user')

    from delfos.api.winners import winner
    flask_app.register_blueprint(winner, url_prefix='/winner')

    from delfos.socketio_events import register_socketio_handlers
    register_socketio_handlers(testing=flask_app.config.get('TESTING', False))

    @flask_app.errorhandler(ProfilerError)
    def handle_profiler_error(exc):
        if exc.status_code >= 500:
            flask_app.logger.error(f"[error] {request.method} {request.path} -> {exc.code}: {exc.message}")
        else:
            flask_app.logger.info(f"[rejected] {request.method} {request.path} -> {exc.code}: {exc.message}")
        return jsonify(exc.to_dict()), exc.status_code

    @flask_app.before_request
    def start_request_timer():
        g.request_started = time.perf_counter()

    @flask_app.after_request
    def log_request(response):
        started = g.get('request_started')
        elapsed_ms = (time.perf_counter() - started) * 1000.0 if started is not None else 0.0
        flask_app.logger.info(f"[request] {request.method} {request.path} {response.status_code} in {elapsed_ms:.1f}ms")
        return response

    @click.command('winners-reset')
    def winners_reset_command():
        """Resets the shared winner count to zero."""
        winners.reset()
        click.echo('Winner count has been reset to 0.')

    @click.command('bank-check')
    def bank_check_command():
        """Validates the question bank and lists its profiles."""
        for profile in bank.profiles():
            aliases = ', '.join(profile.aliases) or '-'
            click.echo(
                f"{profile.name}: {profile.question_id(1)}..{profile.question_id(profile.size)} "
                f"({profile.size} questions, aliases: {aliases})"
            )
        click.echo(f"{len(bank)} questions loaded.")

    flask_app.cli.add_command(winners_reset_command)
    flask_app.cli.add_command(bank_check_command)

    return flask_app
