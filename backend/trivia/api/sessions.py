from flask import Blueprint, current_app, jsonify

from trivia.errors import GameError

sessions = Blueprint('sessions', __name__)


@sessions.route('', methods=['GET'])
def list_sessions():
    """Read-only view of live sessions for operators. Never exposes answers."""
    return jsonify(current_app.extensions['trivia'].summaries())


@sessions.route('/<string:session_id>', methods=['GET'])
def get_session(session_id):
    try:
        return jsonify(current_app.extensions['trivia'].summary(session_id))
    except GameError as err:
        return jsonify({'error': err.message}), 404
