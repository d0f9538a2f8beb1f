from flask import Flask, jsonify, request
from flask_cors import CORS
import logging

from db import create_store, StoreError
from engine import GameError, NotAuthorizedError
from models import Card
from rooms import RoomService, RoomNotFoundError

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)

app.config['ROOM_SERVICE'] = None


def get_service() -> RoomService:
    """Room service for this app, built from config on first use."""
    service = app.config.get('ROOM_SERVICE')
    if service is None:
        service = RoomService(create_store())
        app.config['ROOM_SERVICE'] = service
    return service


def error_response(e: Exception):
    """Map an engine or store error to a JSON error and status code."""
    if isinstance(e, RoomNotFoundError):
        status = 404
    elif isinstance(e, NotAuthorizedError):
        status = 403
    elif isinstance(e, StoreError):
        logger.warning("store failure: %s", e)
        return jsonify({'error': 'Storage unavailable'}), 503
    else:
        status = 400
    if isinstance(e, GameError):
        logger.info("rejected: %s", e)
    return jsonify({'error': str(e)}), status


def _is_name(value) -> bool:
    """Room codes and player ids must be non-empty strings."""
    return isinstance(value, str) and bool(value)


@app.route('/api/health')
def health():
    return {'status': 'ok'}


@app.route('/api/room')
def poll_room():
    """Poll room state. Advances at most one AI action or timed transition."""
    code = request.args.get('code')
    player_id = request.args.get('playerId')
    if not _is_name(code) or not _is_name(player_id):
        return jsonify({'error': 'Missing code or playerId'}), 400

    try:
        return jsonify(get_service().poll(code, player_id))
    except (GameError, StoreError) as e:
        return error_response(e)


@app.route('/api/room', methods=['POST'])
def room_action():
    """Player actions: create, join, bid, play, rematch."""
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        data = {}
    action = data.get('action')
    player_id = data.get('playerId')
    code = data.get('code')
    service = get_service()

    if not _is_name(player_id):
        return jsonify({'error': 'Missing playerId'}), 400
    if action != 'create' and not _is_name(code):
        return jsonify({'error': 'Missing code'}), 400

    try:
        if action == 'create':
            return jsonify(service.create(
                player_id,
                data.get('playerName') or 'Player 1',
                data.get('difficulty') or 'medium',
                data.get('gameMode') or 'versus',
            ))

        if action == 'join':
            return jsonify(service.join(code, player_id, data.get('playerName') or 'Player 2'))

        if action == 'bid':
            bid = data.get('bid')
            if not isinstance(bid, int) or isinstance(bid, bool):
                return jsonify({'error': 'Invalid bid'}), 400
            return jsonify(service.bid(code, player_id, bid))

        if action == 'play':
            try:
                card = Card.from_dict(data.get('card') or {})
            except (KeyError, TypeError, ValueError):
                return jsonify({'error': 'Invalid card'}), 400
            return jsonify(service.play(code, player_id, card))

        if action == 'rematch':
            return jsonify(service.rematch(code, player_id))

    except ValueError as e:
        return jsonify({'error': str(e)}), 400
    except (GameError, StoreError) as e:
        return error_response(e)

    return jsonify({'error': 'Unknown action'}), 400


if __name__ == '__main__':
    app.run(debug=True, host='127.0.0.1', port=3000)
