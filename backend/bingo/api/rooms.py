from flask import Blueprint, current_app, jsonify, request

from bingo.actions import GameActions
from bingo.errors import BingoError

rooms = Blueprint('rooms', __name__)


def _actions() -> GameActions:
    return current_app.extensions['bingo_actions']


def _body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _ok(payload=None, status=200):
    body = {'success': True}
    body.update(payload or {})
    return jsonify(body), status


@rooms.errorhandler(BingoError)
def handle_bingo_error(exc: BingoError):
    current_app.logger.info(f"[rejected] {request.method} {request.path}: {exc.message}")
    return jsonify(exc.to_dict()), exc.status_code


@rooms.route('/rooms', methods=['POST'])
def create_room():
    data = _body()
    result = _actions().create_room(
        data.get('adminId'),
        data.get('adminName'),
        data.get('useFreeCenter', True),
    )
    return _ok(result, 201)


@rooms.route('/rooms/<string:room_code>', methods=['GET'])
def get_room(room_code):
    return _ok(_actions().get_room(room_code))


@rooms.route('/rooms/<string:room_code>/join', methods=['POST'])
def join_room(room_code):
    data = _body()
    return _ok(_actions().join_room(room_code, data.get('userId'), data.get('displayName')))


@rooms.route('/rooms/<string:room_code>/players', methods=['GET'])
def list_players(room_code):
    return _ok(_actions().list_players(room_code))


@rooms.route('/rooms/<string:room_code>/start', methods=['POST'])
def start_game(room_code):
    return _ok(_actions().start_game(room_code, _body().get('adminId')))


@rooms.route('/rooms/<string:room_code>/draw', methods=['POST'])
def draw_airline(room_code):
    return _ok(_actions().draw(room_code, _body().get('adminId')))


@rooms.route('/rooms/<string:room_code>/card/<string:user_id>', methods=['GET'])
def get_card(room_code, user_id):
    return _ok(_actions().get_card(room_code, user_id))


@rooms.route('/rooms/<string:room_code>/drawn', methods=['GET'])
def get_drawn(room_code):
    return _ok(_actions().get_drawn(room_code))


@rooms.route('/rooms/<string:room_code>/claim', methods=['POST'])
def claim_bingo(room_code):
    return _ok(_actions().claim_bingo(room_code, _body().get('userId')))


@rooms.route('/rooms/<string:room_code>/reset', methods=['POST'])
def reset_game(room_code):
    return _ok(_actions().reset_game(room_code, _body().get('adminId')))


@rooms.route('/rooms/<string:room_code>/kick', methods=['POST'])
def kick_player(room_code):
    data = _body()
    return _ok(_actions().kick(room_code, data.get('adminId'), data.get('userId')))
