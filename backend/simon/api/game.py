from flask import Blueprint, jsonify, request, current_app
import time
from simon.services.game import (
    InputResult,
    Signal,
    UnknownDifficultyError,
    get_engine,
    list_profiles,
)


game = Blueprint('game', __name__)

_last_controller_action: dict[str, float] = {}


def _command_response(accepted: bool, **extra):
    payload = {'accepted': bool(accepted), 'state': get_engine().snapshot()}
    payload.update(extra)
    return jsonify(payload)


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _debounced(action: str) -> bool:
    try:
        debounce_ms = int(current_app.config.get('CONTROLLER_DEBOUNCE_MS', 0))
    except Exception:
        debounce_ms = 0
    if debounce_ms <= 0:
        return False
    now = time.time() * 1000.0
    last = _last_controller_action.get(action, 0)
    if now - last < debounce_ms:
        return True
    _last_controller_action[action] = now
    return False


@game.route('/state', methods=['GET'])
def get_state():
    return jsonify(get_engine().snapshot())


@game.route('/stats', methods=['GET'])
def get_stats():
    return jsonify(get_engine().statistics().to_dict())


@game.route('/difficulties', methods=['GET'])
def get_difficulties():
    engine = get_engine()
    return jsonify({
        'current': engine.profile.name,
        'profiles': [p.to_dict() for p in list_profiles()],
    })


@game.route('/signals', methods=['GET'])
def get_signals():
    return jsonify([s.to_dict() for s in Signal])


@game.route('/start', methods=['POST'])
def start_game():
    if _debounced('start'):
        return jsonify({'message': 'debounced'}), 202
    return _command_response(get_engine().start())


@game.route('/input', methods=['POST'])
def submit_input():
    data = _json_body()
    signal = data.get('signal')
    if not signal:
        return jsonify({'error': 'signal is required'}), 400
    result = get_engine().submit_input(signal)
    return _command_response(result != InputResult.IGNORED, result=result.value)


@game.route('/playback-done', methods=['POST'])
def playback_done():
    data = _json_body()
    generation = data.get('generation')
    if generation is None:
        return jsonify({'error': 'generation is required'}), 400
    try:
        generation = int(generation)
    except (TypeError, ValueError):
        return jsonify({'error': 'generation must be an integer'}), 400
    return _command_response(get_engine().report_playback_done(generation))


@game.route('/difficulty', methods=['POST'])
def set_difficulty():
    data = _json_body()
    name = data.get('difficulty')
    if not name:
        return jsonify({'error': 'difficulty is required'}), 400
    try:
        accepted = get_engine().set_difficulty(name)
    except UnknownDifficultyError as exc:
        return jsonify({'error': str(exc)}), 400
    return _command_response(accepted)


@game.route('/reset', methods=['POST'])
def reset_game():
    return _command_response(get_engine().reset())


@game.route('/pause', methods=['POST'])
def pause_game():
    return _command_response(get_engine().pause())


@game.route('/sound', methods=['POST'])
def toggle_sound():
    enabled = get_engine().toggle_sound()
    return _command_response(enabled is not None, sound_enabled=enabled)
