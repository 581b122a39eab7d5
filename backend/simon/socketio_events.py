from flask_socketio import join_room, emit
from flask import current_app
from simon.presenter import GAME_ROOM
from simon.services.game import InputResult, UnknownDifficultyError, get_engine


def _payload(data) -> dict:
    return data if isinstance(data, dict) else {}


def handle_connect():
    join_room(GAME_ROOM)
    emit('connected', {'message': 'Connected to /ws', 'state': get_engine().snapshot()})


def handle_disconnect(*_args):
    # Session end: persist whatever the player has accumulated
    try:
        get_engine().flush_stats()
    except Exception as exc:
        current_app.logger.warning(f"[disconnect] could not flush stats: {exc!r}")


def handle_start_game(data=None):
    emit('ack', {'command': 'start_game', 'accepted': get_engine().start()})


def handle_submit_input(data):
    signal = _payload(data).get('signal')
    if not signal:
        emit('error', {'message': 'signal is required'})
        return
    result = get_engine().submit_input(signal)
    emit('ack', {'command': 'submit_input', 'accepted': result != InputResult.IGNORED, 'result': result.value})


def handle_playback_done(data=None):
    generation = _payload(data).get('generation')
    if generation is None:
        emit('error', {'message': 'generation is required'})
        return
    try:
        generation = int(generation)
    except (TypeError, ValueError):
        emit('error', {'message': 'generation must be an integer'})
        return
    emit('ack', {'command': 'playback_done', 'accepted': get_engine().report_playback_done(generation)})


def handle_set_difficulty(data):
    name = _payload(data).get('difficulty')
    try:
        accepted = get_engine().set_difficulty(name)
    except UnknownDifficultyError as exc:
        emit('error', {'message': str(exc)})
        return
    emit('ack', {'command': 'set_difficulty', 'accepted': accepted})


def handle_reset_game(data=None):
    emit('ack', {'command': 'reset_game', 'accepted': get_engine().reset()})


def handle_visibility_change(data):
    # Hidden page freezes the game; becoming visible again does nothing
    if not _payload(data).get('hidden'):
        return
    emit('ack', {'command': 'visibility_change', 'accepted': get_engine().pause()})


def handle_toggle_sound(data=None):
    get_engine().toggle_sound()


def handle_audio_unavailable(data=None):
    presenter = get_engine().presenter
    disable = getattr(presenter, 'disable_sound', None)
    if disable is not None:
        disable(_payload(data).get('reason'))


def handle_key_press(data):
    code = _payload(data).get('code')
    engine = get_engine()
    if code == 'Space':
        emit('ack', {'command': 'start_game', 'accepted': engine.start()})
    elif code == 'Escape':
        emit('ack', {'command': 'reset_game', 'accepted': engine.reset()})


def handle_ping(data):
    emit('pong', data or {})


_HANDLERS = {
    'connect': handle_connect,
    'disconnect': handle_disconnect,
    'start_game': handle_start_game,
    'submit_input': handle_submit_input,
    'playback_done': handle_playback_done,
    'set_difficulty': handle_set_difficulty,
    'reset_game': handle_reset_game,
    'visibility_change': handle_visibility_change,
    'toggle_sound': handle_toggle_sound,
    'audio_unavailable': handle_audio_unavailable,
    'key_press': handle_key_press,
    'ping': handle_ping,
}


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    from simon import socketio

    for event, handler in _HANDLERS.items():
        socketio.on_event(event, handler, namespace='/ws')

    if testing:
        # Test-only mirror on default namespace
        for event, handler in _HANDLERS.items():
            socketio.on_event(event, handler, namespace='/')
