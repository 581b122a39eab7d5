from simon.services.game import SqlStatsStore, Signal


def _events(sio_client, name):
    return [pkt for pkt in sio_client.get_received('/ws') if pkt['name'] == name]


def _connected(sio_client):
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')


def test_socket_connect_receives_state(sio_client):
    _connected(sio_client)
    received = sio_client.get_received('/ws')
    connected = [pkt for pkt in received if pkt['name'] == 'connected']
    assert connected
    assert connected[0]['args'][0]['state']['phase'] == 'idle'


def test_ping(sio_client):
    _connected(sio_client)
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'n': 1}, namespace='/ws')
    pongs = _events(sio_client, 'pong')
    assert pongs and pongs[0]['args'][0] == {'n': 1}


def test_game_round_over_socket(sio_client, app_engine):
    _connected(sio_client)
    sio_client.get_received('/ws')

    sio_client.emit('start_game', namespace='/ws')
    received = sio_client.get_received('/ws')
    names = [pkt['name'] for pkt in received]
    assert 'ack' in names
    assert 'show_message' in names
    assert 'state_update' in names

    app_engine.scheduler.run_pending()
    playback = _events(sio_client, 'play_sequence')
    assert playback
    payload = playback[-1]['args'][0]
    assert len(payload['sequence']) == 1
    assert payload['interval_ms'] == 950
    assert payload['frequencies'] == [Signal(payload['sequence'][0]).frequency]

    sio_client.emit('playback_done', {'generation': payload['generation']}, namespace='/ws')
    enabled = _events(sio_client, 'input_enabled')
    assert enabled[-1]['args'][0] == {'enabled': True}

    sio_client.emit('submit_input', {'signal': payload['sequence'][0]}, namespace='/ws')
    acks = [pkt['args'][0] for pkt in sio_client.get_received('/ws') if pkt['name'] == 'ack']
    assert acks[-1]['result'] == 'round_complete'


def test_visibility_change_pauses(sio_client, app_engine):
    _connected(sio_client)
    sio_client.emit('start_game', namespace='/ws')
    app_engine.scheduler.run_pending()
    sio_client.get_received('/ws')

    sio_client.emit('visibility_change', {'hidden': False}, namespace='/ws')
    assert app_engine.phase.value == 'playback'

    sio_client.emit('visibility_change', {'hidden': True}, namespace='/ws')
    assert app_engine.phase.value == 'paused'
    messages = [pkt['args'][0] for pkt in sio_client.get_received('/ws') if pkt['name'] == 'show_message']
    assert {'text': 'Game Paused', 'kind': 'paused'} in messages


def test_unknown_difficulty_reports_error(sio_client):
    _connected(sio_client)
    sio_client.get_received('/ws')
    sio_client.emit('set_difficulty', {'difficulty': 'ludicrous'}, namespace='/ws')
    errors = _events(sio_client, 'error')
    assert errors
    assert 'ludicrous' in errors[0]['args'][0]['message']


def test_keyboard_shortcuts(sio_client, app_engine):
    _connected(sio_client)
    sio_client.emit('key_press', {'code': 'Space'}, namespace='/ws')
    assert app_engine.phase.value == 'awaiting_playback'
    sio_client.emit('key_press', {'code': 'Escape'}, namespace='/ws')
    assert app_engine.phase.value == 'idle'
    app_engine.scheduler.run_pending()
    assert app_engine.level == 0


def test_audio_unavailable_disables_sound(sio_client, app_engine):
    _connected(sio_client)
    assert app_engine.presenter.sound_enabled is True
    sio_client.emit('audio_unavailable', {'reason': 'no AudioContext'}, namespace='/ws')
    assert app_engine.presenter.sound_enabled is False
    toggled = _events(sio_client, 'sound_toggled')
    assert toggled[-1]['args'][0] == {'enabled': False}


def test_disconnect_saves_stats(flask_app, sio_client, app_engine):
    _connected(sio_client)
    app_engine.stats.record_game(4)
    sio_client.disconnect(namespace='/ws')
    saved = SqlStatsStore(flask_app).load()
    assert saved is not None
    assert saved.high_score == 4


def test_playback_done_requires_generation(sio_client, app_engine):
    _connected(sio_client)
    sio_client.emit('start_game', namespace='/ws')
    app_engine.scheduler.run_pending()
    sio_client.get_received('/ws')

    sio_client.emit('playback_done', {}, namespace='/ws')
    errors = _events(sio_client, 'error')
    assert errors[-1]['args'][0] == {'message': 'generation is required'}
    assert app_engine.phase.value == 'playback'


def test_non_object_payloads_are_tolerated(sio_client, app_engine):
    _connected(sio_client)
    sio_client.get_received('/ws')
    sio_client.emit('submit_input', ['red'], namespace='/ws')
    sio_client.emit('key_press', 'Space', namespace='/ws')
    errors = _events(sio_client, 'error')
    assert errors[-1]['args'][0] == {'message': 'signal is required'}
    assert app_engine.phase.value == 'idle'
