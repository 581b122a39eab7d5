from simon import db
from simon.models import StatsSlot
from simon.services.game import MemoryStatsStore, SqlStatsStore, Statistics


def test_memory_store_round_trip():
    store = MemoryStatsStore()
    assert store.load() is None
    stats = Statistics(games_played=4, total_score=11, high_score=6, current_streak=0, best_streak=2)
    assert store.save(stats)
    assert store.load() == stats


def test_sql_store_missing_slot(flask_app):
    store = SqlStatsStore(flask_app)
    assert store.load() is None


def test_sql_store_round_trip(flask_app):
    store = SqlStatsStore(flask_app, key='player-one')
    stats = Statistics(games_played=3, total_score=12, high_score=7, current_streak=1, best_streak=1)
    assert store.save(stats)
    assert store.load() == stats

    stats.record_game(9)
    assert store.save(stats)
    assert store.load() == stats
    assert StatsSlot.query.count() == 1


def test_sql_store_keys_are_independent(flask_app):
    SqlStatsStore(flask_app, key='a').save(Statistics(high_score=1))
    SqlStatsStore(flask_app, key='b').save(Statistics(high_score=2))
    assert SqlStatsStore(flask_app, key='a').load().high_score == 1
    assert SqlStatsStore(flask_app, key='b').load().high_score == 2


def test_sql_store_tolerates_malformed_payload(flask_app):
    db.session.add(StatsSlot(key='simonGameStats', payload='{"gamesPlayed": "x", "highScore": 4'))
    db.session.commit()
    assert SqlStatsStore(flask_app).load() == Statistics()

    slot = db.session.get(StatsSlot, 'simonGameStats')
    slot.payload = '{"gamesPlayed": "x", "highScore": 4}'
    db.session.commit()
    assert SqlStatsStore(flask_app).load() == Statistics(high_score=4)


def test_sql_store_failure_is_reported_not_raised(flask_app):
    store = SqlStatsStore(flask_app)
    db.drop_all()
    assert store.save(Statistics(high_score=3)) is False
    assert store.load() is None
    db.create_all()
    assert store.save(Statistics(high_score=3)) is True


def test_sql_store_clear(flask_app):
    store = SqlStatsStore(flask_app)
    store.save(Statistics(high_score=5))
    store.clear()
    assert store.load() is None


def test_stats_show_command(flask_app):
    SqlStatsStore(flask_app).save(Statistics(games_played=2, total_score=5, high_score=4))
    result = flask_app.test_cli_runner().invoke(args=['stats-show'])
    assert result.exit_code == 0
    assert 'highScore: 4' in result.output
    assert 'averageScore: 2.5' in result.output


def test_stats_reset_command(flask_app):
    store = SqlStatsStore(flask_app)
    store.save(Statistics(high_score=7))
    runner = flask_app.test_cli_runner()

    declined = runner.invoke(args=['stats-reset'], input='n\n')
    assert declined.exit_code == 0
    assert store.load().high_score == 7

    result = runner.invoke(args=['stats-reset', '--yes'])
    assert result.exit_code == 0
    assert 'Statistics have been reset!' in result.output
    assert store.load() is None
