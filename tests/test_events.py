from tetris_events import EventQueue, GameOver, GameOverReason, LevelIncreased, ScoreChanged


def test_dispatch_delivers_in_publish_order():
    q = EventQueue()
    seen = []
    q.subscribe(ScoreChanged, seen.append)
    q.subscribe(LevelIncreased, seen.append)
    q.publish(ScoreChanged(100, 100))
    q.publish(LevelIncreased(1, 2))
    q.publish(ScoreChanged(400, 300))
    assert seen == []
    delivered = q.dispatch()
    assert seen == delivered == [ScoreChanged(100, 100), LevelIncreased(1, 2), ScoreChanged(400, 300)]
    assert q.dispatch() == []


def test_handlers_only_receive_their_type():
    q = EventQueue()
    scores = []
    q.subscribe(ScoreChanged, scores.append)
    q.publish(LevelIncreased(1, 2))
    q.dispatch()
    assert scores == []


def test_events_published_by_handlers_are_delivered_in_same_dispatch():
    q = EventQueue()
    seen = []
    q.subscribe(ScoreChanged, lambda e: q.publish(LevelIncreased(1, 2)))
    q.subscribe(LevelIncreased, seen.append)
    q.publish(ScoreChanged(1000, 800))
    assert q.dispatch() == [ScoreChanged(1000, 800), LevelIncreased(1, 2)]
    assert seen == [LevelIncreased(1, 2)]


def test_unsubscribe_and_clear():
    q = EventQueue()
    seen = []
    q.subscribe(ScoreChanged, seen.append)
    q.unsubscribe(ScoreChanged, seen.append)
    q.unsubscribe(GameOver, seen.append)
    q.publish(ScoreChanged(1, 1))
    q.dispatch()
    assert seen == []
    q.publish(ScoreChanged(2, 1))
    q.clear()
    assert q.dispatch() == []


def test_events_are_values():
    a = GameOver(100, 2, 12, {"Single": 1}, GameOverReason.PLAYER_ENDED)
    b = GameOver(100, 2, 12, {"Single": 1}, GameOverReason.PLAYER_ENDED)
    assert a == b
    assert GameOverReason.NO_SPACE_FOR_NEW_PIECE.value == "no space for new piece"
