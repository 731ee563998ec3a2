import asyncio
import json

from classquiz.domain.events import LeaderboardChanged, QuizCreated, QuizLiveStatusChanged
from classquiz.ws.dispatcher import EventDispatcher
from classquiz.ws.hub import ConnectionHub
from classquiz.ws.schemas import RoutedEvent


class FakeSocket:
    def __init__(self, fail=False):
        self.sent = []
        self.fail = fail

    async def accept(self):
        pass

    async def send_text(self, data):
        if self.fail:
            raise RuntimeError("connection closed")
        self.sent.append(json.loads(data))


class FakeRedis:
    def __init__(self, fail=False):
        self.published = []
        self.fail = fail

    async def publish(self, channel, data):
        if self.fail:
            raise ConnectionError("redis down")
        self.published.append((channel, data))


def connected_hub(*sockets):
    hub = ConnectionHub()
    for ws in sockets:
        asyncio.run(hub.register(ws))
    return hub


def test_quiz_scoped_events_reach_only_that_room():
    watcher, other, idle = FakeSocket(), FakeSocket(), FakeSocket()
    hub = connected_hub(watcher, other, idle)
    hub.join("quiz-1", watcher)
    hub.join("quiz-2", other)

    asyncio.run(EventDispatcher(hub).dispatch(LeaderboardChanged(quiz_id="quiz-1")))
    assert watcher.sent == [{"type": "leaderboard-update", "quizId": "quiz-1"}]
    assert other.sent == [] and idle.sent == []


def test_quiz_created_goes_to_everyone():
    a, b = FakeSocket(), FakeSocket()
    hub = connected_hub(a, b)
    asyncio.run(EventDispatcher(hub).dispatch(QuizCreated(quiz_id="quiz-9")))
    assert a.sent == b.sent == [{"type": "quiz-created", "quizId": "quiz-9"}]


def test_status_change_carries_flag():
    ws = FakeSocket()
    hub = connected_hub(ws)
    hub.join("quiz-1", ws)
    asyncio.run(EventDispatcher(hub).dispatch(QuizLiveStatusChanged(quiz_id="quiz-1", live=False)))
    assert ws.sent == [{"type": "quiz-status-changed", "quizId": "quiz-1", "isLive": False}]


def test_failed_sockets_are_dropped():
    good, bad = FakeSocket(), FakeSocket(fail=True)
    hub = connected_hub(good, bad)
    hub.join("quiz-1", good)
    hub.join("quiz-1", bad)
    sent = asyncio.run(hub.broadcast("quiz-1", {"type": "leaderboard-update", "quizId": "quiz-1"}))
    assert sent == 1
    assert bad not in hub.clients
    assert hub.members("quiz-1") == {good}


def test_leaving_last_member_removes_room():
    ws = FakeSocket()
    hub = connected_hub(ws)
    hub.join("quiz-1", ws)
    hub.leave("quiz-1", ws)
    assert "quiz-1" not in hub.rooms
    hub.leave("quiz-1", ws)


def test_dispatch_publishes_to_redis_when_configured():
    redis = FakeRedis()
    dispatcher = EventDispatcher(ConnectionHub(), redis, channel="events")
    asyncio.run(dispatcher.dispatch(LeaderboardChanged(quiz_id="quiz-1")))
    ((channel, data),) = redis.published
    assert channel == "events"
    routed = RoutedEvent.model_validate_json(data)
    assert routed.room == "quiz-1"
    assert routed.message.type == "leaderboard-update"


def test_delivery_failures_never_propagate():
    dispatcher = EventDispatcher(ConnectionHub(), FakeRedis(fail=True))
    asyncio.run(dispatcher.dispatch(QuizCreated(quiz_id="quiz-1")))


def test_websocket_join_and_receive(client, profiles, resources):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"type": "join-quiz", "quizId": "quiz-1"})
        assert ws.receive_json() == {"type": "joined", "quizId": "quiz-1"}
        ws.send_json({"type": "ping"})
        assert ws.receive_json() == {"type": "pong"}
        ws.send_json({"type": "dance"})
        assert ws.receive_json()["type"] == "error"
        ws.send_json({})
        assert ws.receive_json()["type"] == "error"
        ws.send_json({"foo": 1})
        assert ws.receive_json()["type"] == "error"
        assert "quiz-1" in resources.hub.rooms
        ws.send_json({"type": "leave-quiz", "quizId": "quiz-1"})
        assert ws.receive_json() == {"type": "left", "quizId": "quiz-1"}
