import threading

import pytest

from ito.constants import LOBBY, PLAYING
from ito.exceptions import RoomNotFound
from ito.services.games.registry import RoomRegistry
from tests.conftest import CodeSequence, FakeClock, FixedDealer


def test_create_seeds_lobby_with_host(registry):
    room = registry.create('p1', 'Alice')
    assert room.status == LOBBY
    assert [p.id for p in room.players] == ['p1']
    assert room.code in registry
    assert len(registry) == 1


def test_create_regenerates_on_collision(clock):
    registry = RoomRegistry(clock=clock, code_factory=CodeSequence('WXYZ', 'WXYZ', 'WXYZ', 'ABCD'))
    first = registry.create('p1', 'Alice')
    second = registry.create('p2', 'Bob')
    assert first.code == 'WXYZ'
    assert second.code == 'ABCD'
    assert sorted(registry.codes()) == ['ABCD', 'WXYZ']


def test_get_normalizes_and_touches(registry, clock):
    room = registry.create('p1', 'Alice')
    clock.advance(120)
    assert registry.get(room.code.lower()) is room
    assert room.last_activity == clock.now


def test_peek_does_not_touch(registry, clock):
    room = registry.create('p1', 'Alice')
    created_at = room.last_activity
    clock.advance(120)
    assert registry.peek(room.code) is room
    assert room.last_activity == created_at


def test_get_missing_returns_none_and_require_raises(registry):
    assert registry.get('NOPE') is None
    with pytest.raises(RoomNotFound):
        registry.require('NOPE')


def test_last_player_leaving_deletes_room(registry):
    room = registry.create('p1', 'Alice')
    room.add_player('p2', 'Bob')
    departure = registry.remove_player(room.code, 'p1')
    assert departure.host_changed
    assert room.host_id == 'p2'
    assert room.code in registry
    departure = registry.remove_player(room.code, 'p2')
    assert departure.room_empty
    assert room.closed
    assert registry.get(room.code) is None


def test_remove_player_from_missing_room_is_noop(registry):
    assert registry.remove_player('NOPE', 'p1') is None


def test_sweep_drops_idle_rooms_regardless_of_status(clock):
    registry = RoomRegistry(clock=clock, timeout=3600)
    idle = registry.create('p1', 'Alice')
    idle.add_player('p2', 'Bob')
    idle.start_round('p1', dealer=FixedDealer(1, 2))
    assert idle.status == PLAYING
    clock.advance(1800)
    busy = registry.create('p3', 'Cara')
    clock.advance(1801)
    registry.get(busy.code)
    removed = registry.sweep()
    assert removed == [idle.code]
    assert idle.closed
    assert registry.get(idle.code) is None
    assert registry.get(busy.code) is busy


def test_sweep_keeps_room_at_exact_timeout(clock):
    registry = RoomRegistry(clock=clock, timeout=60)
    room = registry.create('p1', 'Alice')
    clock.advance(60)
    assert registry.sweep() == []
    clock.advance(1)
    assert registry.sweep() == [room.code]


def test_concurrent_creates_get_unique_codes():
    registry = RoomRegistry(clock=FakeClock())
    created = []
    lock = threading.Lock()

    def worker(n):
        for i in range(25):
            room = registry.create(f'{n}-{i}', 'x')
            with lock:
                created.append(room.code)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(created) == 200
    assert len(set(created)) == 200
    assert len(registry) == 200
