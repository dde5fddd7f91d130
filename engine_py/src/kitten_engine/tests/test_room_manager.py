"""
Tests for the room registry and housekeeping.
"""

import random

import pytest
from kitten_engine.constants import ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH, CardType, GamePhase
from kitten_engine.errors import ROOM_NOT_FOUND
from kitten_engine.room_manager import RoomManager
from kitten_engine.rules import create_rules
from kitten_engine.shuffle import create_card


@pytest.fixture
def manager():
    return RoomManager(create_rules(ended_room_grace_seconds=60, idle_room_seconds=3600),
                       rng=random.Random(11))


def make_game(manager, player_count=2):
    room = manager.create_room("host", "Host")
    for i in range(1, player_count):
        manager.add_player(room.room_code, f"p{i}", f"Player {i}")
    return room


def test_create_room_code(manager):
    room = manager.create_room("host", "Host")
    assert len(room.room_code) == ROOM_CODE_LENGTH
    assert all(ch in ROOM_CODE_ALPHABET for ch in room.room_code)
    assert manager.get_room(room.room_code) is room
    assert room.room_code in manager
    assert len(manager) == 1


def test_room_codes_are_unique(manager):
    codes = {manager.create_room(f"h{i}", "Host").room_code for i in range(200)}
    assert len(codes) == 200


def test_unknown_room(manager):
    assert manager.get_room("NOPE00") is None
    assert manager.add_player("NOPE00", "p1", "A").error_code == ROOM_NOT_FOUND
    assert manager.play_card("NOPE00", "p1", "c1").error_code == ROOM_NOT_FOUND
    assert manager.draw_card("NOPE00", "p1").error_code == ROOM_NOT_FOUND
    assert manager.end_turn("NOPE00", "p1").error_code == ROOM_NOT_FOUND
    assert manager.peek_deck("NOPE00", 3).error_code == ROOM_NOT_FOUND
    assert manager.check_game_end("NOPE00") is None
    assert manager.get_sanitized_game_state("NOPE00", "p1") is None
    assert manager.get_room_info("NOPE00") is None


def test_routes_to_room(manager):
    room = make_game(manager, player_count=3)
    code = room.room_code
    assert manager.start_game(code, requested_by="host").success
    assert room.phase == GamePhase.PLAYING

    room.state.deck.append(create_card(CardType.NOPE))
    result = manager.draw_card(code, "host")
    assert result.success
    assert manager.end_turn(code, "host").success
    assert manager.get_sanitized_game_state(code, "p1")["current_turn_player_id"] == "p1"
    assert len(manager.peek_deck(code, 3).data["cards"]) == 3


def test_last_player_leaving_removes_room(manager):
    room = make_game(manager, player_count=2)
    code = room.room_code
    manager.remove_player(code, "host")
    assert code in manager
    manager.remove_player(code, "p1")
    assert code not in manager


def test_disconnect_elimination_and_game_end(manager):
    room = make_game(manager, player_count=2)
    code = room.room_code
    manager.start_game(code)
    assert manager.eliminate_disconnected_player(code, "p1").data["eliminated"]
    winner = manager.check_game_end(code)
    assert winner.id == "host"
    assert room.phase == GamePhase.GAME_END


def test_cleanup_empty_rooms(manager):
    empty = make_game(manager, player_count=2)
    busy = make_game(manager, player_count=2)
    empty.players.clear()

    removed = manager.cleanup_empty_rooms()
    assert removed == [empty.room_code]
    assert busy.room_code in manager


def test_disconnected_lobby_survives_cleanup(manager):
    room = make_game(manager, player_count=2)
    manager.set_player_connected(room.room_code, "host", False)
    manager.set_player_connected(room.room_code, "p1", False)

    assert manager.cleanup(now=room.state.last_activity_at) == []
    assert room.room_code in manager
    assert room.phase == GamePhase.LOBBY


def test_cleanup_ended_game_nobody_connected(manager):
    room = make_game(manager, player_count=2)
    code = room.room_code
    manager.start_game(code)
    manager.eliminate_disconnected_player(code, "p1")
    manager.check_game_end(code)
    ended_at = room.state.ended_at

    assert manager.cleanup_ended_games(now=ended_at) == []
    manager.set_player_connected(code, "host", False)
    assert manager.cleanup_ended_games(now=ended_at) == [code]


def test_cleanup_ended_games(manager):
    room = make_game(manager, player_count=2)
    code = room.room_code
    manager.start_game(code)
    room.get_player("host").hand = [create_card(CardType.NOPE)]
    room.get_player("host").recount_defuses()
    room.state.deck.append(create_card(CardType.EXPLODING_KITTEN))
    assert manager.draw_card(code, "host").exploded
    manager.check_game_end(code)

    ended_at = room.state.ended_at
    assert manager.cleanup_ended_games(now=ended_at + 30) == []
    assert manager.cleanup_ended_games(now=ended_at + 61) == [code]
    assert code not in manager


def test_cleanup_idle_games(manager):
    idle = make_game(manager)
    fresh = make_game(manager)
    now = fresh.state.last_activity_at
    idle.state.last_activity_at = now - 7200

    assert manager.cleanup(now=now) == [idle.room_code]
    assert fresh.room_code in manager
