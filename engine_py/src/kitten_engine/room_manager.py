"""Room registry: room codes, lookup, per-room routing and cleanup"""

import logging
import random
import threading
import time
from typing import Dict, List, Optional, Sequence, Union

from .constants import ROOM_CODE_ALPHABET, ROOM_CODE_LENGTH, GamePhase
from .engine import GameRoom
from .errors import ROOM_NOT_FOUND
from .models import ActionResult, DrawResult, Player
from .rules import RuleConfig, default_rules

logger = logging.getLogger(__name__)


def _room_not_found(room_code: str) -> ActionResult:
    return ActionResult.error(ROOM_NOT_FOUND, f"Room {room_code} not found")


class RoomManager:
    """
    Owns every live GameRoom.

    Rooms are only reachable through their code; the manager routes each
    operation to the right room and drops rooms that are empty, finished
    or idle.
    """

    def __init__(self, rules: RuleConfig = default_rules, rng: Optional[random.Random] = None):
        self.rules = rules
        self._rng = rng or random.Random()
        self._rooms: Dict[str, GameRoom] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._rooms)

    def __contains__(self, room_code: str) -> bool:
        return room_code in self._rooms

    def generate_room_code(self) -> str:
        """Random 6-character code not used by any live room."""
        while True:
            code = ''.join(self._rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))
            if code not in self._rooms:
                return code

    def create_room(self, host_id: str, host_name: str) -> GameRoom:
        with self._lock:
            code = self.generate_room_code()
            room = GameRoom(code, host_id, host_name, rules=self.rules,
                            rng=random.Random(self._rng.random()))
            self._rooms[code] = room
        logger.info(f"Room {code} created by {host_name} ({host_id})")
        return room

    def get_room(self, room_code: str) -> Optional[GameRoom]:
        return self._rooms.get(room_code)

    def remove_room(self, room_code: str) -> bool:
        with self._lock:
            room = self._rooms.pop(room_code, None)
        if room is not None:
            logger.info(f"Room {room_code} removed")
        return room is not None

    def get_room_info(self, room_code: str) -> Optional[Dict]:
        room = self.get_room(room_code)
        return room.get_info() if room else None

    # Per-room operations routed by code

    def add_player(self, room_code: str, player_id: str, player_name: str) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        result = room.add_player(player_id, player_name)
        if result.success:
            logger.info(f"{player_name} ({player_id}) joined room {room_code}")
        return result

    def remove_player(self, room_code: str, player_id: str) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        result = room.remove_player(player_id)
        if result.success and not room.players:
            self.remove_room(room_code)
        return result

    def start_game(self, room_code: str, defuse_count: Optional[int] = None,
                   exploding_kitten_count: Optional[int] = None,
                   requested_by: Optional[str] = None) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        result = room.start_game(defuse_count, exploding_kitten_count, requested_by)
        if result.success:
            logger.info(f"Game started in room {room_code} with {len(room.players)} players")
        return result

    def play_card(self, room_code: str, player_id: str,
                  card_ids: Union[str, Sequence[str]], data=None) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        return room.play_card(player_id, card_ids, data)

    def draw_card(self, room_code: str, player_id: str) -> DrawResult:
        room = self.get_room(room_code)
        if room is None:
            return DrawResult.error(ROOM_NOT_FOUND, f"Room {room_code} not found")
        return room.draw_card(player_id)

    def defuse_kitten(self, room_code: str, player_id: str, insert_position: int) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        return room.defuse_kitten(player_id, insert_position)

    def end_turn(self, room_code: str, player_id: Optional[str] = None) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        return room.end_turn(player_id)

    def shuffle_deck(self, room_code: str, player_id: Optional[str] = None) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        return room.shuffle_deck(player_id)

    def peek_deck(self, room_code: str, count: int) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        return ActionResult.ok(cards=room.peek_deck(count))

    def rearrange_deck(self, room_code: str, cards, player_id: Optional[str] = None) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        return room.rearrange_deck(cards, player_id)

    def give_favor_card(self, room_code: str, giver_id: str, receiver_id: str, card_id: str) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        return room.give_favor_card(giver_id, receiver_id, card_id)

    def get_combo_target_cards(self, room_code: str, player_id: str) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        return room.get_combo_target_cards(player_id)

    def take_cat_combo_card(self, room_code: str, player_id: str, card_id: str) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        return room.take_cat_combo_card(player_id, card_id)

    def set_player_connected(self, room_code: str, player_id: str, connected: bool) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        return room.set_player_connected(player_id, connected)

    def eliminate_disconnected_player(self, room_code: str, player_id: str) -> ActionResult:
        room = self.get_room(room_code)
        if room is None:
            return _room_not_found(room_code)
        result = room.eliminate_disconnected_player(player_id)
        if result.success and result.data.get("eliminated"):
            logger.info(f"Player {player_id} eliminated from room {room_code} after disconnecting")
        return result

    def check_game_end(self, room_code: str) -> Optional[Player]:
        room = self.get_room(room_code)
        if room is None:
            return None
        winner = room.check_game_end()
        if winner is not None:
            logger.info(f"Game in room {room_code} won by {winner.name}")
        return winner

    def get_sanitized_game_state(self, room_code: str, viewer_id: Optional[str]) -> Optional[Dict]:
        room = self.get_room(room_code)
        return room.get_sanitized_game_state(viewer_id) if room else None

    # Housekeeping

    def cleanup_empty_rooms(self) -> List[str]:
        """Drop rooms that no longer have any players."""
        stale = [code for code, room in list(self._rooms.items()) if not room.players]
        for code in stale:
            self.remove_room(code)
        return stale

    def cleanup_ended_games(self, now: Optional[float] = None) -> List[str]:
        """Drop finished games once their grace period has passed or nobody is connected."""
        now = time.time() if now is None else now
        grace = self.rules.ended_room_grace_seconds
        stale = [code for code, room in list(self._rooms.items())
                 if room.phase == GamePhase.GAME_END
                 and (not room.has_connected_players()
                      or (room.state.ended_at is not None
                          and now - room.state.ended_at >= grace))]
        for code in stale:
            self.remove_room(code)
        return stale

    def cleanup_idle_games(self, now: Optional[float] = None) -> List[str]:
        now = time.time() if now is None else now
        limit = self.rules.idle_room_seconds
        stale = [code for code, room in list(self._rooms.items())
                 if now - room.state.last_activity_at >= limit]
        for code in stale:
            self.remove_room(code)
        return stale

    def cleanup(self, now: Optional[float] = None) -> List[str]:
        removed = self.cleanup_empty_rooms()
        removed += self.cleanup_ended_games(now)
        removed += self.cleanup_idle_games(now)
        if removed:
            logger.info(f"Cleanup removed {len(removed)} room(s): {', '.join(removed)}")
        return removed
