"""
State serialization and sanitization utilities.
"""

from typing import Any, Dict, Optional

from .constants import PendingActionType
from .models import Card, GameLogEntry, PendingAction, Player, RoomState


def serialize_card(card: Card) -> Dict[str, Any]:
    return {"id": card.id, "type": card.type.value, "known": True}


HIDDEN_CARD_PREFIX = "hidden-"


def hide_card(index: int) -> Dict[str, Any]:
    """
    Face-down card at a position.

    The id is only a slot number, so a card seen earlier cannot be
    recognised again by its real id.
    """
    return {"id": f"{HIDDEN_CARD_PREFIX}{index}", "known": False}


def hidden_card_index(card_id: str) -> Optional[int]:
    """Slot number of a face-down card id, or None if it is not one."""
    if not isinstance(card_id, str) or not card_id.startswith(HIDDEN_CARD_PREFIX):
        return None
    suffix = card_id[len(HIDDEN_CARD_PREFIX):]
    return int(suffix) if suffix.isdigit() else None


def sanitize_state(state: RoomState, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Sanitize room state for transmission to one client.

    The viewer sees their own hand and defuse count. Other players show up
    with face-down cards and an unknown defuse count, and the draw pile is
    reduced to its size.

    Args:
        state: Room state to sanitize
        viewer_id: ID of the player viewing the state (to show their cards)

    Returns:
        Sanitized state dictionary safe for JSON transmission
    """
    return {
        "room_code": state.room_code,
        "host_id": state.host_id,
        "version": state.version,
        "phase": state.phase.value,
        "turn_stage": state.turn_stage.value,
        "current_turn_player_id": state.current_turn_player_id,
        "players": [_sanitize_player(player, viewer_id) for player in state.players],
        "deck_count": len(state.deck),
        "discard_pile": [serialize_card(card) for card in state.discard_pile],
        "pending_action": _sanitize_pending(state.pending_action, viewer_id),
        "pending_defuse_player_id": state.pending_defuse.player_id if state.pending_defuse else None,
        "deck_configuration": state.deck_configuration.value,
        "winner_id": state.winner_id,
        "game_log": [serialize_log_entry(entry) for entry in state.game_log],
        "created_at": state.created_at,
        "last_activity_at": state.last_activity_at,
        "ended_at": state.ended_at,
    }


def _sanitize_player(player: Player, viewer_id: Optional[str]) -> Dict[str, Any]:
    is_viewer = player.id == viewer_id
    return {
        "id": player.id,
        "name": player.name,
        "hand": ([serialize_card(c) for c in player.hand] if is_viewer
                 else [hide_card(i) for i in range(len(player.hand))]),
        "hand_count": len(player.hand),
        "is_eliminated": player.is_eliminated,
        "is_connected": player.is_connected,
        "is_host": player.is_host,
        "defuse_count": player.defuse_count if is_viewer else None,
        "pending_turns": player.pending_turns,
    }


def _sanitize_pending(pending: Optional[PendingAction], viewer_id: Optional[str]) -> Optional[Dict[str, Any]]:
    if pending is None:
        return None
    card_ids = list(pending.card_ids)
    # Which cards sit on top of the deck is only the initiator's business
    if pending.type == PendingActionType.ALTER_THE_FUTURE and pending.initiator_id != viewer_id:
        card_ids = []
    return {
        "action_id": pending.action_id,
        "type": pending.type.value,
        "initiator_id": pending.initiator_id,
        "target_player_id": pending.target_player_id,
        "card_ids": card_ids,
        "combo_type": pending.combo_type.value if pending.combo_type else None,
        "status": pending.status.value,
        "created_at": pending.created_at,
    }


def serialize_log_entry(entry: GameLogEntry) -> Dict[str, Any]:
    return {
        "id": entry.id,
        "timestamp": entry.timestamp,
        "type": entry.type,
        "message": entry.message,
        "player_id": entry.player_id,
        "player_name": entry.player_name,
        "card_type": entry.card_type.value if entry.card_type else None,
        "target_player_id": entry.target_player_id,
        "target_player_name": entry.target_player_name,
    }


def serialize_player_for_list(player: Player) -> Dict[str, Any]:
    """Serialize player for lobby player list."""
    return {
        "id": player.id,
        "name": player.name,
        "is_host": player.is_host,
        "is_connected": player.is_connected,
    }


def get_public_room_info(state: RoomState) -> Dict[str, Any]:
    """Get public information about a room for listings."""
    return {
        "room_code": state.room_code,
        "phase": state.phase.value,
        "player_count": len(state.players),
        "players": [serialize_player_for_list(player) for player in state.players],
    }
