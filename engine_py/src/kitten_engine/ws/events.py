"""
WebSocket event models and validation.
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

from ..constants import CardType


class EventType(str, Enum):
    """Inbound event types."""
    CREATE_GAME = "create_game"
    JOIN_GAME = "join_game"
    LEAVE_GAME = "leave_game"
    START_GAME = "start_game"
    PLAY_CARD = "play_card"
    DRAW_CARD = "draw_card"
    DEFUSE_KITTEN = "defuse_kitten"
    ALTER_THE_FUTURE = "alter_the_future"
    GIVE_FAVOR_CARD = "give_favor_card"
    GET_COMBO_TARGET_CARDS = "get_combo_target_cards"
    TAKE_COMBO_CARD = "take_combo_card"
    REQUEST_STATE = "request_state"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    JOINED = "joined"
    STATE_FULL = "state_full"
    RESULT = "result"
    FUTURE = "future"
    COMBO_TARGETS = "combo_targets"
    GAME_END = "game_end"
    ERROR = "error"


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model."""
    type: EventType


class CreateGameEvent(BaseEvent):
    type: EventType = EventType.CREATE_GAME
    name: str = Field(..., min_length=1, max_length=30)


class JoinGameEvent(BaseEvent):
    """Join room event."""
    type: EventType = EventType.JOIN_GAME
    room_code: str = Field(..., min_length=1, max_length=12)
    name: str = Field(..., min_length=1, max_length=30)

    @field_validator('room_code')
    @classmethod
    def normalize_room_code(cls, v):
        return v.strip().upper()


class LeaveGameEvent(BaseEvent):
    type: EventType = EventType.LEAVE_GAME


class StartGameEvent(BaseEvent):
    """Start game event; counts are host settings."""
    type: EventType = EventType.START_GAME
    defuse_count: Optional[int] = Field(None, ge=0, le=20)
    exploding_kitten_count: Optional[int] = Field(None, ge=1, le=20)


class PlayCardEvent(BaseEvent):
    """Play one card or a cat combo."""
    type: EventType = EventType.PLAY_CARD
    card_ids: List[str] = Field(..., min_length=1, max_length=5)
    target_player_id: Optional[str] = None
    requested_card_type: Optional[CardType] = None


class DrawCardEvent(BaseEvent):
    type: EventType = EventType.DRAW_CARD


class DefuseKittenEvent(BaseEvent):
    """Defuse event; insert_position 0 is the top of the deck."""
    type: EventType = EventType.DEFUSE_KITTEN
    insert_position: int = 0


class AlterTheFutureEvent(BaseEvent):
    """Rearranged cards, the first one going on top."""
    type: EventType = EventType.ALTER_THE_FUTURE
    card_ids: List[str] = Field(..., min_length=1, max_length=5)


class GiveFavorCardEvent(BaseEvent):
    type: EventType = EventType.GIVE_FAVOR_CARD
    requester_id: str = Field(..., min_length=1)
    card_id: str = Field(..., min_length=1)


class GetComboTargetCardsEvent(BaseEvent):
    type: EventType = EventType.GET_COMBO_TARGET_CARDS


class TakeComboCardEvent(BaseEvent):
    type: EventType = EventType.TAKE_COMBO_CARD
    card_id: str = Field(..., min_length=1)


class RequestStateEvent(BaseEvent):
    """Request full state event."""
    type: EventType = EventType.REQUEST_STATE


# Union type for all inbound events
InboundEvent = Union[
    CreateGameEvent,
    JoinGameEvent,
    LeaveGameEvent,
    StartGameEvent,
    PlayCardEvent,
    DrawCardEvent,
    DefuseKittenEvent,
    AlterTheFutureEvent,
    GiveFavorCardEvent,
    GetComboTargetCardsEvent,
    TakeComboCardEvent,
    RequestStateEvent,
]

EVENT_MAP = {
    EventType.CREATE_GAME: CreateGameEvent,
    EventType.JOIN_GAME: JoinGameEvent,
    EventType.LEAVE_GAME: LeaveGameEvent,
    EventType.START_GAME: StartGameEvent,
    EventType.PLAY_CARD: PlayCardEvent,
    EventType.DRAW_CARD: DrawCardEvent,
    EventType.DEFUSE_KITTEN: DefuseKittenEvent,
    EventType.ALTER_THE_FUTURE: AlterTheFutureEvent,
    EventType.GIVE_FAVOR_CARD: GiveFavorCardEvent,
    EventType.GET_COMBO_TARGET_CARDS: GetComboTargetCardsEvent,
    EventType.TAKE_COMBO_CARD: TakeComboCardEvent,
    EventType.REQUEST_STATE: RequestStateEvent,
}


# Outbound event models
class JoinedEvent(BaseModel):
    """Sent to a connection once it created or joined a room."""
    type: OutboundEventType = OutboundEventType.JOINED
    player_id: str
    room_code: str
    timestamp: float


class StateFullEvent(BaseModel):
    """Full state event."""
    type: OutboundEventType = OutboundEventType.STATE_FULL
    state: Dict[str, Any]
    timestamp: float


class ResultEvent(BaseModel):
    """Acknowledges a successful request from this connection."""
    type: OutboundEventType = OutboundEventType.RESULT
    event: EventType
    requires_action: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)
    timestamp: float


class FutureEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.FUTURE
    cards: List[Dict[str, Any]]
    timestamp: float


class ComboTargetsEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.COMBO_TARGETS
    cards: List[Dict[str, Any]]
    target_player_name: Optional[str] = None
    timestamp: float


class GameEndEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.GAME_END
    winner_id: str
    winner_name: str
    timestamp: float


class ErrorEvent(BaseModel):
    """Error event."""
    type: OutboundEventType = OutboundEventType.ERROR
    code: str
    message: str
    timestamp: float


OutboundEvent = Union[
    JoinedEvent,
    StateFullEvent,
    ResultEvent,
    FutureEvent,
    ComboTargetsEvent,
    GameEndEvent,
    ErrorEvent,
]


def parse_inbound_event(data: Dict[str, Any]) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Raw event data from WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")
    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    event_class = EVENT_MAP.get(event_type)
    if not event_class:
        raise ValueError(f"No handler for event type: {event_type}")

    try:
        return event_class(**data)
    except Exception as e:
        raise ValueError(f"Invalid event data: {str(e)}")


def create_error_event(code: str, message: str) -> ErrorEvent:
    """Create an error event."""
    return ErrorEvent(code=code, message=message, timestamp=time.time())


def create_joined_event(player_id: str, room_code: str) -> JoinedEvent:
    return JoinedEvent(player_id=player_id, room_code=room_code, timestamp=time.time())


def create_state_full_event(state: Dict[str, Any]) -> StateFullEvent:
    """Create a full state event."""
    return StateFullEvent(state=state, timestamp=time.time())


def create_result_event(event: EventType, requires_action: Optional[str] = None,
                        data: Optional[Dict[str, Any]] = None) -> ResultEvent:
    return ResultEvent(
        event=event,
        requires_action=requires_action,
        data=data or {},
        timestamp=time.time()
    )


def create_future_event(cards: List[Dict[str, Any]]) -> FutureEvent:
    return FutureEvent(cards=cards, timestamp=time.time())


def create_combo_targets_event(cards: List[Dict[str, Any]],
                               target_player_name: Optional[str]) -> ComboTargetsEvent:
    return ComboTargetsEvent(cards=cards, target_player_name=target_player_name, timestamp=time.time())


def create_game_end_event(winner_id: str, winner_name: str) -> GameEndEvent:
    return GameEndEvent(winner_id=winner_id, winner_name=winner_name, timestamp=time.time())
