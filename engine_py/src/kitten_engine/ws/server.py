"""
FastAPI WebSocket server for the Exploding Kittens room engine.
"""

import asyncio
import logging
import uuid
from contextlib import asynccontextmanager, suppress
from typing import Any, Dict, Optional, Set, Tuple

import orjson
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..constants import CardType, DrawOutcome, GamePhase, PendingActionType
from ..errors import (
    INTERNAL_ERROR,
    INVALID_EVENT,
    PLAYER_NOT_FOUND,
    ROOM_NOT_FOUND,
    GameError,
    raise_error,
)
from ..models import ActionResult, Card, CatComboData, FavorData
from ..room_manager import RoomManager
from ..rules import rules_from_env
from ..serialization import serialize_card
from .events import (
    AlterTheFutureEvent,
    CreateGameEvent,
    DefuseKittenEvent,
    EventType,
    GiveFavorCardEvent,
    JoinGameEvent,
    PlayCardEvent,
    StartGameEvent,
    TakeComboCardEvent,
    create_combo_targets_event,
    create_error_event,
    create_future_event,
    create_game_end_event,
    create_joined_event,
    create_result_event,
    create_state_full_event,
    parse_inbound_event,
)

logger = logging.getLogger(__name__)

rules = rules_from_env()
room_manager = RoomManager(rules)


class ConnectionManager:
    """Manages WebSocket connections and per-player broadcasting."""

    def __init__(self):
        self.room_connections: Dict[str, Set[WebSocket]] = {}
        self.connection_players: Dict[WebSocket, str] = {}
        self.connection_rooms: Dict[WebSocket, str] = {}

    def connect(self, websocket: WebSocket, room_code: str, player_id: str):
        """Attach an accepted connection to a player seat."""
        self.room_connections.setdefault(room_code, set()).add(websocket)
        self.connection_players[websocket] = player_id
        self.connection_rooms[websocket] = room_code
        logger.info(f"Player {player_id} connected to room {room_code}")

    def disconnect(self, websocket: WebSocket) -> Tuple[Optional[str], Optional[str]]:
        player_id = self.connection_players.pop(websocket, None)
        room_code = self.connection_rooms.pop(websocket, None)

        if room_code and room_code in self.room_connections:
            self.room_connections[room_code].discard(websocket)
            if not self.room_connections[room_code]:
                del self.room_connections[room_code]

        if player_id:
            logger.info(f"Player {player_id} disconnected from room {room_code}")
        return player_id, room_code

    def drop_room(self, room_code: str):
        for websocket in self.room_connections.pop(room_code, set()):
            self.connection_players.pop(websocket, None)
            self.connection_rooms.pop(websocket, None)

    def membership(self, websocket: WebSocket) -> Tuple[Optional[str], Optional[str]]:
        return self.connection_players.get(websocket), self.connection_rooms.get(websocket)

    def connection_count(self) -> int:
        return sum(len(conns) for conns in self.room_connections.values())

    async def send(self, websocket: WebSocket, event: BaseModel):
        await websocket.send_text(orjson.dumps(event.model_dump(mode="json")).decode())

    async def broadcast(self, room_code: str, event: BaseModel):
        for websocket in list(self.room_connections.get(room_code, ())):
            try:
                await self.send(websocket, event)
            except Exception as e:
                logger.error(f"Error broadcasting to room {room_code}: {e}")
                self.disconnect(websocket)

    async def broadcast_state(self, room_code: str):
        """Send every member its own sanitized view of the room."""
        for websocket in list(self.room_connections.get(room_code, ())):
            player_id = self.connection_players.get(websocket)
            state = room_manager.get_sanitized_game_state(room_code, player_id)
            if state is None:
                return
            try:
                await self.send(websocket, create_state_full_event(state))
            except Exception as e:
                logger.error(f"Error sending state to {player_id}: {e}")
                self.disconnect(websocket)


manager = ConnectionManager()
_background_tasks: Set[asyncio.Task] = set()


async def _cleanup_loop():
    while True:
        await asyncio.sleep(rules.cleanup_interval_seconds)
        for room_code in room_manager.cleanup():
            manager.drop_room(room_code)


@asynccontextmanager
async def lifespan(app: FastAPI):
    task = asyncio.create_task(_cleanup_loop())
    try:
        yield
    finally:
        task.cancel()
        with suppress(asyncio.CancelledError):
            await task


# FastAPI app
app = FastAPI(title="Exploding Kittens Room Engine", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "rooms": len(room_manager),
        "connections": manager.connection_count(),
    }


@app.get("/room/{room_code}")
async def room_info(room_code: str):
    info = room_manager.get_room_info(room_code.upper())
    if info is None:
        raise HTTPException(status_code=404, detail="Room not found")
    return info


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """Main WebSocket endpoint."""
    await websocket.accept()
    logger.info("WebSocket connection accepted")

    try:
        while True:
            raw_data = await websocket.receive_text()
            try:
                event = parse_inbound_event(orjson.loads(raw_data))
                await EVENT_HANDLERS[event.type](websocket, event)
            except GameError as e:
                logger.info(f"Rejected event: [{e.code}] {e.message}")
                await manager.send(websocket, create_error_event(e.code, e.message))
            except ValueError as e:
                await manager.send(websocket, create_error_event(INVALID_EVENT, str(e)))
            except WebSocketDisconnect:
                raise
            except Exception:
                logger.exception("Error handling event")
                await manager.send(websocket, create_error_event(INTERNAL_ERROR, "Internal server error"))
    except WebSocketDisconnect:
        logger.info("WebSocket disconnected")
    finally:
        player_id, room_code = manager.disconnect(websocket)
        if player_id and room_code:
            await handle_disconnect(room_code, player_id)


# Helpers

def _require_membership(websocket: WebSocket) -> Tuple[str, str]:
    player_id, room_code = manager.membership(websocket)
    if not player_id or not room_code:
        raise GameError(PLAYER_NOT_FOUND, "Not in a room")
    if room_code not in room_manager:
        raise GameError(ROOM_NOT_FOUND, f"Room {room_code} not found")
    return player_id, room_code


def _check(result) -> Any:
    if not result.success:
        raise_error(result.error_code, result.error_message)
    return result


def _jsonable(value: Any) -> Any:
    if isinstance(value, Card):
        return serialize_card(value)
    if isinstance(value, list):
        return [_jsonable(v) for v in value]
    if hasattr(value, "value"):
        return value.value
    return value


def _result_data(result: ActionResult) -> Dict[str, Any]:
    return {key: _jsonable(value) for key, value in result.data.items()}


async def publish(room_code: str, check_end: bool = False):
    """Broadcast fresh state; optionally settle the game first."""
    winner = room_manager.check_game_end(room_code) if check_end else None
    await manager.broadcast_state(room_code)
    if winner is not None:
        await manager.broadcast(room_code, create_game_end_event(winner.id, winner.name))


async def _send_future(websocket: WebSocket, room_code: str):
    result = _check(room_manager.peek_deck(room_code, rules.future_peek_count))
    await manager.send(websocket, create_future_event([serialize_card(c) for c in result.data["cards"]]))


# Event handlers

async def handle_create_game(websocket: WebSocket, event: CreateGameEvent):
    if manager.membership(websocket)[0]:
        raise GameError(INVALID_EVENT, "Already in a room")
    player_id = str(uuid.uuid4())
    room = room_manager.create_room(player_id, event.name)
    manager.connect(websocket, room.room_code, player_id)
    await manager.send(websocket, create_joined_event(player_id, room.room_code))
    await publish(room.room_code)


async def handle_join_game(websocket: WebSocket, event: JoinGameEvent):
    if manager.membership(websocket)[0]:
        raise GameError(INVALID_EVENT, "Already in a room")
    player_id = str(uuid.uuid4())
    _check(room_manager.add_player(event.room_code, player_id, event.name))
    manager.connect(websocket, event.room_code, player_id)
    await manager.send(websocket, create_joined_event(player_id, event.room_code))
    await publish(event.room_code)


async def handle_leave_game(websocket: WebSocket, event):
    player_id, room_code = _require_membership(websocket)
    room = room_manager.get_room(room_code)
    if room.phase == GamePhase.LOBBY:
        _check(room_manager.remove_player(room_code, player_id))
    elif room.phase == GamePhase.PLAYING:
        _check(room_manager.eliminate_disconnected_player(room_code, player_id))
    manager.disconnect(websocket)
    await manager.send(websocket, create_result_event(event.type))
    if room_code in room_manager:
        await publish(room_code, check_end=True)


async def handle_start_game(websocket: WebSocket, event: StartGameEvent):
    player_id, room_code = _require_membership(websocket)
    _check(room_manager.start_game(
        room_code,
        defuse_count=event.defuse_count,
        exploding_kitten_count=event.exploding_kitten_count,
        requested_by=player_id,
    ))
    await publish(room_code)


async def handle_play_card(websocket: WebSocket, event: PlayCardEvent):
    player_id, room_code = _require_membership(websocket)
    room = room_manager.get_room(room_code)

    data = None
    if len(event.card_ids) > 1:
        data = CatComboData(
            target_player_id=event.target_player_id,
            requested_card_type=event.requested_card_type,
        )
    else:
        player = room.get_player(player_id)
        card = player.find_card(event.card_ids[0]) if player else None
        if card is not None and card.type == CardType.FAVOR:
            data = FavorData(target_player_id=event.target_player_id)

    result = _check(room_manager.play_card(room_code, player_id, event.card_ids, data))
    if result.requires_action == PendingActionType.SHUFFLE:
        _check(room_manager.shuffle_deck(room_code, player_id))
    requires_action = result.requires_action.value if result.requires_action else None
    await manager.send(websocket, create_result_event(event.type, requires_action, _result_data(result)))
    if result.requires_action in (PendingActionType.SEE_THE_FUTURE, PendingActionType.ALTER_THE_FUTURE):
        await _send_future(websocket, room_code)
    await publish(room_code)


async def handle_draw_card(websocket: WebSocket, event):
    player_id, room_code = _require_membership(websocket)
    result = _check(room_manager.draw_card(room_code, player_id))

    if result.outcome in (DrawOutcome.DRAWN, DrawOutcome.EMPTY_DECK):
        _check(room_manager.end_turn(room_code, player_id))

    data = {
        "outcome": result.outcome.value,
        "card": serialize_card(result.card) if result.card else None,
    }
    await manager.send(websocket, create_result_event(event.type, data=data))
    await publish(room_code, check_end=result.exploded)


async def handle_defuse_kitten(websocket: WebSocket, event: DefuseKittenEvent):
    player_id, room_code = _require_membership(websocket)
    _check(room_manager.defuse_kitten(room_code, player_id, event.insert_position))
    _check(room_manager.end_turn(room_code, player_id))
    await manager.send(websocket, create_result_event(event.type))
    await publish(room_code)


async def handle_alter_the_future(websocket: WebSocket, event: AlterTheFutureEvent):
    player_id, room_code = _require_membership(websocket)
    _check(room_manager.rearrange_deck(room_code, event.card_ids, player_id))
    await manager.send(websocket, create_result_event(event.type))
    await publish(room_code)


async def handle_give_favor_card(websocket: WebSocket, event: GiveFavorCardEvent):
    player_id, room_code = _require_membership(websocket)
    _check(room_manager.give_favor_card(room_code, player_id, event.requester_id, event.card_id))
    await manager.send(websocket, create_result_event(event.type))
    await publish(room_code)


async def handle_get_combo_target_cards(websocket: WebSocket, event):
    player_id, room_code = _require_membership(websocket)
    result = _check(room_manager.get_combo_target_cards(room_code, player_id))
    await manager.send(websocket, create_combo_targets_event(
        result.data["cards"], result.data["target_player_name"]
    ))


async def handle_take_combo_card(websocket: WebSocket, event: TakeComboCardEvent):
    player_id, room_code = _require_membership(websocket)
    result = _check(room_manager.take_cat_combo_card(room_code, player_id, event.card_id))
    await manager.send(websocket, create_result_event(event.type, data=_result_data(result)))
    await publish(room_code)


async def handle_request_state(websocket: WebSocket, event):
    player_id, room_code = _require_membership(websocket)
    state = room_manager.get_sanitized_game_state(room_code, player_id)
    await manager.send(websocket, create_state_full_event(state))


EVENT_HANDLERS = {
    EventType.CREATE_GAME: handle_create_game,
    EventType.JOIN_GAME: handle_join_game,
    EventType.LEAVE_GAME: handle_leave_game,
    EventType.START_GAME: handle_start_game,
    EventType.PLAY_CARD: handle_play_card,
    EventType.DRAW_CARD: handle_draw_card,
    EventType.DEFUSE_KITTEN: handle_defuse_kitten,
    EventType.ALTER_THE_FUTURE: handle_alter_the_future,
    EventType.GIVE_FAVOR_CARD: handle_give_favor_card,
    EventType.GET_COMBO_TARGET_CARDS: handle_get_combo_target_cards,
    EventType.TAKE_COMBO_CARD: handle_take_combo_card,
    EventType.REQUEST_STATE: handle_request_state,
}


# Disconnects

async def handle_disconnect(room_code: str, player_id: str):
    """
    Lobby players get a grace period before they lose their seat; players
    in a running game are eliminated straight away.
    """
    room = room_manager.get_room(room_code)
    if room is None or room.get_player(player_id) is None:
        return

    if room.phase == GamePhase.PLAYING:
        room_manager.eliminate_disconnected_player(room_code, player_id)
        await publish(room_code, check_end=True)
        return

    room_manager.set_player_connected(room_code, player_id, False)
    await publish(room_code)
    if room.phase == GamePhase.LOBBY:
        task = asyncio.create_task(_remove_after_grace(room_code, player_id))
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)


async def _remove_after_grace(room_code: str, player_id: str):
    await asyncio.sleep(rules.lobby_disconnect_grace_seconds)
    room = room_manager.get_room(room_code)
    if room is None or room.phase != GamePhase.LOBBY:
        return
    player = room.get_player(player_id)
    if player is None or player.is_connected:
        return
    room_manager.remove_player(room_code, player_id)
    logger.info(f"Removed {player.name} from room {room_code} after disconnect grace period")
    if room_code in room_manager:
        await publish(room_code)
