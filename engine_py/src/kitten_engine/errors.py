# engine_py/src/kitten_engine/errors.py

class GameError(Exception):
    """Base exception for game-related errors."""
    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(f"[{code}] {message}")

# Specific error codes
NOT_YOUR_TURN = "NOT_YOUR_TURN"
CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
ROOM_FULL = "ROOM_FULL"
DUPLICATE_PLAYER = "DUPLICATE_PLAYER"
GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
GAME_NOT_IN_PROGRESS = "GAME_NOT_IN_PROGRESS"
NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
NOT_HOST = "NOT_HOST"
NO_DEFUSE_AVAILABLE = "NO_DEFUSE_AVAILABLE"
ACTION_NOT_PENDING = "ACTION_NOT_PENDING"
ACTION_PENDING = "ACTION_PENDING"
MUST_DEFUSE = "MUST_DEFUSE"
MUST_END_TURN = "MUST_END_TURN"
MUST_DRAW = "MUST_DRAW"
INVALID_TARGET = "INVALID_TARGET"
INVALID_COMBO = "INVALID_COMBO"
INVALID_ACTION_DATA = "INVALID_ACTION_DATA"
INVALID_EVENT = "INVALID_EVENT"
INTERNAL_ERROR = "INTERNAL_ERROR"

# Helper function to raise common errors
def raise_error(code: str, message: str):
    raise GameError(code, message)
