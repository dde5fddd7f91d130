"""Game constants and enums"""

from enum import Enum


class CardType(str, Enum):
    EXPLODING_KITTEN = 'exploding-kitten'
    DEFUSE = 'defuse'
    NOPE = 'nope'
    ATTACK = 'attack'
    SKIP = 'skip'
    FAVOR = 'favor'
    SHUFFLE = 'shuffle'
    SEE_THE_FUTURE = 'see-the-future'
    ALTER_THE_FUTURE = 'alter-the-future'
    CAT_TACO = 'cat-taco'
    CAT_HAIRY_POTATO = 'cat-hairy-potato'
    CAT_RAINBOW_RALPHING = 'cat-rainbow-ralphing'
    CAT_BEARD = 'cat-beard'
    CAT_CATTERMELON = 'cat-cattermelon'
    FERAL_CAT = 'feral-cat'


class CardCategory(str, Enum):
    LETHAL = 'lethal'
    DEFENSE = 'defense'
    COUNTER = 'counter'
    OFFENSIVE = 'offensive'
    DEFENSIVE = 'defensive'
    INTERACTIVE = 'interactive'
    TACTICAL = 'tactical'
    UTILITY = 'utility'
    CAT = 'cat'


class GamePhase(str, Enum):
    LOBBY = 'lobby'
    PLAYING = 'playing'
    GAME_END = 'gameEnd'


class TurnStage(str, Enum):
    """What the current player may do next."""
    ACTION = 'action'                    # play cards, draw, or end turn
    AWAITING_DEFUSE = 'awaiting_defuse'  # drew a kitten while holding a defuse
    AWAITING_END = 'awaiting_end'        # drew (or defused); only end_turn is accepted


class DeckConfiguration(str, Enum):
    SMALL = 'small'
    MEDIUM = 'medium'
    FULL = 'full'


class PendingActionType(str, Enum):
    FAVOR = 'favor'
    CAT_COMBO = 'cat-combo'
    SHUFFLE = 'shuffle'
    SEE_THE_FUTURE = 'see-the-future'
    ALTER_THE_FUTURE = 'alter-the-future'
    ATTACK = 'attack'
    SKIP = 'skip'


class PendingStatus(str, Enum):
    WAITING = 'waiting'
    RESOLVED = 'resolved'


class ComboType(str, Enum):
    TWO_KIND = '2-kind'
    THREE_KIND = '3-kind'
    FIVE_DIFF = '5-diff'


class DrawOutcome(str, Enum):
    DRAWN = 'drawn'
    NEEDS_DEFUSE = 'needs_defuse'
    ELIMINATED = 'eliminated'
    EMPTY_DECK = 'empty_deck'


# Game log entry types
LOG_GAME_CREATED = 'game-created'
LOG_PLAYER_JOINED = 'player-joined'
LOG_PLAYER_LEFT = 'player-left'
LOG_PLAYER_DISCONNECTED = 'player-disconnected'
LOG_GAME_STARTED = 'game-started'
LOG_TURN_CHANGED = 'turn-changed'
LOG_CARD_PLAYED = 'card-played'
LOG_CARD_DRAWN = 'card-drawn'
LOG_PLAYER_EXPLODED = 'player-exploded'
LOG_PLAYER_DEFUSED = 'player-defused'
LOG_ACTION_RESOLVED = 'action-resolved'
LOG_GAME_ENDED = 'game-ended'

# Base pool composition (excluding kittens, defuses and feral cats)
ACTION_CARD_COUNTS = {
    CardType.ATTACK: 4,
    CardType.SKIP: 4,
    CardType.FAVOR: 4,
    CardType.SHUFFLE: 4,
    CardType.SEE_THE_FUTURE: 5,
    CardType.NOPE: 5,
    CardType.ALTER_THE_FUTURE: 3,
}
CARDS_PER_CAT_TYPE = 4

REGULAR_CAT_TYPES = [
    CardType.CAT_TACO,
    CardType.CAT_HAIRY_POTATO,
    CardType.CAT_RAINBOW_RALPHING,
    CardType.CAT_BEARD,
    CardType.CAT_CATTERMELON,
]

# (min players, max players, configuration, feral cats)
DECK_BANDS = [
    (2, 3, DeckConfiguration.SMALL, 2),
    (4, 7, DeckConfiguration.MEDIUM, 4),
    (8, 10, DeckConfiguration.FULL, 6),
]
DEFAULT_DECK_CONFIGURATION = DeckConfiguration.MEDIUM
DEFAULT_FERAL_CATS = 4

ROOM_CODE_ALPHABET = 'ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789'
ROOM_CODE_LENGTH = 6
