"""Game models and data structures"""

import time
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from .constants import (
    CardType,
    ComboType,
    DeckConfiguration,
    DrawOutcome,
    GamePhase,
    PendingActionType,
    PendingStatus,
    TurnStage,
)


@dataclass(frozen=True)
class Card:
    id: str
    type: CardType


@dataclass
class Player:
    id: str
    name: str
    hand: List[Card] = field(default_factory=list)
    is_eliminated: bool = False
    is_connected: bool = True
    is_host: bool = False
    defuse_count: int = 0  # cached count of defuse cards in hand
    pending_turns: int = 0

    def find_card(self, card_id: str) -> Optional[Card]:
        return next((c for c in self.hand if c.id == card_id), None)

    def take_card(self, card_id: str) -> Optional[Card]:
        """Remove a card from hand by id, keeping defuse_count in sync."""
        card = self.find_card(card_id)
        if card is None:
            return None
        self.hand.remove(card)
        if card.type == CardType.DEFUSE:
            self.defuse_count -= 1
        return card

    def give_card(self, card: Card):
        self.hand.append(card)
        if card.type == CardType.DEFUSE:
            self.defuse_count += 1

    def recount_defuses(self):
        self.defuse_count = sum(1 for c in self.hand if c.type == CardType.DEFUSE)


@dataclass
class PendingAction:
    action_id: str
    type: PendingActionType
    initiator_id: str
    target_player_id: Optional[str] = None
    card_ids: List[str] = field(default_factory=list)
    combo_type: Optional[ComboType] = None
    # Real ids behind the face-down slots offered for a pair steal
    choice_ids: List[str] = field(default_factory=list)
    status: PendingStatus = PendingStatus.WAITING
    created_at: float = field(default_factory=time.time)


@dataclass
class PendingDefuse:
    """An exploding kitten drawn by a player who still has to defuse it."""
    player_id: str
    card: Card


@dataclass
class GameLogEntry:
    id: str
    timestamp: float
    type: str
    message: str
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    card_type: Optional[CardType] = None
    target_player_id: Optional[str] = None
    target_player_name: Optional[str] = None


@dataclass
class RoomState:
    room_code: str
    host_id: str
    players: List[Player] = field(default_factory=list)
    deck: List[Card] = field(default_factory=list)  # top of the deck is the end of the list
    discard_pile: List[Card] = field(default_factory=list)
    current_turn_player_id: Optional[str] = None
    phase: GamePhase = GamePhase.LOBBY
    turn_stage: TurnStage = TurnStage.ACTION
    pending_action: Optional[PendingAction] = None
    pending_defuse: Optional[PendingDefuse] = None
    deck_configuration: DeckConfiguration = DeckConfiguration.MEDIUM
    total_cards: int = 0
    winner_id: Optional[str] = None
    game_log: Deque[GameLogEntry] = field(default_factory=lambda: deque(maxlen=50))
    version: int = 0
    created_at: float = field(default_factory=time.time)
    last_activity_at: float = field(default_factory=time.time)
    ended_at: Optional[float] = None

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        return next((p for p in self.players if p.id == player_id), None)

    def active_players(self) -> List[Player]:
        return [p for p in self.players if not p.is_eliminated]


# Auxiliary play data, one shape per card effect

@dataclass
class FavorData:
    target_player_id: str


@dataclass
class CatComboData:
    target_player_id: Optional[str] = None
    requested_card_type: Optional[CardType] = None


@dataclass
class ActionResult:
    """Outcome of a mutating room operation."""
    success: bool
    error_code: Optional[str] = None
    error_message: Optional[str] = None
    requires_action: Optional[PendingActionType] = None
    data: dict = field(default_factory=dict)

    @classmethod
    def ok(cls, requires_action: Optional[PendingActionType] = None, **data) -> 'ActionResult':
        return cls(success=True, requires_action=requires_action, data=data)

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'ActionResult':
        return cls(success=False, error_code=error_code, error_message=error_message)


@dataclass
class DrawResult:
    """Outcome of drawing from the deck.

    Only DRAWN and EMPTY_DECK should be followed by end_turn; NEEDS_DEFUSE is
    followed by defuse_kitten and ELIMINATED has already moved the turn on.
    """
    success: bool
    outcome: Optional[DrawOutcome] = None
    card: Optional[Card] = None
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    @property
    def exploded(self) -> bool:
        return self.outcome == DrawOutcome.ELIMINATED

    @property
    def needs_defuse(self) -> bool:
        return self.outcome == DrawOutcome.NEEDS_DEFUSE

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'DrawResult':
        return cls(success=False, error_code=error_code, error_message=error_message)
