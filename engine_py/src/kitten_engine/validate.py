"""
Precondition checks for turn actions and card plays.
"""

from typing import Iterable, List, Optional

from .cards import is_cat_card
from .constants import CardType, ComboType, GamePhase, PendingStatus, TurnStage
from .errors import (
    ACTION_PENDING,
    CARD_NOT_IN_HAND,
    GAME_NOT_IN_PROGRESS,
    INVALID_ACTION_DATA,
    INVALID_COMBO,
    INVALID_TARGET,
    MUST_DEFUSE,
    MUST_DRAW,
    MUST_END_TURN,
    NOT_YOUR_TURN,
    PLAYER_NOT_FOUND,
)
from .models import Card, CatComboData, FavorData, Player, RoomState


class ValidationResult:
    """Result of validating an action."""

    def __init__(
        self,
        valid: bool,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        cards: Optional[List[Card]] = None,
        combo: Optional[ComboType] = None
    ):
        self.valid = valid
        self.error_code = error_code
        self.error_message = error_message
        self.cards = cards or []
        self.combo = combo

    @classmethod
    def success(cls, cards: Optional[List[Card]] = None, combo: Optional[ComboType] = None) -> 'ValidationResult':
        """Create a successful validation result."""
        return cls(valid=True, cards=cards, combo=combo)

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'ValidationResult':
        """Create an error validation result."""
        return cls(valid=False, error_code=error_code, error_message=error_message)


# Data shape each card type accepts from play_card; None means no data
CARD_DATA_TYPES = {
    CardType.FAVOR: FavorData,
}


def validate_turn(
    state: RoomState,
    player_id: str,
    allowed_stages: Iterable[TurnStage] = (TurnStage.ACTION,)
) -> ValidationResult:
    """
    Check that `player_id` may act right now.

    Args:
        state: Current room state
        player_id: Player attempting the action
        allowed_stages: Turn stages in which the action is legal

    Returns:
        ValidationResult with validation outcome
    """
    if state.phase != GamePhase.PLAYING:
        return ValidationResult.error(
            GAME_NOT_IN_PROGRESS,
            f"Game is not in progress (current: {state.phase.value})"
        )

    player = state.get_player(player_id)
    if not player:
        return ValidationResult.error(PLAYER_NOT_FOUND, "Player not found")
    if player.is_eliminated or state.current_turn_player_id != player_id:
        return ValidationResult.error(NOT_YOUR_TURN, "Not your turn")

    pending = state.pending_action
    if pending and pending.status == PendingStatus.WAITING:
        return ValidationResult.error(
            ACTION_PENDING,
            f"Waiting for {pending.type.value} to be resolved"
        )

    if state.turn_stage not in allowed_stages:
        if state.turn_stage == TurnStage.AWAITING_DEFUSE:
            return ValidationResult.error(MUST_DEFUSE, "You must defuse the Exploding Kitten")
        if state.turn_stage == TurnStage.ACTION:
            return ValidationResult.error(MUST_DRAW, "Draw a card to end your turn")
        return ValidationResult.error(MUST_END_TURN, "You already drew a card, end your turn")

    return ValidationResult.success()


def validate_ownership(player: Player, card_ids: List[str]) -> ValidationResult:
    """Check the player holds every card, each listed once."""
    if not card_ids:
        return ValidationResult.error(CARD_NOT_IN_HAND, "No cards selected")
    if len(set(card_ids)) != len(card_ids):
        return ValidationResult.error(INVALID_COMBO, "The same card was selected twice")

    cards = []
    for card_id in card_ids:
        card = player.find_card(card_id)
        if card is None:
            return ValidationResult.error(CARD_NOT_IN_HAND, f"Card {card_id} is not in your hand")
        cards.append(card)
    return ValidationResult.success(cards=cards)


def detect_combo(card_types: List[CardType]) -> Optional[ComboType]:
    """
    Detect the cat combo formed by the given card types.

    Feral cats are wild and stand in for any regular cat.

    Args:
        card_types: Types of the cards being played together

    Returns:
        The combo type, or None if the cards do not form a combo
    """
    if not card_types or not all(is_cat_card(t) for t in card_types):
        return None

    regular = [t for t in card_types if t != CardType.FERAL_CAT]
    if len(card_types) in (2, 3):
        if len(set(regular)) <= 1:
            return ComboType.TWO_KIND if len(card_types) == 2 else ComboType.THREE_KIND
        return None
    if len(card_types) == 5 and len(set(regular)) == len(regular):
        return ComboType.FIVE_DIFF
    return None


def validate_target(
    state: RoomState,
    initiator_id: str,
    target_id: Optional[str],
    needs_cards: bool = False
) -> ValidationResult:
    """Check a targeted effect names another player who is still in the game."""
    if not target_id:
        return ValidationResult.error(INVALID_ACTION_DATA, "Target player required")
    target = state.get_player(target_id)
    if not target:
        return ValidationResult.error(PLAYER_NOT_FOUND, "Target player not found")
    if target.id == initiator_id:
        return ValidationResult.error(INVALID_TARGET, "You cannot target yourself")
    if target.is_eliminated:
        return ValidationResult.error(INVALID_TARGET, f"{target.name} is out of the game")
    if needs_cards and not target.hand:
        return ValidationResult.error(INVALID_TARGET, f"{target.name} has no cards")
    return ValidationResult.success()


def validate_play(state: RoomState, player_id: str, card_ids: List[str], data=None) -> ValidationResult:
    """
    Validate a card play attempt.

    Args:
        state: Current room state
        player_id: ID of player attempting the play
        card_ids: One card id, or several for a cat combo
        data: FavorData / CatComboData matching the card, or None

    Returns:
        ValidationResult carrying the resolved cards and combo type
    """
    result = validate_turn(state, player_id)
    if not result.valid:
        return result

    player = state.get_player(player_id)
    result = validate_ownership(player, card_ids)
    if not result.valid:
        return result
    cards = result.cards

    if len(cards) == 1:
        card = cards[0]
        expected = CARD_DATA_TYPES.get(card.type)
        if expected is None:
            if data is not None:
                return ValidationResult.error(
                    INVALID_ACTION_DATA,
                    f"{card.type.value} does not take extra data"
                )
            return ValidationResult.success(cards=cards)
        if not isinstance(data, expected):
            return ValidationResult.error(INVALID_ACTION_DATA, "Target player required")
        target = validate_target(state, player_id, data.target_player_id)
        if not target.valid:
            return target
        return ValidationResult.success(cards=cards)

    combo = detect_combo([card.type for card in cards])
    if combo is None:
        return ValidationResult.error(
            INVALID_COMBO,
            "Only 2 or 3 matching cats, or 5 different cats, can be played together"
        )
    if data is None:
        data = CatComboData()
    elif not isinstance(data, CatComboData):
        return ValidationResult.error(INVALID_ACTION_DATA, "Cat combos take combo data")

    if combo == ComboType.FIVE_DIFF:
        if not state.discard_pile:
            return ValidationResult.error(INVALID_COMBO, "The discard pile is empty")
        return ValidationResult.success(cards=cards, combo=combo)

    target = validate_target(state, player_id, data.target_player_id, needs_cards=combo == ComboType.TWO_KIND)
    if not target.valid:
        return target
    if combo == ComboType.THREE_KIND:
        if data.requested_card_type is None:
            return ValidationResult.error(INVALID_ACTION_DATA, "Name the card type you want")
        try:
            CardType(data.requested_card_type)
        except ValueError:
            return ValidationResult.error(
                INVALID_ACTION_DATA,
                f"Unknown card type: {data.requested_card_type}"
            )
    return ValidationResult.success(cards=cards, combo=combo)
