"""
Deck generation, shuffling and dealing utilities.
"""

import random
import uuid
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .constants import (
    ACTION_CARD_COUNTS,
    CARDS_PER_CAT_TYPE,
    DECK_BANDS,
    DEFAULT_DECK_CONFIGURATION,
    DEFAULT_FERAL_CATS,
    REGULAR_CAT_TYPES,
    CardType,
    DeckConfiguration,
)
from .models import Card, RoomState


@dataclass
class DealResult:
    deck: List[Card]
    hands: List[List[Card]]
    deck_configuration: DeckConfiguration
    total_cards: int


def create_card(card_type: CardType) -> Card:
    """Create a card instance with a fresh identity."""
    return Card(id=str(uuid.uuid4()), type=card_type)


def create_cards(card_type: CardType, count: int) -> List[Card]:
    return [create_card(card_type) for _ in range(count)]


def _find_band(player_count: int) -> Optional[Tuple[int, int, DeckConfiguration, int]]:
    for band in DECK_BANDS:
        if band[0] <= player_count <= band[1]:
            return band
    return None


def get_deck_configuration(player_count: int) -> DeckConfiguration:
    """Map a player count to its deck size tier (medium when out of range)."""
    band = _find_band(player_count)
    return band[2] if band else DEFAULT_DECK_CONFIGURATION


def get_feral_cat_count(player_count: int) -> int:
    band = _find_band(player_count)
    return band[3] if band else DEFAULT_FERAL_CATS


def create_base_cards(player_count: int) -> List[Card]:
    """
    Build the base pool: action cards, regular cats and the feral cats for
    the player-count band. Exploding kittens and defuses are not included.
    """
    cards = []
    for card_type, count in ACTION_CARD_COUNTS.items():
        cards.extend(create_cards(card_type, count))
    for cat_type in REGULAR_CAT_TYPES:
        cards.extend(create_cards(cat_type, CARDS_PER_CAT_TYPE))
    cards.extend(create_cards(CardType.FERAL_CAT, get_feral_cat_count(player_count)))
    return cards


def shuffle_deck(deck: List[Card], rng: Optional[random.Random] = None) -> List[Card]:
    """
    Return a uniformly shuffled copy of the deck (Fisher-Yates).

    Args:
        deck: Cards to shuffle
        rng: Optional random source for deterministic shuffling
    """
    deck_copy = list(deck)
    (rng or random).shuffle(deck_copy)
    return deck_copy


def setup_initial_game(
    player_count: int,
    extra_defuses: int = 0,
    exploding_kittens: Optional[int] = None,
    hand_size: int = 7,
    rng: Optional[random.Random] = None,
) -> DealResult:
    """
    Generate the cards for a game and deal the starting hands.

    Every hand gets `hand_size` cards from the shuffled base pool followed by
    exactly one defuse. Extra defuses and exploding kittens only go into the
    draw pile, which is shuffled again once they are added.

    Args:
        player_count: Number of players being dealt in
        extra_defuses: Defuses added to the draw pile on top of the 1 per player
        exploding_kittens: Kitten count, defaults to player_count - 1 (minimum 1)
        hand_size: Cards dealt per player before the defuse
        rng: Optional random source for deterministic games

    Returns:
        DealResult with the draw pile, hands in seat order and the deck tier
    """
    if exploding_kittens is None:
        exploding_kittens = player_count - 1
    exploding_kittens = max(1, exploding_kittens)
    extra_defuses = max(0, extra_defuses)

    pool = shuffle_deck(create_base_cards(player_count), rng)

    # Deal round-robin from the end of the shuffled pool
    hands: List[List[Card]] = [[] for _ in range(player_count)]
    for _ in range(hand_size):
        for hand in hands:
            if pool:
                hand.append(pool.pop())

    for hand in hands:
        hand.append(create_card(CardType.DEFUSE))

    draw_pile = pool + create_cards(CardType.DEFUSE, extra_defuses) + create_cards(
        CardType.EXPLODING_KITTEN, exploding_kittens
    )
    draw_pile = shuffle_deck(draw_pile, rng)

    total = len(draw_pile) + sum(len(hand) for hand in hands)
    return DealResult(
        deck=draw_pile,
        hands=hands,
        deck_configuration=get_deck_configuration(player_count),
        total_cards=total,
    )


def count_cards_in_play(state: RoomState) -> int:
    """Cards in the deck, all hands, the discard pile and an in-flight kitten."""
    total = len(state.deck) + len(state.discard_pile)
    total += sum(len(player.hand) for player in state.players)
    if state.pending_defuse is not None:
        total += 1
    return total


def validate_deck_integrity(state: RoomState) -> bool:
    """
    Validate that no card was created, lost or duplicated since the deal.

    Args:
        state: Room state to validate

    Returns:
        True if every card is accounted for exactly once
    """
    all_cards = list(state.deck) + list(state.discard_pile)
    for player in state.players:
        all_cards.extend(player.hand)
    if state.pending_defuse is not None:
        all_cards.append(state.pending_defuse.card)

    ids = [card.id for card in all_cards]
    return len(ids) == len(set(ids)) and len(ids) == state.total_cards
