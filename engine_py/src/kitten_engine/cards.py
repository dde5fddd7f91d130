"""
Card catalog: static definitions for every card type.
"""

from dataclasses import dataclass
from typing import Dict, List

from .constants import REGULAR_CAT_TYPES, CardCategory, CardType


@dataclass(frozen=True)
class CardDefinition:
    type: CardType
    name: str
    category: CardCategory
    can_be_noped: bool
    description: str


_CAT_DESCRIPTION = "Powerless alone. Play pairs or combos for special abilities."

CARD_DEFINITIONS: Dict[CardType, CardDefinition] = {
    CardType.EXPLODING_KITTEN: CardDefinition(
        CardType.EXPLODING_KITTEN, "Exploding Kitten", CardCategory.LETHAL, False,
        "You must show this card immediately. Unless you have a Defuse Card, you're dead.",
    ),
    CardType.DEFUSE: CardDefinition(
        CardType.DEFUSE, "Defuse", CardCategory.DEFENSE, False,
        "If you drew an Exploding Kitten, you can play this card instead of dying.",
    ),
    CardType.NOPE: CardDefinition(
        CardType.NOPE, "Nope", CardCategory.COUNTER, True,
        "Stop any action except Exploding Kitten or Defuse.",
    ),
    CardType.ATTACK: CardDefinition(
        CardType.ATTACK, "Attack", CardCategory.OFFENSIVE, True,
        "End your turn without drawing. Force the next player to take 2 turns.",
    ),
    CardType.SKIP: CardDefinition(
        CardType.SKIP, "Skip", CardCategory.DEFENSIVE, True,
        "End your turn without drawing a card.",
    ),
    CardType.FAVOR: CardDefinition(
        CardType.FAVOR, "Favor", CardCategory.INTERACTIVE, True,
        "Force any other player to give you a card from their hand.",
    ),
    CardType.SHUFFLE: CardDefinition(
        CardType.SHUFFLE, "Shuffle", CardCategory.UTILITY, True,
        "Shuffle the Draw Pile thoroughly.",
    ),
    CardType.SEE_THE_FUTURE: CardDefinition(
        CardType.SEE_THE_FUTURE, "See the Future", CardCategory.TACTICAL, True,
        "Privately view the top 3 cards from the Draw Pile.",
    ),
    CardType.ALTER_THE_FUTURE: CardDefinition(
        CardType.ALTER_THE_FUTURE, "Alter the Future", CardCategory.TACTICAL, True,
        "Privately view AND rearrange the top 3 cards.",
    ),
    CardType.CAT_TACO: CardDefinition(
        CardType.CAT_TACO, "Taco Cat", CardCategory.CAT, True, _CAT_DESCRIPTION,
    ),
    CardType.CAT_HAIRY_POTATO: CardDefinition(
        CardType.CAT_HAIRY_POTATO, "Hairy Potato Cat", CardCategory.CAT, True, _CAT_DESCRIPTION,
    ),
    CardType.CAT_RAINBOW_RALPHING: CardDefinition(
        CardType.CAT_RAINBOW_RALPHING, "Rainbow-Ralphing Cat", CardCategory.CAT, True, _CAT_DESCRIPTION,
    ),
    CardType.CAT_BEARD: CardDefinition(
        CardType.CAT_BEARD, "Beard Cat", CardCategory.CAT, True, _CAT_DESCRIPTION,
    ),
    CardType.CAT_CATTERMELON: CardDefinition(
        CardType.CAT_CATTERMELON, "Cattermelon", CardCategory.CAT, True, _CAT_DESCRIPTION,
    ),
    CardType.FERAL_CAT: CardDefinition(
        CardType.FERAL_CAT, "Feral Cat", CardCategory.CAT, True,
        "Wild card! Counts as ANY cat card in combos.",
    ),
}


def get_card_definition(card_type: CardType) -> CardDefinition:
    return CARD_DEFINITIONS[CardType(card_type)]


def is_cat_card(card_type: CardType) -> bool:
    return get_card_definition(card_type).category == CardCategory.CAT


def get_regular_cat_types() -> List[CardType]:
    """All cat card types except the feral wild card."""
    return list(REGULAR_CAT_TYPES)


def serialize_card_definition(definition: CardDefinition) -> dict:
    return {
        "type": definition.type.value,
        "name": definition.name,
        "category": definition.category.value,
        "can_be_noped": definition.can_be_noped,
        "description": definition.description,
    }
