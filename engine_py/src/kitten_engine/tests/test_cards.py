"""
Tests for the card catalog, rule configuration and play validation helpers.
"""

import pytest
from pydantic import ValidationError
from kitten_engine.cards import (
    CARD_DEFINITIONS,
    get_card_definition,
    get_regular_cat_types,
    is_cat_card,
    serialize_card_definition,
)
from kitten_engine.constants import CardCategory, CardType, ComboType
from kitten_engine.rules import create_rules, default_rules, rules_from_env
from kitten_engine.validate import detect_combo


def test_catalog_covers_every_card_type():
    assert set(CARD_DEFINITIONS) == set(CardType)
    for card_type, definition in CARD_DEFINITIONS.items():
        assert definition.type == card_type
        assert definition.name


def test_kitten_and_defuse_cannot_be_noped():
    assert not get_card_definition(CardType.EXPLODING_KITTEN).can_be_noped
    assert not get_card_definition(CardType.DEFUSE).can_be_noped
    assert get_card_definition(CardType.ATTACK).can_be_noped


def test_cat_cards():
    assert is_cat_card(CardType.CAT_TACO)
    assert is_cat_card(CardType.FERAL_CAT)
    assert not is_cat_card(CardType.SKIP)
    regular = get_regular_cat_types()
    assert len(regular) == 5
    assert CardType.FERAL_CAT not in regular


def test_lookup_by_string():
    definition = get_card_definition("see-the-future")
    assert definition.category == CardCategory.TACTICAL


def test_serialize_card_definition():
    data = serialize_card_definition(get_card_definition(CardType.FAVOR))
    assert data["type"] == "favor"
    assert data["category"] == "interactive"
    assert data["can_be_noped"] is True


@pytest.mark.parametrize("types,expected", [
    ([CardType.CAT_TACO, CardType.CAT_TACO], ComboType.TWO_KIND),
    ([CardType.CAT_TACO, CardType.FERAL_CAT], ComboType.TWO_KIND),
    ([CardType.FERAL_CAT, CardType.FERAL_CAT], ComboType.TWO_KIND),
    ([CardType.CAT_BEARD] * 3, ComboType.THREE_KIND),
    ([CardType.CAT_BEARD, CardType.FERAL_CAT, CardType.CAT_BEARD], ComboType.THREE_KIND),
    ([CardType.CAT_TACO, CardType.CAT_BEARD, CardType.CAT_CATTERMELON,
      CardType.CAT_HAIRY_POTATO, CardType.CAT_RAINBOW_RALPHING], ComboType.FIVE_DIFF),
    ([CardType.CAT_TACO, CardType.CAT_BEARD, CardType.CAT_CATTERMELON,
      CardType.FERAL_CAT, CardType.FERAL_CAT], ComboType.FIVE_DIFF),
    ([CardType.CAT_TACO, CardType.CAT_BEARD], None),
    ([CardType.CAT_TACO, CardType.SKIP], None),
    ([CardType.CAT_TACO] * 4, None),
    ([CardType.CAT_TACO, CardType.CAT_TACO, CardType.CAT_BEARD,
      CardType.CAT_CATTERMELON, CardType.CAT_HAIRY_POTATO], None),
])
def test_detect_combo(types, expected):
    assert detect_combo(types) == expected


def test_default_rules():
    assert default_rules.min_players == 2
    assert default_rules.max_players == 10
    assert default_rules.hand_size == 7
    assert default_rules.max_log_entries == 50
    assert default_rules.validate_player_count(5)
    assert not default_rules.validate_player_count(11)


def test_create_rules_overrides():
    rules = create_rules(max_players=4, future_peek_count=2)
    assert rules.max_players == 4
    assert rules.future_peek_count == 2
    assert rules.min_players == default_rules.min_players


def test_invalid_rules_rejected():
    with pytest.raises(ValidationError):
        create_rules(min_players=5, max_players=3)
    with pytest.raises(ValidationError):
        create_rules(max_players=11)


def test_rules_from_env():
    rules = rules_from_env({"KITTEN_HAND_SIZE": "5", "KITTEN_IDLE_ROOM_SECONDS": "600", "OTHER": "x"})
    assert rules.hand_size == 5
    assert rules.idle_room_seconds == 600
    assert rules.max_players == 10
