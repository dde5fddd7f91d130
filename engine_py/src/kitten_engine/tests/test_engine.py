"""
Tests for the game room state machine.
"""

import random

import pytest
from kitten_engine.constants import (
    LOG_GAME_CREATED,
    LOG_GAME_STARTED,
    CardType,
    DrawOutcome,
    GamePhase,
    PendingActionType,
    TurnStage,
)
from kitten_engine.engine import GameRoom
from kitten_engine.errors import (
    ACTION_NOT_PENDING,
    ACTION_PENDING,
    CARD_NOT_IN_HAND,
    DUPLICATE_PLAYER,
    GAME_ALREADY_STARTED,
    GAME_NOT_IN_PROGRESS,
    INVALID_ACTION_DATA,
    INVALID_COMBO,
    INVALID_TARGET,
    MUST_DEFUSE,
    MUST_DRAW,
    MUST_END_TURN,
    NOT_ENOUGH_PLAYERS,
    NOT_HOST,
    NOT_YOUR_TURN,
    PLAYER_NOT_FOUND,
    ROOM_FULL,
)
from kitten_engine.models import CatComboData, FavorData
from kitten_engine.rules import create_rules
from kitten_engine.shuffle import count_cards_in_play, create_card, validate_deck_integrity


def make_room(player_count=3, seed=7, rules=None):
    """Lobby with players p0..pN-1, p0 hosting."""
    kwargs = {"rng": random.Random(seed)}
    if rules is not None:
        kwargs["rules"] = rules
    room = GameRoom("ROOM01", "p0", "Player 0", **kwargs)
    for i in range(1, player_count):
        assert room.add_player(f"p{i}", f"Player {i}").success
    return room


def started_room(player_count=3, seed=7, **start_kwargs):
    room = make_room(player_count, seed)
    assert room.start_game(**start_kwargs).success
    return room


def set_hand(room, player_id, *card_types):
    player = room.get_player(player_id)
    player.hand = [create_card(t) for t in card_types]
    player.recount_defuses()
    return list(player.hand)


def set_deck(room, *card_types):
    """Replace the draw pile; card_types are listed top first."""
    room.state.deck = [create_card(t) for t in reversed(card_types)]
    return list(reversed(room.state.deck))


def rebase_total(room):
    room.state.total_cards = count_cards_in_play(room.state)


def take_turn(room):
    """Current player draws a harmless card and ends the turn."""
    player_id = room.state.current_turn_player_id
    room.state.deck.append(create_card(CardType.NOPE))
    rebase_total(room)
    assert room.draw_card(player_id).outcome == DrawOutcome.DRAWN
    assert room.end_turn(player_id).success


# Lobby

def test_create_room():
    room = make_room(player_count=1)
    assert room.phase == GamePhase.LOBBY
    assert room.state.host_id == "p0"
    assert room.get_player("p0").is_host
    assert room.state.game_log[0].type == LOG_GAME_CREATED


def test_add_player_duplicate():
    room = make_room(player_count=2)
    result = room.add_player("p1", "Again")
    assert not result.success
    assert result.error_code == DUPLICATE_PLAYER


def test_room_full():
    room = make_room(player_count=2, rules=create_rules(max_players=2))
    result = room.add_player("extra", "Extra Player")
    assert not result.success
    assert result.error_code == ROOM_FULL


def test_cannot_join_started_game():
    room = started_room()
    result = room.add_player("late", "Late")
    assert result.error_code == GAME_ALREADY_STARTED


def test_remove_host_transfers_host():
    room = make_room(player_count=3)
    assert room.remove_player("p0").success
    assert room.state.host_id == "p1"
    assert room.get_player("p1").is_host
    assert [p.id for p in room.players] == ["p1", "p2"]


def test_remove_player_rules():
    room = make_room(player_count=2)
    assert room.remove_player("ghost").error_code == PLAYER_NOT_FOUND
    room.start_game()
    assert room.remove_player("p1").error_code == GAME_ALREADY_STARTED


def test_start_game_insufficient_players():
    room = make_room(player_count=1)
    result = room.start_game()
    assert not result.success
    assert result.error_code == NOT_ENOUGH_PLAYERS


def test_start_game_uses_rule_player_count():
    room = make_room(player_count=2, rules=create_rules(min_players=3))
    assert room.start_game().error_code == NOT_ENOUGH_PLAYERS
    assert room.add_player("p2", "Player 2").success
    assert room.start_game().success


def test_only_host_can_start():
    room = make_room(player_count=3)
    assert room.start_game(requested_by="p1").error_code == NOT_HOST
    assert room.start_game(requested_by="p0").success


def test_start_game_deals():
    room = started_room(player_count=3)
    state = room.state

    assert state.phase == GamePhase.PLAYING
    assert state.turn_stage == TurnStage.ACTION
    assert state.current_turn_player_id == "p0"
    assert room.get_player("p0").pending_turns == 1

    for player in room.players:
        assert len(player.hand) == 8
        assert player.defuse_count == 1
        assert not any(c.type == CardType.EXPLODING_KITTEN for c in player.hand)

    kittens = [c for c in state.deck if c.type == CardType.EXPLODING_KITTEN]
    assert len(kittens) == 2
    assert validate_deck_integrity(state)
    assert any(entry.type == LOG_GAME_STARTED for entry in state.game_log)


def test_start_game_host_settings():
    room = started_room(player_count=4, defuse_count=2, exploding_kitten_count=1)
    deck_types = [c.type for c in room.state.deck]
    assert deck_types.count(CardType.EXPLODING_KITTEN) == 1
    assert deck_types.count(CardType.DEFUSE) == 2


def test_start_twice():
    room = started_room()
    assert room.start_game().error_code == GAME_ALREADY_STARTED


# Turn order

def test_turn_order_cycles_in_join_order():
    room = started_room(player_count=3)
    seen = []
    for _ in range(6):
        seen.append(room.state.current_turn_player_id)
        take_turn(room)
    assert seen == ["p0", "p1", "p2", "p0", "p1", "p2"]


def test_turn_order_skips_eliminated():
    room = started_room(player_count=3)
    room.get_player("p1").is_eliminated = True
    take_turn(room)
    assert room.state.current_turn_player_id == "p2"
    take_turn(room)
    assert room.state.current_turn_player_id == "p0"


def test_not_your_turn():
    room = started_room()
    assert room.draw_card("p1").error_code == NOT_YOUR_TURN
    assert room.end_turn("p2").error_code == NOT_YOUR_TURN
    assert room.draw_card("ghost").error_code == PLAYER_NOT_FOUND


def test_end_turn_requires_draw():
    room = started_room(player_count=2)
    set_deck(room, CardType.NOPE, CardType.SKIP)
    for _ in range(3):
        assert room.end_turn("p0").error_code == MUST_DRAW
    assert room.state.current_turn_player_id == "p0"
    assert len(room.state.deck) == 2

    assert room.draw_card("p0").outcome == DrawOutcome.DRAWN
    assert room.end_turn("p0").success
    assert room.state.current_turn_player_id == "p1"
    assert room.end_turn("p1").error_code == MUST_DRAW


def test_actions_before_start_rejected():
    room = make_room()
    assert room.draw_card("p0").error_code == GAME_NOT_IN_PROGRESS
    assert room.end_turn().error_code == GAME_NOT_IN_PROGRESS


# Drawing

def test_draw_card_then_end_turn():
    room = started_room()
    drawn = set_deck(room, CardType.SKIP, CardType.NOPE)
    result = room.draw_card("p0")

    assert result.success
    assert result.outcome == DrawOutcome.DRAWN
    assert result.card == drawn[0]
    assert result.card in room.get_player("p0").hand
    assert room.state.turn_stage == TurnStage.AWAITING_END

    skip = room.get_player("p0").find_card(drawn[0].id)
    assert room.play_card("p0", skip.id).error_code == MUST_END_TURN
    assert room.draw_card("p0").error_code == MUST_END_TURN

    assert room.end_turn("p0").success
    assert room.state.current_turn_player_id == "p1"
    assert room.state.turn_stage == TurnStage.ACTION


def test_draw_from_empty_deck():
    room = started_room()
    room.state.deck = []
    result = room.draw_card("p0")
    assert result.success
    assert result.outcome == DrawOutcome.EMPTY_DECK
    assert result.card is None
    assert room.end_turn("p0").success


def test_defuse_round_trip():
    room = started_room()
    set_deck(room, CardType.EXPLODING_KITTEN, CardType.NOPE, CardType.SKIP, CardType.ATTACK)
    deck_len = len(room.state.deck)
    player = room.get_player("p0")

    result = room.draw_card("p0")
    assert result.needs_defuse
    assert room.state.turn_stage == TurnStage.AWAITING_DEFUSE
    assert room.end_turn("p0").error_code == MUST_DEFUSE
    assert room.draw_card("p0").error_code == MUST_DEFUSE

    assert room.defuse_kitten("p0", 0).success
    assert player.defuse_count == 0
    assert not player.is_eliminated
    assert len(room.state.deck) == deck_len
    assert room.peek_deck(1)[0].type == CardType.EXPLODING_KITTEN
    assert room.state.discard_pile[-1].type == CardType.DEFUSE
    assert room.state.pending_defuse is None
    assert room.state.turn_stage == TurnStage.AWAITING_END


def _kitten_position_after_defuse(position):
    room = started_room()
    set_deck(room, CardType.EXPLODING_KITTEN, CardType.NOPE, CardType.SKIP, CardType.ATTACK)
    room.draw_card("p0")
    assert room.defuse_kitten("p0", position).success
    top_first = room.peek_deck(len(room.state.deck))
    return [c.type for c in top_first].index(CardType.EXPLODING_KITTEN)


def test_defuse_position_counts_from_top():
    assert _kitten_position_after_defuse(2) == 2


def test_defuse_position_is_clamped():
    assert _kitten_position_after_defuse(99) == 3
    assert _kitten_position_after_defuse(-5) == 0


def test_defuse_without_pending_kitten():
    room = started_room()
    result = room.defuse_kitten("p0", 0)
    assert result.error_code == ACTION_NOT_PENDING


def test_draw_kitten_without_defuse_eliminates():
    room = started_room(player_count=3)
    set_hand(room, "p0", CardType.NOPE)
    set_deck(room, CardType.EXPLODING_KITTEN, CardType.SKIP)

    result = room.draw_card("p0")
    assert result.exploded
    player = room.get_player("p0")
    assert player.is_eliminated
    assert player in room.players
    assert room.state.discard_pile[-1].type == CardType.EXPLODING_KITTEN
    assert room.state.current_turn_player_id == "p1"
    assert room.check_game_end() is None


def test_three_player_scenario_to_game_end():
    room = started_room(player_count=3)
    assert len(room.state.deck) > 0
    assert sum(c.type == CardType.EXPLODING_KITTEN for c in room.state.deck) == 2

    # A explodes
    set_hand(room, "p0", CardType.NOPE)
    set_deck(room, CardType.EXPLODING_KITTEN, CardType.SKIP, CardType.EXPLODING_KITTEN)
    assert room.draw_card("p0").exploded
    assert room.check_game_end() is None

    # B draws safely, C explodes
    assert room.draw_card("p1").outcome == DrawOutcome.DRAWN
    room.end_turn("p1")
    set_hand(room, "p2", CardType.NOPE)
    assert room.draw_card("p2").exploded

    winner = room.check_game_end()
    assert winner is not None
    assert winner.id == "p1"
    assert room.phase == GamePhase.GAME_END
    assert room.state.winner_id == "p1"
    assert room.state.ended_at is not None
    assert room.check_game_end() is None
    assert room.draw_card("p1").error_code == GAME_NOT_IN_PROGRESS


def test_full_game_by_drawing_conserves_cards():
    room = started_room(player_count=4, seed=3)
    for _ in range(500):
        if room.phase != GamePhase.PLAYING:
            break
        current = room.state.current_turn_player_id
        result = room.draw_card(current)
        assert result.success
        if result.needs_defuse:
            assert validate_deck_integrity(room.state)
            assert room.defuse_kitten(current, 0).success
        if result.outcome != DrawOutcome.ELIMINATED:
            assert room.end_turn(current).success
        else:
            room.check_game_end()
        assert validate_deck_integrity(room.state)

    assert room.phase == GamePhase.GAME_END
    assert len(room.state.active_players()) == 1


# Card effects

def test_skip_passes_turn():
    room = started_room()
    skip = set_hand(room, "p0", CardType.SKIP)[0]
    assert room.play_card("p0", skip.id).success
    assert room.state.current_turn_player_id == "p1"
    assert room.get_player("p0").pending_turns == 0
    assert room.get_player("p1").pending_turns == 1
    assert skip in room.state.discard_pile


def test_attack_stacking():
    room = started_room()
    attack = set_hand(room, "p0", CardType.ATTACK)[0]
    room.get_player("p1").pending_turns = 1

    assert room.play_card("p0", attack.id).success
    assert room.get_player("p0").pending_turns == 0
    assert room.get_player("p1").pending_turns == 3
    assert room.state.current_turn_player_id == "p1"


def test_attacked_player_takes_two_turns():
    room = started_room()
    attack = set_hand(room, "p0", CardType.ATTACK)[0]
    set_deck(room, CardType.NOPE, CardType.NOPE, CardType.NOPE)
    room.play_card("p0", attack.id)

    assert room.get_player("p1").pending_turns == 2
    room.draw_card("p1")
    room.end_turn("p1")
    assert room.state.current_turn_player_id == "p1"
    assert room.get_player("p1").pending_turns == 1
    room.draw_card("p1")
    room.end_turn("p1")
    assert room.state.current_turn_player_id == "p2"
    assert room.get_player("p2").pending_turns == 1


def test_skip_consumes_one_attacked_turn():
    room = started_room()
    attack = set_hand(room, "p0", CardType.ATTACK)[0]
    room.play_card("p0", attack.id)
    skip = set_hand(room, "p1", CardType.SKIP)[0]

    assert room.play_card("p1", skip.id).success
    assert room.state.current_turn_player_id == "p1"
    assert room.get_player("p1").pending_turns == 1


def test_card_without_data_rejects_data():
    room = started_room()
    skip = set_hand(room, "p0", CardType.SKIP)[0]
    result = room.play_card("p0", skip.id, FavorData(target_player_id="p1"))
    assert result.error_code == INVALID_ACTION_DATA


def test_play_card_not_in_hand():
    room = started_room()
    assert room.play_card("p0", "missing").error_code == CARD_NOT_IN_HAND


def test_favor_flow():
    room = started_room()
    favor = set_hand(room, "p0", CardType.FAVOR)[0]
    nope = set_hand(room, "p1", CardType.NOPE, CardType.CAT_TACO)[0]

    result = room.play_card("p0", favor.id, FavorData(target_player_id="p1"))
    assert result.success
    assert result.requires_action == PendingActionType.FAVOR
    assert room.state.pending_action.target_player_id == "p1"

    # Pending favor blocks the turn
    assert room.draw_card("p0").error_code == ACTION_PENDING
    assert room.end_turn("p0").error_code == ACTION_PENDING

    assert room.give_favor_card("p2", "p0", nope.id).error_code == ACTION_NOT_PENDING
    assert room.give_favor_card("p1", "p0", "missing").error_code == CARD_NOT_IN_HAND
    assert room.give_favor_card("p1", "p0", nope.id).success

    assert room.get_player("p0").find_card(nope.id) is not None
    assert room.get_player("p1").find_card(nope.id) is None
    assert room.state.pending_action is None
    assert room.draw_card("p0").success


def test_favor_requires_valid_target():
    room = started_room()
    favor = set_hand(room, "p0", CardType.FAVOR)[0]
    assert room.play_card("p0", favor.id).error_code == INVALID_ACTION_DATA
    assert room.play_card("p0", favor.id, FavorData("p0")).error_code == INVALID_TARGET
    assert room.play_card("p0", favor.id, FavorData("ghost")).error_code == PLAYER_NOT_FOUND


def test_favor_against_empty_hand():
    room = started_room()
    favor = set_hand(room, "p0", CardType.FAVOR)[0]
    set_hand(room, "p1")
    result = room.play_card("p0", favor.id, FavorData("p1"))
    assert result.success
    assert result.requires_action is None
    assert room.state.pending_action is None


def test_see_the_future_peeks_without_mutation():
    room = started_room()
    card = set_hand(room, "p0", CardType.SEE_THE_FUTURE)[0]
    top = set_deck(room, CardType.SKIP, CardType.ATTACK, CardType.NOPE, CardType.FAVOR)

    result = room.play_card("p0", card.id)
    assert result.requires_action == PendingActionType.SEE_THE_FUTURE
    assert room.state.pending_action is None

    assert room.peek_deck(3) == top[:3]
    assert room.peek_deck(3) == top[:3]
    assert len(room.state.deck) == 4
    assert room.peek_deck(0) == []


def test_shuffle_keeps_cards():
    room = started_room()
    before = sorted(c.id for c in room.state.deck)
    assert room.shuffle_deck("p0").success
    assert sorted(c.id for c in room.state.deck) == before
    assert room.shuffle_deck("p1").error_code == NOT_YOUR_TURN


def test_alter_the_future():
    room = started_room()
    card = set_hand(room, "p0", CardType.ALTER_THE_FUTURE)[0]
    top = set_deck(room, CardType.SKIP, CardType.ATTACK, CardType.NOPE, CardType.CAT_TACO)

    result = room.play_card("p0", card.id)
    assert result.requires_action == PendingActionType.ALTER_THE_FUTURE
    pending = room.state.pending_action
    assert set(pending.card_ids) == {c.id for c in top[:3]}
    assert room.draw_card("p0").error_code == ACTION_PENDING

    new_order = [top[2].id, top[0].id, top[1].id]
    assert room.rearrange_deck([top[3].id, top[0].id, top[1].id]).error_code == INVALID_ACTION_DATA
    assert room.rearrange_deck(new_order, player_id="p1").error_code == NOT_YOUR_TURN
    assert room.rearrange_deck(new_order, player_id="p0").success

    assert [c.id for c in room.peek_deck(4)] == new_order + [top[3].id]
    assert room.state.pending_action is None
    assert room.rearrange_deck(new_order).error_code == ACTION_NOT_PENDING


# Cat combos

def test_two_of_a_kind_steals_hidden_card():
    room = started_room()
    cats = set_hand(room, "p0", CardType.CAT_TACO, CardType.FERAL_CAT)
    target_hand = set_hand(room, "p1", CardType.NOPE, CardType.ATTACK)

    result = room.play_card("p0", [c.id for c in cats], CatComboData(target_player_id="p1"))
    assert result.success
    assert result.requires_action == PendingActionType.CAT_COMBO

    choices = room.get_combo_target_cards("p0")
    assert choices.success
    assert [c["id"] for c in choices.data["cards"]] == ["hidden-0", "hidden-1"]
    assert all(c == {"id": c["id"], "known": False} for c in choices.data["cards"])
    assert room.get_combo_target_cards("p1").error_code == ACTION_NOT_PENDING

    # Real ids are not accepted, only the face-down slots
    assert room.take_cat_combo_card("p0", target_hand[1].id).error_code == CARD_NOT_IN_HAND
    assert room.take_cat_combo_card("p0", "hidden-2").error_code == CARD_NOT_IN_HAND

    result = room.take_cat_combo_card("p0", "hidden-1")
    assert result.success
    stolen = result.data["card"]
    assert stolen in target_hand
    assert room.get_player("p0").find_card(stolen.id) is not None
    assert len(room.get_player("p1").hand) == 1
    assert room.state.pending_action is None


def test_two_of_a_kind_needs_target_with_cards():
    room = started_room()
    cats = set_hand(room, "p0", CardType.CAT_BEARD, CardType.CAT_BEARD)
    set_hand(room, "p1")
    result = room.play_card("p0", [c.id for c in cats], CatComboData(target_player_id="p1"))
    assert result.error_code == INVALID_TARGET


def test_three_of_a_kind_takes_named_card():
    room = started_room()
    cats = set_hand(room, "p0", CardType.CAT_TACO, CardType.CAT_TACO, CardType.FERAL_CAT)
    set_hand(room, "p1", CardType.DEFUSE, CardType.NOPE)

    data = CatComboData(target_player_id="p1", requested_card_type=CardType.DEFUSE)
    result = room.play_card("p0", [c.id for c in cats], data)
    assert result.success
    assert result.data["card"].type == CardType.DEFUSE
    assert room.get_player("p0").defuse_count == 1
    assert room.get_player("p1").defuse_count == 0
    assert room.state.pending_action is None


def test_three_of_a_kind_missing_card_type():
    room = started_room()
    cats = set_hand(room, "p0", CardType.CAT_TACO, CardType.CAT_TACO, CardType.CAT_TACO)
    set_hand(room, "p1", CardType.NOPE)

    data = CatComboData(target_player_id="p1", requested_card_type=CardType.DEFUSE)
    result = room.play_card("p0", [c.id for c in cats], data)
    assert result.success
    assert result.data["card"] is None
    assert len(room.get_player("p1").hand) == 1


def test_five_different_cats_take_from_discard():
    room = started_room()
    cats = set_hand(
        room, "p0",
        CardType.CAT_TACO, CardType.CAT_BEARD, CardType.CAT_CATTERMELON,
        CardType.CAT_HAIRY_POTATO, CardType.FERAL_CAT,
    )
    old_skip = create_card(CardType.SKIP)
    room.state.discard_pile = [old_skip]

    result = room.play_card("p0", [c.id for c in cats])
    assert result.requires_action == PendingActionType.CAT_COMBO

    choices = room.get_combo_target_cards("p0").data["cards"]
    assert choices == [{"id": old_skip.id, "type": "skip", "known": True}]
    assert room.take_cat_combo_card("p0", cats[0].id).error_code == CARD_NOT_IN_HAND
    assert room.take_cat_combo_card("p0", old_skip.id).success
    assert old_skip not in room.state.discard_pile
    assert room.get_player("p0").find_card(old_skip.id) is not None


def test_five_different_cats_need_discard_pile():
    room = started_room()
    cats = set_hand(
        room, "p0",
        CardType.CAT_TACO, CardType.CAT_BEARD, CardType.CAT_CATTERMELON,
        CardType.CAT_HAIRY_POTATO, CardType.CAT_RAINBOW_RALPHING,
    )
    result = room.play_card("p0", [c.id for c in cats])
    assert result.error_code == INVALID_COMBO


def test_invalid_combos():
    room = started_room()
    cards = set_hand(room, "p0", CardType.CAT_TACO, CardType.CAT_BEARD, CardType.SKIP, CardType.SKIP)
    data = CatComboData(target_player_id="p1")
    assert room.play_card("p0", [cards[0].id, cards[1].id], data).error_code == INVALID_COMBO
    assert room.play_card("p0", [cards[2].id, cards[3].id], data).error_code == INVALID_COMBO
    assert room.play_card("p0", [cards[0].id, cards[0].id], data).error_code == INVALID_COMBO
    assert room.play_card("p0", [cards[0].id, cards[1].id], FavorData("p1")).error_code == INVALID_COMBO


# Connections

def test_disconnect_during_defuse_eliminates_and_advances():
    room = started_room()
    set_deck(room, CardType.EXPLODING_KITTEN, CardType.NOPE)
    rebase_total(room)
    room.draw_card("p0")

    result = room.eliminate_disconnected_player("p0")
    assert result.success
    player = room.get_player("p0")
    assert player.is_eliminated
    assert not player.is_connected
    assert room.state.pending_defuse is None
    assert room.state.discard_pile[-1].type == CardType.EXPLODING_KITTEN
    assert room.state.current_turn_player_id == "p1"
    assert room.state.turn_stage == TurnStage.ACTION
    assert validate_deck_integrity(room.state)


def test_disconnect_of_favor_target_cancels_favor():
    room = started_room()
    favor = set_hand(room, "p0", CardType.FAVOR)[0]
    room.play_card("p0", favor.id, FavorData("p1"))

    assert room.eliminate_disconnected_player("p1").success
    assert room.state.pending_action is None
    assert room.state.current_turn_player_id == "p0"
    assert room.draw_card("p0").success


def test_disconnect_in_two_player_game_ends_it():
    room = started_room(player_count=2)
    room.eliminate_disconnected_player("p1")
    winner = room.check_game_end()
    assert winner.id == "p0"


def test_set_player_connected():
    room = make_room()
    assert room.set_player_connected("p1", False).success
    assert not room.get_player("p1").is_connected
    assert room.has_connected_players()
    assert room.set_player_connected("ghost", True).error_code == PLAYER_NOT_FOUND


# Views and bookkeeping

def test_sanitized_state_hides_other_hands():
    room = started_room()
    view = room.get_sanitized_game_state("p0")

    assert "deck" not in view
    assert view["deck_count"] == len(room.state.deck)
    me, other = view["players"][0], view["players"][1]

    assert [c["id"] for c in me["hand"]] == [c.id for c in room.get_player("p0").hand]
    assert all(c["known"] and "type" in c for c in me["hand"])
    assert me["defuse_count"] == 1

    assert other["hand_count"] == 8
    assert all(c == {"id": c["id"], "known": False} for c in other["hand"])
    assert other["defuse_count"] is None


def test_sanitized_hand_does_not_expose_card_ids():
    room = started_room()
    set_deck(room, CardType.ATTACK, CardType.NOPE)
    rebase_total(room)
    peeked = room.peek_deck(1)[0]

    room.draw_card("p0")
    room.end_turn("p0")
    assert room.get_player("p0").find_card(peeked.id) is not None

    view = room.get_sanitized_game_state("p1")
    opponent_hand = view["players"][0]["hand"]
    assert peeked.id not in [c["id"] for c in opponent_hand]
    assert [c["id"] for c in opponent_hand] == [f"hidden-{i}" for i in range(9)]


def test_sanitized_state_hides_altered_cards():
    room = started_room()
    card = set_hand(room, "p0", CardType.ALTER_THE_FUTURE)[0]
    room.play_card("p0", card.id)

    assert len(room.get_sanitized_game_state("p0")["pending_action"]["card_ids"]) == 3
    assert room.get_sanitized_game_state("p1")["pending_action"]["card_ids"] == []


def test_version_bumps_only_on_success():
    room = started_room()
    version = room.state.version
    room.draw_card("p1")
    room.end_turn("p0")
    assert room.state.version == version
    room.draw_card("p0")
    assert room.state.version > version


def test_game_log_is_capped():
    room = make_room(player_count=3, rules=create_rules(max_log_entries=5))
    room.start_game()
    for _ in range(10):
        take_turn(room)
    assert len(room.state.game_log) == 5


def test_room_info():
    room = make_room(player_count=2)
    info = room.get_info()
    assert info["room_code"] == "ROOM01"
    assert info["player_count"] == 2
    assert info["phase"] == "lobby"
