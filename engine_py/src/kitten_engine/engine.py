"""Game room state machine: the single mutator of one game's state"""

import random
import threading
import time
import uuid
from collections import deque
from typing import Any, Dict, List, Optional, Sequence, Union

from .constants import (
    LOG_ACTION_RESOLVED,
    LOG_CARD_DRAWN,
    LOG_CARD_PLAYED,
    LOG_GAME_CREATED,
    LOG_GAME_ENDED,
    LOG_GAME_STARTED,
    LOG_PLAYER_DEFUSED,
    LOG_PLAYER_DISCONNECTED,
    LOG_PLAYER_EXPLODED,
    LOG_PLAYER_JOINED,
    LOG_PLAYER_LEFT,
    LOG_TURN_CHANGED,
    CardType,
    ComboType,
    DrawOutcome,
    GamePhase,
    PendingActionType,
    PendingStatus,
    TurnStage,
)
from .errors import (
    ACTION_NOT_PENDING,
    ACTION_PENDING,
    CARD_NOT_IN_HAND,
    DUPLICATE_PLAYER,
    GAME_ALREADY_STARTED,
    GAME_NOT_IN_PROGRESS,
    INVALID_ACTION_DATA,
    MUST_DEFUSE,
    NO_DEFUSE_AVAILABLE,
    NOT_ENOUGH_PLAYERS,
    NOT_HOST,
    NOT_YOUR_TURN,
    PLAYER_NOT_FOUND,
    ROOM_FULL,
)
from .models import (
    ActionResult,
    Card,
    CatComboData,
    DrawResult,
    GameLogEntry,
    PendingAction,
    PendingDefuse,
    Player,
    RoomState,
)
from .rules import RuleConfig, default_rules
from .serialization import (
    get_public_room_info,
    hidden_card_index,
    hide_card,
    sanitize_state,
    serialize_card,
)
from .shuffle import create_card, setup_initial_game
from .validate import validate_play, validate_turn


class GameRoom:
    """
    One game's authoritative state.

    Every public method validates its preconditions and returns a result
    object instead of raising for rule violations. Mutations hold the room
    lock, so a room is safe to share between threads.
    """

    def __init__(
        self,
        room_code: str,
        host_id: str,
        host_name: str,
        rules: RuleConfig = default_rules,
        rng: Optional[random.Random] = None
    ):
        self.rules = rules
        self._rng = rng or random.Random()
        self._lock = threading.RLock()
        self.state = RoomState(
            room_code=room_code,
            host_id=host_id,
            game_log=deque(maxlen=rules.max_log_entries),
        )
        host = Player(id=host_id, name=host_name, is_host=True)
        self.state.players.append(host)
        self._card_handlers = {
            CardType.SKIP: self._play_skip,
            CardType.ATTACK: self._play_attack,
            CardType.FAVOR: self._play_favor,
            CardType.SHUFFLE: self._play_shuffle,
            CardType.SEE_THE_FUTURE: self._play_see_the_future,
            CardType.ALTER_THE_FUTURE: self._play_alter_the_future,
        }
        self._log(LOG_GAME_CREATED, "Game created", player=host)

    @property
    def room_code(self) -> str:
        return self.state.room_code

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    @property
    def players(self) -> List[Player]:
        return self.state.players

    def get_player(self, player_id: str) -> Optional[Player]:
        return self.state.get_player(player_id)

    def has_connected_players(self) -> bool:
        return any(p.is_connected for p in self.state.players)

    # ----------------------------------------------------------------- lobby

    def add_player(self, player_id: str, player_name: str) -> ActionResult:
        with self._lock:
            state = self.state
            if state.phase != GamePhase.LOBBY:
                return ActionResult.error(GAME_ALREADY_STARTED, "Game has already started")
            if len(state.players) >= self.rules.max_players:
                return ActionResult.error(ROOM_FULL, "Room is full")
            if state.get_player(player_id):
                return ActionResult.error(DUPLICATE_PLAYER, "Player is already in this room")

            player = Player(id=player_id, name=player_name)
            state.players.append(player)
            self._log(LOG_PLAYER_JOINED, f"{player_name} joined the game", player=player)
            self._touch()
            return ActionResult.ok(player=player)

    def remove_player(self, player_id: str) -> ActionResult:
        """Remove a player before the game starts; the next player in line becomes host."""
        with self._lock:
            state = self.state
            player = state.get_player(player_id)
            if not player:
                return ActionResult.error(PLAYER_NOT_FOUND, "Player not found")
            if state.phase != GamePhase.LOBBY:
                return ActionResult.error(GAME_ALREADY_STARTED, "Players cannot leave a started game")

            state.players.remove(player)
            self._log(LOG_PLAYER_LEFT, f"{player.name} left the game", player=player)

            if player_id == state.host_id and state.players:
                new_host = state.players[0]
                new_host.is_host = True
                state.host_id = new_host.id
            self._touch()
            return ActionResult.ok()

    def start_game(
        self,
        defuse_count: Optional[int] = None,
        exploding_kitten_count: Optional[int] = None,
        requested_by: Optional[str] = None
    ) -> ActionResult:
        """
        Deal the cards and hand the first turn to the first player.

        Args:
            defuse_count: Extra defuses for the draw pile (host setting)
            exploding_kitten_count: Kittens in the draw pile, default players - 1
            requested_by: When given, only the host may start the game
        """
        with self._lock:
            state = self.state
            if state.phase != GamePhase.LOBBY:
                return ActionResult.error(GAME_ALREADY_STARTED, "Game has already started")
            if requested_by is not None and requested_by != state.host_id:
                return ActionResult.error(NOT_HOST, "Only the host can start the game")
            if not self.rules.validate_player_count(len(state.players)):
                return ActionResult.error(
                    NOT_ENOUGH_PLAYERS,
                    f"Need at least {self.rules.min_players} players"
                )

            if defuse_count is None:
                defuse_count = self.rules.default_extra_defuses
            deal = setup_initial_game(
                len(state.players),
                extra_defuses=defuse_count,
                exploding_kittens=exploding_kitten_count,
                hand_size=self.rules.hand_size,
                rng=self._rng,
            )

            for player, hand in zip(state.players, deal.hands):
                player.hand = hand
                player.recount_defuses()
                player.pending_turns = 0
                player.is_eliminated = False

            state.deck = deal.deck
            state.discard_pile = []
            state.deck_configuration = deal.deck_configuration
            state.total_cards = deal.total_cards
            state.phase = GamePhase.PLAYING
            state.turn_stage = TurnStage.ACTION

            first = state.players[0]
            state.current_turn_player_id = first.id
            first.pending_turns = 1

            self._log(
                LOG_GAME_STARTED,
                f"Game started with {len(state.players)} players! "
                f"Deck: {deal.deck_configuration.value} ({len(deal.deck)} cards)"
            )
            self._log(LOG_TURN_CHANGED, f"{first.name}'s turn", player=first)
            self._touch()
            return ActionResult.ok()

    # ------------------------------------------------------------ turn flow

    def play_card(
        self,
        player_id: str,
        card_ids: Union[str, Sequence[str]],
        data: Any = None
    ) -> ActionResult:
        """
        Play one card, or several cat cards as a combo.

        Args:
            player_id: Player whose turn it is
            card_ids: A card id, or a list of ids for a cat combo
            data: FavorData for favor, CatComboData for combos, otherwise None

        Returns:
            ActionResult; requires_action names the follow-up the caller owes
        """
        if isinstance(card_ids, str):
            card_ids = [card_ids]
        card_ids = list(card_ids)

        with self._lock:
            validation = validate_play(self.state, player_id, card_ids, data)
            if not validation.valid:
                return ActionResult.error(validation.error_code, validation.error_message)

            player = self.state.get_player(player_id)
            for card in validation.cards:
                player.take_card(card.id)
                self.state.discard_pile.append(card)

            if validation.combo is not None:
                self._log(
                    LOG_CARD_PLAYED,
                    f"{player.name} played a {validation.combo.value} cat combo",
                    player=player,
                )
                result = self._play_combo(player, validation.cards, validation.combo, data or CatComboData())
            else:
                card = validation.cards[0]
                self._log(LOG_CARD_PLAYED, f"{player.name} played {card.type.value}",
                          player=player, card_type=card.type)
                handler = self._card_handlers.get(card.type, self._play_without_effect)
                result = handler(player, card, data)

            self._touch()
            return result

    def draw_card(self, player_id: str) -> DrawResult:
        """
        Draw the top card of the deck.

        The turn is not advanced here, except when the player explodes.
        """
        with self._lock:
            state = self.state
            validation = validate_turn(state, player_id)
            if not validation.valid:
                return DrawResult.error(validation.error_code, validation.error_message)

            player = state.get_player(player_id)
            if not state.deck:
                state.turn_stage = TurnStage.AWAITING_END
                self._touch()
                return DrawResult(success=True, outcome=DrawOutcome.EMPTY_DECK)

            card = state.deck.pop()

            if card.type == CardType.EXPLODING_KITTEN:
                if player.defuse_count > 0:
                    state.pending_defuse = PendingDefuse(player_id=player.id, card=card)
                    state.turn_stage = TurnStage.AWAITING_DEFUSE
                    self._log(LOG_CARD_DRAWN, f"{player.name} drew an Exploding Kitten!",
                              player=player, card_type=card.type)
                    self._touch()
                    return DrawResult(success=True, outcome=DrawOutcome.NEEDS_DEFUSE, card=card)

                state.discard_pile.append(card)
                self._eliminate(player)
                self._log(LOG_PLAYER_EXPLODED, f"{player.name} exploded!",
                          player=player, card_type=card.type)
                self._advance_turn(player)
                self._touch()
                return DrawResult(success=True, outcome=DrawOutcome.ELIMINATED, card=card)

            player.give_card(card)
            state.turn_stage = TurnStage.AWAITING_END
            self._log(LOG_CARD_DRAWN, f"{player.name} drew a card", player=player)
            self._touch()
            return DrawResult(success=True, outcome=DrawOutcome.DRAWN, card=card)

    def defuse_kitten(self, player_id: str, insert_position: int) -> ActionResult:
        """
        Spend a defuse on the kitten just drawn and hide a fresh kitten in the deck.

        insert_position counts from the top of the deck: 0 is the next card
        drawn, len(deck) is the bottom. Out-of-range values are clamped.
        """
        with self._lock:
            state = self.state
            if state.phase != GamePhase.PLAYING:
                return ActionResult.error(GAME_NOT_IN_PROGRESS, "Game is not in progress")
            player = state.get_player(player_id)
            if not player:
                return ActionResult.error(PLAYER_NOT_FOUND, "Player not found")
            pending = state.pending_defuse
            if pending is None or pending.player_id != player_id:
                return ActionResult.error(ACTION_NOT_PENDING, "No Exploding Kitten to defuse")

            defuse = next((c for c in player.hand if c.type == CardType.DEFUSE), None)
            if defuse is None:
                return ActionResult.error(NO_DEFUSE_AVAILABLE, "You have no Defuse card")

            player.take_card(defuse.id)
            state.discard_pile.append(defuse)

            position = max(0, min(int(insert_position), len(state.deck)))
            state.deck.insert(len(state.deck) - position, create_card(CardType.EXPLODING_KITTEN))
            state.pending_defuse = None
            state.turn_stage = TurnStage.AWAITING_END

            self._log(LOG_PLAYER_DEFUSED, f"{player.name} defused an Exploding Kitten!",
                      player=player, card_type=CardType.DEFUSE)
            self._touch()
            return ActionResult.ok()

    def end_turn(self, player_id: Optional[str] = None) -> ActionResult:
        """
        Use up one of the current player's pending turns.

        Play stays with the same player while turns remain (attacks are
        consumed one unit at a time); otherwise it passes to the next player
        still in the game, who gets exactly one turn.
        """
        with self._lock:
            state = self.state
            if player_id is not None:
                validation = validate_turn(state, player_id, (TurnStage.AWAITING_END,))
                if not validation.valid:
                    return ActionResult.error(validation.error_code, validation.error_message)
            else:
                if state.phase != GamePhase.PLAYING:
                    return ActionResult.error(GAME_NOT_IN_PROGRESS, "Game is not in progress")
                if state.pending_action and state.pending_action.status == PendingStatus.WAITING:
                    return ActionResult.error(ACTION_PENDING, "An action is waiting to be resolved")
                if state.turn_stage == TurnStage.AWAITING_DEFUSE:
                    return ActionResult.error(MUST_DEFUSE, "The Exploding Kitten must be defused first")

            current = state.get_player(state.current_turn_player_id)
            if current is None:
                return ActionResult.error(PLAYER_NOT_FOUND, "No current player")

            if current.pending_turns > 0:
                current.pending_turns -= 1

            if current.pending_turns > 0:
                state.turn_stage = TurnStage.ACTION
                self._log(
                    LOG_TURN_CHANGED,
                    f"{current.name}'s turn ({current.pending_turns} more turn(s))",
                    player=current,
                )
            else:
                self._advance_turn(current)
            self._touch()
            return ActionResult.ok(current_turn_player_id=state.current_turn_player_id)

    def check_game_end(self) -> Optional[Player]:
        """
        Declare the winner once a single player is left.

        Callers must invoke this after anything that can eliminate a player.
        Returns the winner the first time the game ends, None otherwise.
        """
        with self._lock:
            state = self.state
            if state.phase != GamePhase.PLAYING:
                return None
            active = state.active_players()
            if len(active) != 1:
                return None

            winner = active[0]
            state.phase = GamePhase.GAME_END
            state.winner_id = winner.id
            state.ended_at = time.time()
            state.pending_action = None
            self._log(LOG_GAME_ENDED, f"{winner.name} wins!", player=winner)
            self._touch()
            return winner

    # ------------------------------------------------------- deck operations

    def shuffle_deck(self, player_id: Optional[str] = None) -> ActionResult:
        with self._lock:
            state = self.state
            if player_id is not None:
                validation = validate_turn(state, player_id)
                if not validation.valid:
                    return ActionResult.error(validation.error_code, validation.error_message)
            elif state.phase != GamePhase.PLAYING:
                return ActionResult.error(GAME_NOT_IN_PROGRESS, "Game is not in progress")
            elif state.pending_action and state.pending_action.status == PendingStatus.WAITING:
                return ActionResult.error(ACTION_PENDING, "An action is waiting to be resolved")

            self._rng.shuffle(state.deck)
            self._log(LOG_ACTION_RESOLVED, "The deck was shuffled")
            self._touch()
            return ActionResult.ok()

    def peek_deck(self, count: int) -> List[Card]:
        """Top `count` cards without removing them, next card to be drawn first."""
        with self._lock:
            if count <= 0:
                return []
            return list(reversed(self.state.deck[-count:]))

    def rearrange_deck(self, cards: Sequence[Union[str, Card]], player_id: Optional[str] = None) -> ActionResult:
        """
        Put the cards revealed by Alter the Future back in a new order.

        `cards` lists the peeked cards (or their ids), the first one becoming
        the next card drawn. Only the cards revealed when Alter the Future
        was played may be supplied.
        """
        card_ids = [getattr(c, 'id', c) for c in cards]
        with self._lock:
            state = self.state
            pending = state.pending_action
            if (pending is None or pending.status != PendingStatus.WAITING
                    or pending.type != PendingActionType.ALTER_THE_FUTURE):
                return ActionResult.error(ACTION_NOT_PENDING, "Nothing to rearrange")
            if player_id is not None and player_id != pending.initiator_id:
                return ActionResult.error(NOT_YOUR_TURN, "Only the player who altered the future may rearrange")

            count = len(pending.card_ids)
            top_ids = {c.id for c in state.deck[-count:]} if count else set()
            if (len(card_ids) != count or set(card_ids) != set(pending.card_ids)
                    or top_ids != set(pending.card_ids)):
                return ActionResult.error(
                    INVALID_ACTION_DATA,
                    f"Supply exactly the {count} card(s) you saw, in any order"
                )

            by_id = {c.id: c for c in state.deck[-count:]}
            state.deck[-count:] = [by_id[card_id] for card_id in reversed(card_ids)]

            initiator = state.get_player(pending.initiator_id)
            self._resolve_pending(f"{initiator.name} altered the future", initiator)
            self._touch()
            return ActionResult.ok()

    # -------------------------------------------------- interactive actions

    def give_favor_card(self, giver_id: str, receiver_id: str, card_id: str) -> ActionResult:
        """Answer a Favor: the target hands one card of their choice to the player who asked."""
        with self._lock:
            state = self.state
            giver = state.get_player(giver_id)
            receiver = state.get_player(receiver_id)
            if not giver or not receiver:
                return ActionResult.error(PLAYER_NOT_FOUND, "Player not found")

            pending = state.pending_action
            if (pending is None or pending.status != PendingStatus.WAITING
                    or pending.type != PendingActionType.FAVOR
                    or pending.target_player_id != giver_id
                    or pending.initiator_id != receiver_id):
                return ActionResult.error(ACTION_NOT_PENDING, "No favor is owed")

            card = giver.take_card(card_id)
            if card is None:
                return ActionResult.error(CARD_NOT_IN_HAND, "Card not in hand")
            receiver.give_card(card)

            self._resolve_pending(
                f"{receiver.name} received a card from {giver.name} (Favor)",
                receiver,
                target=giver,
            )
            self._touch()
            return ActionResult.ok()

    def get_combo_target_cards(self, player_id: str) -> ActionResult:
        """
        List what the initiator of a pending cat combo can choose from.

        For a pair these are the target's cards, face down and in random
        order; for five different cats, the discard pile face up.
        """
        with self._lock:
            state = self.state
            pending = state.pending_action
            if (pending is None or pending.status != PendingStatus.WAITING
                    or pending.type != PendingActionType.CAT_COMBO
                    or pending.initiator_id != player_id):
                return ActionResult.error(ACTION_NOT_PENDING, "No pending cat combo action")

            if pending.combo_type == ComboType.TWO_KIND:
                target = state.get_player(pending.target_player_id)
                choices = self._pair_choices(pending, target)
                hidden = [hide_card(i) for i in range(len(choices))]
                return ActionResult.ok(cards=hidden, target_player_name=target.name)

            choices = [serialize_card(c) for c in state.discard_pile if c.id not in pending.card_ids]
            return ActionResult.ok(cards=choices, target_player_name=None)

    def take_cat_combo_card(self, player_id: str, card_id: str) -> ActionResult:
        """
        Resolve a pending pair or five-cat combo.

        For a pair, card_id is one of the face-down slot ids listed by
        get_combo_target_cards; for five cats it names a discard pile card.
        """
        with self._lock:
            state = self.state
            pending = state.pending_action
            if (pending is None or pending.status != PendingStatus.WAITING
                    or pending.type != PendingActionType.CAT_COMBO
                    or pending.initiator_id != player_id):
                return ActionResult.error(ACTION_NOT_PENDING, "No pending cat combo action")

            player = state.get_player(player_id)
            if pending.combo_type == ComboType.TWO_KIND:
                target = state.get_player(pending.target_player_id)
                choices = self._pair_choices(pending, target)
                index = hidden_card_index(card_id)
                card = None
                if index is not None and index < len(choices):
                    card = target.take_card(choices[index])
                if card is None:
                    return ActionResult.error(CARD_NOT_IN_HAND, f"{target.name} does not hold that card")
                player.give_card(card)
                self._resolve_pending(f"{player.name} took a card from {target.name}", player, target=target)
            else:
                card = next(
                    (c for c in state.discard_pile if c.id == card_id and c.id not in pending.card_ids),
                    None,
                )
                if card is None:
                    return ActionResult.error(CARD_NOT_IN_HAND, "Card is not in the discard pile")
                state.discard_pile.remove(card)
                player.give_card(card)
                self._resolve_pending(
                    f"{player.name} took {card.type.value} from the discard pile", player
                )
            self._touch()
            return ActionResult.ok(card=card)

    # --------------------------------------------------------- connections

    def set_player_connected(self, player_id: str, connected: bool) -> ActionResult:
        with self._lock:
            player = self.state.get_player(player_id)
            if not player:
                return ActionResult.error(PLAYER_NOT_FOUND, "Player not found")
            player.is_connected = connected
            if not connected:
                self._log(LOG_PLAYER_DISCONNECTED, f"{player.name} disconnected", player=player)
            self._touch()
            return ActionResult.ok()

    def eliminate_disconnected_player(self, player_id: str) -> ActionResult:
        """
        Knock a player who dropped out of a running game out of it.

        Any kitten they were defusing goes to the discard pile, actions they
        started or were targeted by are cancelled, and if it was their turn
        play moves on. Callers must run check_game_end() afterwards.
        """
        with self._lock:
            state = self.state
            if state.phase != GamePhase.PLAYING:
                return ActionResult.error(GAME_NOT_IN_PROGRESS, "Game is not in progress")
            player = state.get_player(player_id)
            if not player:
                return ActionResult.error(PLAYER_NOT_FOUND, "Player not found")
            player.is_connected = False
            if player.is_eliminated:
                return ActionResult.ok(eliminated=False)

            if state.pending_defuse and state.pending_defuse.player_id == player_id:
                state.discard_pile.append(state.pending_defuse.card)
                state.pending_defuse = None

            pending = state.pending_action
            if pending and player_id in (pending.initiator_id, pending.target_player_id):
                self._resolve_pending(f"{pending.type.value} was cancelled", player)

            self._eliminate(player)
            self._log(LOG_PLAYER_DISCONNECTED,
                      f"{player.name} disconnected and was eliminated", player=player)
            if state.current_turn_player_id == player_id:
                self._advance_turn(player)
            self._touch()
            return ActionResult.ok(eliminated=True)

    # -------------------------------------------------------------- views

    def get_sanitized_game_state(self, viewer_id: Optional[str]) -> Dict[str, Any]:
        with self._lock:
            return sanitize_state(self.state, viewer_id)

    def get_info(self) -> Dict[str, Any]:
        with self._lock:
            return get_public_room_info(self.state)

    # ---------------------------------------------------------- card effects

    def _play_skip(self, player: Player, card: Card, data) -> ActionResult:
        player.pending_turns = max(0, player.pending_turns - 1)
        if player.pending_turns == 0:
            self._advance_turn(player)
        else:
            self.state.turn_stage = TurnStage.ACTION
            self._log(LOG_TURN_CHANGED,
                      f"{player.name}'s turn ({player.pending_turns} more turn(s))", player=player)
        return ActionResult.ok()

    def _play_attack(self, player: Player, card: Card, data) -> ActionResult:
        player.pending_turns = 0
        target = self._next_active_player(player.id)
        if target is None:
            return ActionResult.ok()
        target.pending_turns += 2
        self.state.current_turn_player_id = target.id
        self.state.turn_stage = TurnStage.ACTION
        self._log(LOG_TURN_CHANGED, f"{target.name}'s turn ({target.pending_turns} turns)",
                  player=target)
        return ActionResult.ok()

    def _play_favor(self, player: Player, card: Card, data) -> ActionResult:
        target = self.state.get_player(data.target_player_id)
        if not target.hand:
            self._log(LOG_ACTION_RESOLVED, f"{target.name} had nothing to give",
                      player=player, target=target)
            return ActionResult.ok()
        action = self._open_pending(PendingActionType.FAVOR, player, target=target)
        return ActionResult.ok(requires_action=PendingActionType.FAVOR, action_id=action.action_id)

    def _play_shuffle(self, player: Player, card: Card, data) -> ActionResult:
        return ActionResult.ok(requires_action=PendingActionType.SHUFFLE)

    def _play_see_the_future(self, player: Player, card: Card, data) -> ActionResult:
        return ActionResult.ok(requires_action=PendingActionType.SEE_THE_FUTURE)

    def _play_alter_the_future(self, player: Player, card: Card, data) -> ActionResult:
        top = self.state.deck[-self.rules.future_peek_count:]
        if not top:
            return ActionResult.ok()
        action = self._open_pending(
            PendingActionType.ALTER_THE_FUTURE, player, card_ids=[c.id for c in top]
        )
        return ActionResult.ok(
            requires_action=PendingActionType.ALTER_THE_FUTURE, action_id=action.action_id
        )

    def _play_without_effect(self, player: Player, card: Card, data) -> ActionResult:
        return ActionResult.ok()

    def _play_combo(self, player: Player, cards: List[Card], combo: ComboType,
                    data: CatComboData) -> ActionResult:
        played_ids = [c.id for c in cards]
        if combo == ComboType.TWO_KIND:
            target = self.state.get_player(data.target_player_id)
            action = self._open_pending(
                PendingActionType.CAT_COMBO, player, target=target, card_ids=played_ids, combo=combo
            )
            return ActionResult.ok(requires_action=PendingActionType.CAT_COMBO, action_id=action.action_id)

        if combo == ComboType.FIVE_DIFF:
            action = self._open_pending(
                PendingActionType.CAT_COMBO, player, card_ids=played_ids, combo=combo
            )
            return ActionResult.ok(requires_action=PendingActionType.CAT_COMBO, action_id=action.action_id)

        # Three of a kind resolves on the spot
        target = self.state.get_player(data.target_player_id)
        requested = CardType(data.requested_card_type)
        card = next((c for c in target.hand if c.type == requested), None)
        if card is None:
            self._log(LOG_ACTION_RESOLVED, f"{target.name} has no {requested.value}",
                      player=player, target=target)
            return ActionResult.ok(card=None)
        target.take_card(card.id)
        player.give_card(card)
        self._log(LOG_ACTION_RESOLVED, f"{player.name} took {requested.value} from {target.name}",
                  player=player, target=target)
        return ActionResult.ok(card=card)

    # --------------------------------------------------------------- helpers

    def _next_active_player(self, player_id: str) -> Optional[Player]:
        """Next player in seat order still in the game; works for eliminated players too."""
        players = self.state.players
        idx = next((i for i, p in enumerate(players) if p.id == player_id), None)
        if idx is None:
            return None
        n = len(players)
        for step in range(1, n):
            candidate = players[(idx + step) % n]
            if not candidate.is_eliminated:
                return candidate
        return None

    def _advance_turn(self, from_player: Player):
        from_player.pending_turns = 0
        nxt = self._next_active_player(from_player.id)
        self.state.turn_stage = TurnStage.ACTION
        if nxt is None:
            if from_player.is_eliminated:
                self.state.current_turn_player_id = None
            else:
                from_player.pending_turns = 1
            return
        nxt.pending_turns = 1
        self.state.current_turn_player_id = nxt.id
        self._log(LOG_TURN_CHANGED, f"{nxt.name}'s turn", player=nxt)

    def _eliminate(self, player: Player):
        player.is_eliminated = True
        player.pending_turns = 0

    def _open_pending(self, action_type: PendingActionType, initiator: Player,
                      target: Optional[Player] = None, card_ids: Optional[List[str]] = None,
                      combo: Optional[ComboType] = None) -> PendingAction:
        action = PendingAction(
            action_id=str(uuid.uuid4()),
            type=action_type,
            initiator_id=initiator.id,
            target_player_id=target.id if target else None,
            card_ids=card_ids or [],
            combo_type=combo,
        )
        self.state.pending_action = action
        return action

    def _pair_choices(self, pending: PendingAction, target: Player) -> List[str]:
        """Shuffle the target's hand into face-down slots once per pending steal."""
        if not pending.choice_ids:
            pending.choice_ids = [c.id for c in target.hand]
            self._rng.shuffle(pending.choice_ids)
        return pending.choice_ids

    def _resolve_pending(self, message: str, player: Optional[Player] = None,
                         target: Optional[Player] = None):
        pending = self.state.pending_action
        if pending is not None:
            pending.status = PendingStatus.RESOLVED
        self.state.pending_action = None
        self._log(LOG_ACTION_RESOLVED, message, player=player, target=target)

    def _log(self, log_type: str, message: str, player: Optional[Player] = None,
             card_type: Optional[CardType] = None, target: Optional[Player] = None):
        self.state.game_log.append(GameLogEntry(
            id=str(uuid.uuid4()),
            timestamp=time.time(),
            type=log_type,
            message=message,
            player_id=player.id if player else None,
            player_name=player.name if player else None,
            card_type=card_type,
            target_player_id=target.id if target else None,
            target_player_name=target.name if target else None,
        ))

    def _touch(self):
        self.state.version += 1
        self.state.last_activity_at = time.time()
