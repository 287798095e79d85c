#!/usr/bin/env python3
"""
Hold'em table state machine.

A ``GameState`` is created once per table and runs hand after hand:
``setup_new_hand`` rotates the button, posts blinds and deals hole cards,
``handle_player_action`` applies validated actions and moves the turn, and
the streets advance until a single player is left or the river betting
closes and the showdown awards the pot. Rejected actions never touch state.
"""

import logging
import random
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Sequence, Set, Union

from pokertable.cards import Cards, Deck
from pokertable.entities import (
    Action,
    Bet,
    BettingRound,
    Call,
    Check,
    Fold,
    InvalidActionError,
    Money,
    Player,
    PlayerAction,
    PlayerId,
    Raise,
    make_action,
)
from pokertable.snapshot import SCHEMA_VERSION, GameSnapshot, decode_snapshot
from pokertable.winnerdetermination import WinnerDetermination, split_pot

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2
MAX_PLAYERS = 10
HOLE_CARDS = 2

ACTION_TYPES = (Fold, Check, Call, Bet, Raise)
BETTING_ROUNDS = (
    BettingRound.PREFLOP,
    BettingRound.FLOP,
    BettingRound.TURN,
    BettingRound.RIVER,
)


@dataclass
class HandResult:
    """Outcome of a finished hand, kept for the UI after the next deal."""

    hand_number: int
    pot: Money
    payouts: Dict[PlayerId, Money]
    hand_name: Optional[str] = None
    community_cards: Cards = field(default_factory=list)

    @property
    def winners(self) -> List[PlayerId]:
        return list(self.payouts)


class GameState:
    def __init__(
        self,
        player_names: Sequence[str],
        initial_chips: Money,
        small_blind: Money = 5,
        big_blind: Money = 10,
        rng: Optional[random.Random] = None,
        winner_determination: Optional[WinnerDetermination] = None,
    ):
        if not MIN_PLAYERS <= len(player_names) <= MAX_PLAYERS:
            raise ValueError(
                f"A table seats {MIN_PLAYERS}..{MAX_PLAYERS} players, "
                f"got {len(player_names)}"
            )
        if small_blind <= 0 or big_blind < small_blind:
            raise ValueError(
                f"Invalid blinds {small_blind}/{big_blind}"
            )
        if initial_chips < 0:
            raise ValueError("initial_chips must not be negative")

        self.players: List[Player] = [
            Player(f"p{index}", name, initial_chips)
            for index, name in enumerate(player_names)
        ]
        self.deck = Deck(rng)
        self.winner_determination = winner_determination or WinnerDetermination()
        self.small_blind = small_blind
        self.big_blind = big_blind
        self.min_raise_amount = big_blind

        self.dealer_index = -1
        self.community_cards: Cards = []
        self.pot = 0
        self.current_player_index = 0
        self.current_round_bet = 0
        self.betting_round = BettingRound.PREFLOP
        self.active_players: List[Player] = []
        self.last_player_to_raise_id: Optional[PlayerId] = None
        self.acted_player_ids: Set[PlayerId] = set()
        self.hand_number = 0
        self.last_result: Optional[HandResult] = None

    def __repr__(self):
        return (
            "{}(hand={}, round={}, pot={}, current_round_bet={})".format(
                self.__class__.__name__,
                self.hand_number,
                self.betting_round.name,
                self.pot,
                self.current_round_bet,
            )
        )

    # ------------------------------------------------------------------
    # Read helpers
    # ------------------------------------------------------------------

    @property
    def current_player(self) -> Optional[Player]:
        if 0 <= self.current_player_index < len(self.active_players):
            return self.active_players[self.current_player_index]
        return None

    def get_player(self, player_id: PlayerId) -> Optional[Player]:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def live_players(self) -> List[Player]:
        """Players still contesting the pot this hand."""
        return [p for p in self.active_players if not p.folded]

    def chips_in_play(self) -> Money:
        return sum(p.chips for p in self.players) + self.pot

    def to_call(self, player_id: PlayerId) -> Money:
        player = self.get_player(player_id)
        if player is None:
            return 0
        return max(self.current_round_bet - player.current_bet, 0)

    def legal_actions(self, player_id: PlayerId) -> List[PlayerAction]:
        """Actions ``player_id`` may take right now; empty off-turn."""
        player = self.current_player
        if (
            player is None
            or player.id != player_id
            or self.betting_round not in BETTING_ROUNDS
            or not self._can_act(player)
        ):
            return []

        actions = [PlayerAction.FOLD]
        to_call = self.current_round_bet - player.current_bet
        if to_call <= 0:
            actions.append(PlayerAction.CHECK)
        else:
            actions.append(PlayerAction.CALL)

        if self.current_round_bet == 0:
            actions.append(PlayerAction.BET)
        elif player.chips > to_call:
            actions.append(PlayerAction.RAISE)
        return actions

    # ------------------------------------------------------------------
    # Seat walking
    # ------------------------------------------------------------------

    @staticmethod
    def _can_act(player: Player) -> bool:
        return not player.folded and not player.is_all_in

    def _next_seat(
        self,
        start: int,
        predicate: Callable[[Player], bool],
    ) -> Optional[int]:
        """First seat index at or after ``start`` (wrapping) matching."""
        count = len(self.players)
        for offset in range(count):
            index = (start + offset) % count
            if predicate(self.players[index]):
                return index
        return None

    def _active_index_of(self, player: Player) -> int:
        for index, candidate in enumerate(self.active_players):
            if candidate.id == player.id:
                return index
        return -1

    def _players_from_dealer_left(self, players: Sequence[Player]) -> List[Player]:
        ids = {p.id for p in players}
        count = len(self.players)
        ordered = []
        for offset in range(1, count + 1):
            seat = self.players[(self.dealer_index + offset) % count]
            if seat.id in ids:
                ordered.append(seat)
        return ordered

    # ------------------------------------------------------------------
    # Hand lifecycle
    # ------------------------------------------------------------------

    def setup_new_hand(self) -> None:
        self.deck.reset()
        self.community_cards = []
        self.pot = 0
        self.current_round_bet = 0
        self.min_raise_amount = self.big_blind
        self.last_player_to_raise_id = None
        self.acted_player_ids = set()

        for player in self.players:
            player.clear_hand()
        self.active_players = [p for p in self.players if p.chips > 0]

        if len(self.active_players) < MIN_PLAYERS:
            self.betting_round = BettingRound.GAME_OVER
            self.current_player_index = -1
            logger.info("Game over: fewer than %d players with chips", MIN_PLAYERS)
            return

        self.hand_number += 1
        self.betting_round = BettingRound.PREFLOP
        # The button moves over every seat, busted or not.
        self.dealer_index = (self.dealer_index + 1) % len(self.players)

        active_ids = {p.id for p in self.active_players}

        def funded(player: Player) -> bool:
            return player.id in active_ids and player.chips > 0

        sb_pos = self._next_seat(self.dealer_index + 1, funded)
        bb_pos = self._next_seat(sb_pos + 1, funded)
        sb_player = self.players[sb_pos]
        bb_player = self.players[bb_pos]

        self.pot += sb_player.bet(self.small_blind)
        self.pot += bb_player.bet(self.big_blind)
        self.current_round_bet = self.big_blind
        self.last_player_to_raise_id = bb_player.id

        logger.info(
            "Hand #%d: dealer %s, small blind %s (%d), big blind %s (%d)",
            self.hand_number,
            self.players[self.dealer_index].name,
            sb_player.name,
            sb_player.current_bet,
            bb_player.name,
            bb_player.current_bet,
        )

        self.deal_hands()

        first_pos = self._next_seat(
            bb_pos + 1,
            lambda p: p.id in active_ids and self._can_act(p),
        )
        if first_pos is None:
            self.current_player_index = -1
        else:
            self.current_player_index = self._active_index_of(self.players[first_pos])

        if self._betting_closed():
            logger.info("No betting possible after the blinds, running out the board")
            self.collect_bets_and_start_next_round()
        elif self.current_player is not None:
            logger.debug("Action starts with %s", self.current_player.name)

    def deal_hands(self) -> None:
        if self.betting_round != BettingRound.PREFLOP:
            return
        if any(p.hand for p in self.active_players):
            return

        receivers = self._players_from_dealer_left(self.active_players)
        for _ in range(HOLE_CARDS):
            for player in receivers:
                card = self.deck.deal()
                if card is None:
                    logger.warning("Deck exhausted while dealing hole cards")
                    return
                player.receive_card(card)

    def _deal_board(self, expected: BettingRound, count: int, board_size: int) -> None:
        if self.betting_round != expected:
            return
        # A street is dealt whole or not at all; the board stays 0, 3, 4 or 5.
        if len(self.community_cards) + count != board_size:
            logger.warning(
                "Skipping the %s: board holds %d cards",
                expected.name,
                len(self.community_cards),
            )
            return
        if len(self.deck) < count + 1:
            logger.warning(
                "Deck exhausted, skipping the %s (%d cards left)",
                expected.name,
                len(self.deck),
            )
            return
        self.deck.deal()
        for _ in range(count):
            self.community_cards.append(self.deck.deal())
        logger.info(
            "%s: %s",
            expected.name.capitalize(),
            " ".join(self.community_cards),
        )

    def deal_flop(self) -> None:
        self._deal_board(BettingRound.FLOP, 3, 3)

    def deal_turn(self) -> None:
        self._deal_board(BettingRound.TURN, 1, 4)

    def deal_river(self) -> None:
        self._deal_board(BettingRound.RIVER, 1, 5)

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    def handle_player_action(
        self,
        player_id: PlayerId,
        action: Union[str, PlayerAction, Action],
        amount: Optional[Money] = None,
    ) -> bool:
        """Apply one action; return ``False`` and change nothing if invalid."""
        try:
            if isinstance(action, ACTION_TYPES):
                if amount is not None:
                    raise InvalidActionError(
                        "amount must be carried by the action itself"
                    )
                variant = action
            else:
                variant = make_action(action, amount)
            player = self._validate_turn(player_id)
            self._validate_action(player, variant)
        except InvalidActionError as exc:
            logger.warning(
                "Rejected %s from %s: %s",
                getattr(action, "value", action),
                player_id,
                exc,
            )
            return False

        committed = self._apply_action(player, variant)
        self.pot += committed
        logger.debug(
            "%s %s (committed %d, round bet %d, pot %d)",
            player.name,
            variant.tag.value,
            committed,
            self.current_round_bet,
            self.pot,
        )
        self.advance_to_next_player_or_round()
        return True

    def _validate_turn(self, player_id: PlayerId) -> Player:
        if self.betting_round not in BETTING_ROUNDS:
            raise InvalidActionError(
                f"no betting in progress ({self.betting_round.name})"
            )
        player = self.current_player
        if player is None or player.id != player_id:
            expected = player.id if player is not None else None
            raise InvalidActionError(
                f"not {player_id}'s turn (waiting for {expected})"
            )
        if not self._can_act(player):
            raise InvalidActionError(f"{player_id} is folded or all-in")
        return player

    def _validate_action(self, player: Player, action: Action) -> None:
        if isinstance(action, Check):
            if player.current_bet < self.current_round_bet:
                raise InvalidActionError(
                    f"cannot check facing {self.current_round_bet}, "
                    f"must call {self.current_round_bet - player.current_bet}"
                )
        elif isinstance(action, Bet):
            if self.current_round_bet > 0:
                raise InvalidActionError(
                    f"cannot bet into {self.current_round_bet}, call or raise"
                )
            if action.amount < self.min_raise_amount and player.chips > action.amount:
                raise InvalidActionError(
                    f"bet {action.amount} below minimum {self.min_raise_amount}"
                )
        elif isinstance(action, Raise):
            if self.current_round_bet == 0:
                raise InvalidActionError("nothing to raise, use bet")
            required = self.current_round_bet + action.amount - player.current_bet
            if action.amount < self.min_raise_amount and player.chips > required:
                raise InvalidActionError(
                    f"raise {action.amount} below minimum {self.min_raise_amount}"
                )

    def _apply_action(self, player: Player, action: Action) -> Money:
        if isinstance(action, Fold):
            player.fold()
            self.acted_player_ids.add(player.id)
            return 0

        if isinstance(action, Check):
            self.acted_player_ids.add(player.id)
            return 0

        if isinstance(action, Call):
            self.acted_player_ids.add(player.id)
            return player.call(self.current_round_bet)

        if isinstance(action, Bet):
            committed = player.bet(action.amount)
            self.current_round_bet = player.current_bet
            self.min_raise_amount = max(player.current_bet, self.big_blind)
            self._mark_aggressor(player)
            return committed

        previous_round_bet = self.current_round_bet
        committed = player.raise_bet(action.amount, previous_round_bet)
        increment = player.current_bet - previous_round_bet
        if increment > 0:
            self.current_round_bet = player.current_bet
            if increment >= self.min_raise_amount:
                self.min_raise_amount = increment
            self._mark_aggressor(player)
        else:
            # All-in for no more than a call.
            self.acted_player_ids.add(player.id)
        return committed

    def _mark_aggressor(self, player: Player) -> None:
        self.last_player_to_raise_id = player.id
        self.acted_player_ids = {player.id}

    # ------------------------------------------------------------------
    # Turn and street progression
    # ------------------------------------------------------------------

    def _needs_action(self, player: Player) -> bool:
        return self._can_act(player) and (
            player.id not in self.acted_player_ids
            or player.current_bet < self.current_round_bet
        )

    def _betting_closed(self) -> bool:
        actors = [p for p in self.live_players() if not p.is_all_in]
        if len(actors) <= 1:
            return all(p.current_bet >= self.current_round_bet for p in actors)
        return not any(self._needs_action(p) for p in actors)

    def advance_to_next_player_or_round(self) -> None:
        live = self.live_players()
        if len(live) == 1:
            self._award_uncontested(live[0])
            self.setup_new_hand()
            return

        if self._betting_closed():
            logger.debug("Betting closed on the %s", self.betting_round.name)
            self.collect_bets_and_start_next_round()
            return

        count = len(self.active_players)
        for offset in range(1, count + 1):
            index = (self.current_player_index + offset) % count
            if self._needs_action(self.active_players[index]):
                self.current_player_index = index
                logger.debug("Next to act: %s", self.active_players[index].name)
                return

        logger.error("Could not determine the next player, closing the round")
        self.collect_bets_and_start_next_round()

    def _return_uncalled_bet(self) -> None:
        if not self.active_players:
            return
        top = max(self.live_players(), key=lambda p: p.current_bet, default=None)
        if top is None:
            return
        matched = max(
            (p.current_bet for p in self.active_players if p.id != top.id),
            default=0,
        )
        excess = top.current_bet - matched
        if excess > 0:
            top.return_bet(excess)
            self.pot -= excess
            logger.info("Returned uncalled %d to %s", excess, top.name)

    def collect_bets_and_start_next_round(self) -> None:
        self._return_uncalled_bet()
        self.current_round_bet = 0
        self.min_raise_amount = self.big_blind
        self.last_player_to_raise_id = None
        self.acted_player_ids = set()
        for player in self.active_players:
            player.current_bet = 0

        if self.betting_round == BettingRound.PREFLOP:
            self.betting_round = BettingRound.FLOP
            self.deal_flop()
        elif self.betting_round == BettingRound.FLOP:
            self.betting_round = BettingRound.TURN
            self.deal_turn()
        elif self.betting_round == BettingRound.TURN:
            self.betting_round = BettingRound.RIVER
            self.deal_river()
        elif self.betting_round == BettingRound.RIVER:
            self.betting_round = BettingRound.SHOWDOWN
            self.determine_winner()
            return
        else:
            logger.warning(
                "Cannot start a betting round from %s", self.betting_round.name
            )
            return

        active_ids = {p.id for p in self.active_players}
        first_pos = self._next_seat(
            self.dealer_index + 1,
            lambda p: p.id in active_ids and self._can_act(p),
        )
        if first_pos is None:
            self.current_player_index = -1
        else:
            self.current_player_index = self._active_index_of(self.players[first_pos])

        if self._betting_closed():
            logger.info(
                "No betting possible on the %s, dealing on", self.betting_round.name
            )
            self.collect_bets_and_start_next_round()
        elif self.current_player is not None:
            logger.info(
                "%s betting starts with %s",
                self.betting_round.name.capitalize(),
                self.current_player.name,
            )

    # ------------------------------------------------------------------
    # Showdown and awards
    # ------------------------------------------------------------------

    def _award(self, payouts: List, hand_name: Optional[str] = None) -> None:
        result = HandResult(
            hand_number=self.hand_number,
            pot=self.pot,
            payouts={},
            hand_name=hand_name,
            community_cards=list(self.community_cards),
        )
        for player, amount in payouts:
            player.win_pot(amount)
            result.payouts[player.id] = amount
            logger.info("%s wins %d", player.name, amount)
        self.pot = 0
        self.last_result = result

    def _award_uncontested(self, winner: Player) -> None:
        logger.info("Everyone else folded")
        self._award([(winner, self.pot)])

    def determine_winner(self) -> None:
        if self.betting_round != BettingRound.SHOWDOWN:
            return

        contenders = self._players_from_dealer_left(self.live_players())
        if not contenders:
            logger.error("Showdown without contenders, pot of %d left", self.pot)
            self.setup_new_hand()
            return
        if len(contenders) == 1:
            self._award([(contenders[0], self.pot)])
            self.setup_new_hand()
            return

        best = self.winner_determination.determine_winners(
            contenders,
            self.community_cards,
        )
        winners = [player for player, _ in best]
        hand_name = best[0][1].hand_name
        if len(winners) > 1:
            logger.info(
                "Split pot between %s with %s",
                ", ".join(p.name for p in winners),
                hand_name,
            )
        self._award(split_pot(self.pot, winners), hand_name=hand_name)
        self.setup_new_hand()

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        current = self.current_player
        return {
            "schema_version": SCHEMA_VERSION,
            "players": [p.to_dict() for p in self.players],
            "active_player_ids": [p.id for p in self.active_players],
            "community_cards": list(self.community_cards),
            "pot": self.pot,
            "current_player_id": current.id if current is not None else None,
            "current_round_bet": self.current_round_bet,
            "betting_round": int(self.betting_round),
            "dealer_index": self.dealer_index,
            "min_raise_amount": self.min_raise_amount,
            "small_blind": self.small_blind,
            "big_blind": self.big_blind,
            "last_player_to_raise_id": self.last_player_to_raise_id,
            "acted_player_ids": sorted(self.acted_player_ids),
            "hand_number": self.hand_number,
        }

    @staticmethod
    def display_name(player_id: PlayerId, local_player_id: Optional[PlayerId]) -> str:
        if player_id == local_player_id:
            return "You"
        return f"Peer ({player_id})"

    @classmethod
    def from_dict(
        cls,
        data: Union[Dict[str, Any], str, bytes],
        local_player_id: Optional[PlayerId] = None,
        rng: Optional[random.Random] = None,
    ) -> "GameState":
        """Build a table from a snapshot; raises ``SnapshotError`` if invalid."""
        snapshot = decode_snapshot(data)
        state = cls(
            [p.name for p in snapshot.players],
            0,
            snapshot.small_blind,
            snapshot.big_blind,
            rng=rng,
        )
        state.players = [
            Player(p.id, cls.display_name(p.id, local_player_id), p.chips)
            for p in snapshot.players
        ]
        state._apply_snapshot(snapshot, local_player_id)
        logger.info("Table hydrated from snapshot (hand #%d)", state.hand_number)
        return state

    def update_from_dict(
        self,
        data: Union[Dict[str, Any], str, bytes],
        local_player_id: Optional[PlayerId] = None,
    ) -> None:
        """Overwrite this table in place; raises ``SnapshotError`` if invalid."""
        snapshot = decode_snapshot(data)
        known = {p.id for p in self.players}
        for entry in snapshot.players:
            if entry.id not in known:
                logger.warning("Player %s from snapshot not found locally", entry.id)
        self.small_blind = snapshot.small_blind
        self.big_blind = snapshot.big_blind
        self._apply_snapshot(snapshot, local_player_id)
        logger.info("Table updated from peer snapshot (hand #%d)", self.hand_number)

    def _apply_snapshot(
        self,
        snapshot: GameSnapshot,
        local_player_id: Optional[PlayerId],
    ) -> None:
        by_id = {p.id: p for p in self.players}
        for entry in snapshot.players:
            player = by_id.get(entry.id)
            if player is None:
                continue
            player.update_from_dict(entry.model_dump())
            player.name = self.display_name(player.id, local_player_id)

        self.active_players = [
            by_id[player_id]
            for player_id in snapshot.active_player_ids
            if player_id in by_id
        ]
        self.community_cards = list(snapshot.community_cards)
        self.pot = snapshot.pot
        self.current_round_bet = snapshot.current_round_bet
        self.betting_round = snapshot.betting_round
        self.dealer_index = snapshot.dealer_index
        self.min_raise_amount = snapshot.min_raise_amount or self.big_blind
        self.last_player_to_raise_id = snapshot.last_player_to_raise_id
        self.acted_player_ids = set(snapshot.acted_player_ids)
        self.hand_number = snapshot.hand_number

        current = by_id.get(snapshot.current_player_id)
        if current is not None and current in self.active_players:
            self.current_player_index = self._active_index_of(current)
        elif self.active_players:
            self.current_player_index = 0
        else:
            self.current_player_index = -1

        known_cards = list(self.community_cards)
        for player in self.players:
            known_cards.extend(player.hand)
        self.deck.reset()
        self.deck.remove_cards(known_cards)
