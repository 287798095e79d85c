#!/usr/bin/env python3

import enum
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from pokertable.cards import Card, Cards

logger = logging.getLogger(__name__)


PlayerId = str
Money = int


class UserException(Exception):
    pass


class InvalidActionError(UserException):
    """Raised when an action is out of turn, illegal, or badly sized."""


class SnapshotError(UserException):
    """Raised when a snapshot or network message fails validation."""


class BettingRound(enum.IntEnum):
    PREFLOP = 0  # Hole cards only.
    FLOP = 1  # Three cards.
    TURN = 2  # Four cards.
    RIVER = 3  # Five cards.
    SHOWDOWN = 4
    GAME_OVER = 5  # Fewer than two players with chips.


class PlayerAction(enum.Enum):
    FOLD = "fold"
    CHECK = "check"
    CALL = "call"
    BET = "bet"
    RAISE = "raise"


@dataclass(frozen=True)
class Fold:
    tag = PlayerAction.FOLD


@dataclass(frozen=True)
class Check:
    tag = PlayerAction.CHECK


@dataclass(frozen=True)
class Call:
    tag = PlayerAction.CALL


@dataclass(frozen=True)
class Bet:
    amount: Money
    tag = PlayerAction.BET


@dataclass(frozen=True)
class Raise:
    """Raise by ``amount`` on top of the current round bet."""

    amount: Money
    tag = PlayerAction.RAISE


Action = Union[Fold, Check, Call, Bet, Raise]

_SIMPLE_ACTIONS = {
    PlayerAction.FOLD: Fold,
    PlayerAction.CHECK: Check,
    PlayerAction.CALL: Call,
}
_SIZED_ACTIONS = {
    PlayerAction.BET: Bet,
    PlayerAction.RAISE: Raise,
}


def make_action(
    tag: Union[str, PlayerAction],
    amount: Optional[Money] = None,
) -> Action:
    """Build an action variant from a loosely typed tag and amount.

    Raises:
        InvalidActionError: For unknown tags, a missing or non-positive
            amount on bet/raise, or an amount attached to fold/check/call.
    """
    try:
        kind = tag if isinstance(tag, PlayerAction) else PlayerAction(tag)
    except ValueError:
        raise InvalidActionError(f"Unknown action: {tag!r}") from None

    if kind in _SIMPLE_ACTIONS:
        if amount is not None:
            raise InvalidActionError(
                f"{kind.value} does not take an amount"
            )
        return _SIMPLE_ACTIONS[kind]()

    if isinstance(amount, bool) or not isinstance(amount, int):
        raise InvalidActionError(f"{kind.value} requires an integer amount")
    if amount <= 0:
        raise InvalidActionError(
            f"{kind.value} amount must be positive, got {amount}"
        )
    return _SIZED_ACTIONS[kind](amount)


class Player:
    def __init__(self, player_id: PlayerId, name: str, chips: Money):
        if chips < 0:
            raise ValueError("chips must not be negative")
        self.id = player_id
        self.name = name
        self.chips = chips
        self.hand: Cards = []
        self.current_bet = 0
        self.folded = False
        self.is_all_in = False

    def __repr__(self):
        return "{}({!r})".format(self.__class__.__name__, self.__dict__)

    def receive_card(self, card: Card) -> None:
        self.hand.append(card)

    def clear_hand(self) -> None:
        """Reset per-hand fields ahead of a new deal."""
        self.hand = []
        self.current_bet = 0
        self.folded = False
        self.is_all_in = False

    def fold(self) -> None:
        self.folded = True

    def _place_bet(self, amount: Money) -> Money:
        committed = max(min(amount, self.chips), 0)
        self.chips -= committed
        self.current_bet += committed
        if self.chips == 0 and committed > 0:
            self.is_all_in = True
            logger.debug("%s is all-in", self.name)
        return committed

    def bet(self, amount: Money) -> Money:
        return self._place_bet(amount)

    def call(self, target_round_bet: Money) -> Money:
        to_call = target_round_bet - self.current_bet
        if to_call <= 0:
            return 0
        return self._place_bet(to_call)

    def raise_bet(self, additional: Money, facing_round_bet: Money) -> Money:
        """Raise to ``facing_round_bet + additional`` for this round."""
        return self._place_bet(facing_round_bet + additional - self.current_bet)

    def win_pot(self, amount: Money) -> None:
        self.chips += amount
        if self.chips > 0:
            self.is_all_in = False

    def return_bet(self, amount: Money) -> None:
        """Give back chips the rest of the table could not match."""
        self.chips += amount
        self.current_bet -= amount
        if self.chips > 0:
            self.is_all_in = False

    # Serialization -------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "chips": self.chips,
            "current_bet": self.current_bet,
            "folded": self.folded,
            "is_all_in": self.is_all_in,
            "hand": list(self.hand),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        player = cls(data["id"], data.get("name", data["id"]), data["chips"])
        player.update_from_dict(data)
        return player

    def update_from_dict(self, data: Dict[str, Any]) -> None:
        # ``name`` is assigned by the owning table, never by the payload.
        self.chips = data["chips"]
        self.current_bet = data["current_bet"]
        self.folded = data["folded"]
        self.is_all_in = data["is_all_in"]
        self.hand = [Card.parse(card) for card in data["hand"]]
