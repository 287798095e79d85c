#!/usr/bin/env python3

import enum
import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from pokerkit import StandardHighHand

from pokertable.cards import Card, Cards, cards_to_pokerkit_string
from pokertable.entities import Money, Player

logger = logging.getLogger(__name__)

ACE_LOW_STRAIGHT = [14, 5, 4, 3, 2]


class HandsOfPoker(enum.IntEnum):
    HIGH_CARD = 0
    PAIR = 1
    TWO_PAIR = 2
    THREE_OF_A_KIND = 3
    STRAIGHT = 4
    FLUSH = 5
    FULL_HOUSE = 6
    FOUR_OF_A_KIND = 7
    STRAIGHT_FLUSH = 8
    ROYAL_FLUSH = 9


HAND_NAME_MAP = {
    HandsOfPoker.ROYAL_FLUSH: "Royal Flush",
    HandsOfPoker.STRAIGHT_FLUSH: "Straight Flush",
    HandsOfPoker.FOUR_OF_A_KIND: "Four of a Kind",
    HandsOfPoker.FULL_HOUSE: "Full House",
    HandsOfPoker.FLUSH: "Flush",
    HandsOfPoker.STRAIGHT: "Straight",
    HandsOfPoker.THREE_OF_A_KIND: "Three of a Kind",
    HandsOfPoker.TWO_PAIR: "Two Pair",
    HandsOfPoker.PAIR: "One Pair",
    HandsOfPoker.HIGH_CARD: "High Card",
}


@dataclass(frozen=True)
class HandEvaluation:
    rank: HandsOfPoker
    value: Tuple[int, ...]
    hand_name: str
    cards: Tuple[Card, ...] = field(default=(), compare=False)

    def key(self) -> Tuple[int, Tuple[int, ...]]:
        return (int(self.rank), self.value)

    def beats(self, other: "HandEvaluation") -> bool:
        return self.key() > other.key()

    def ties(self, other: "HandEvaluation") -> bool:
        return self.key() == other.key()


class HandEvaluator:
    """
    Rank a set of cards.

    With five or more cards pokerkit picks the strongest five-card
    combination, which is then classified into a category plus tie-break
    values. Shorter sets are classified as they are (pairs and trips count,
    straights and flushes need five cards).
    """

    def best_five(self, cards: Sequence[Card]) -> Cards:
        hand = StandardHighHand.from_game(cards_to_pokerkit_string(list(cards)))
        return [
            Card.from_pokerkit(f"{card.rank.value}{card.suit.value}")
            for card in hand.cards
        ]

    def evaluate(self, cards: Sequence[Card]) -> HandEvaluation:
        if not cards:
            return HandEvaluation(HandsOfPoker.HIGH_CARD, (0,), "No cards")

        if len(cards) >= 5:
            chosen = self.best_five(cards)
        else:
            chosen = list(cards)

        rank, value = self._classify(chosen)
        return HandEvaluation(
            rank=rank,
            value=tuple(value),
            hand_name=HAND_NAME_MAP[rank],
            cards=tuple(chosen),
        )

    @staticmethod
    def _group_hand(hand_values: List[int]) -> Tuple[List[int], List[int]]:
        dict_hand = Counter(hand_values)

        sorted_dict_items = sorted(
            dict_hand.items(),
            key=lambda x: (x[1], x[0]),
            reverse=True
        )

        counts = [x[1] for x in sorted_dict_items]
        keys = [x[0] for x in sorted_dict_items]
        return (counts, keys)

    def _classify(self, hand: Cards) -> Tuple[HandsOfPoker, List[int]]:
        hand_values = sorted((c.value for c in hand), reverse=True)
        counts, keys = self._group_hand(hand_values)

        is_five = len(hand) == 5
        is_single_suit = is_five and len(set(c.suit for c in hand)) == 1
        straight_high = self._straight_high(hand_values) if is_five else None

        if is_single_suit and straight_high is not None:
            if straight_high == 14:
                return HandsOfPoker.ROYAL_FLUSH, [straight_high]
            return HandsOfPoker.STRAIGHT_FLUSH, [straight_high]
        if counts[0] == 4:
            return HandsOfPoker.FOUR_OF_A_KIND, keys
        if counts[:2] == [3, 2]:
            return HandsOfPoker.FULL_HOUSE, keys
        if is_single_suit:
            return HandsOfPoker.FLUSH, hand_values
        if straight_high is not None:
            return HandsOfPoker.STRAIGHT, [straight_high]
        if counts[0] == 3:
            return HandsOfPoker.THREE_OF_A_KIND, keys
        if counts[:2] == [2, 2]:
            return HandsOfPoker.TWO_PAIR, keys
        if counts[0] == 2:
            return HandsOfPoker.PAIR, keys
        return HandsOfPoker.HIGH_CARD, hand_values

    @staticmethod
    def _straight_high(hand_values: List[int]):
        if len(set(hand_values)) != 5:
            return None
        if hand_values == ACE_LOW_STRAIGHT:
            return 5
        if hand_values[0] - hand_values[-1] == 4:
            return hand_values[0]
        return None


class WinnerDetermination:
    def __init__(self, evaluator: Optional[HandEvaluator] = None):
        self.evaluator = evaluator or HandEvaluator()

    def determine_winners(
        self,
        players: Sequence[Player],
        cards_table: Cards,
    ) -> List[Tuple[Player, HandEvaluation]]:
        """Return every player holding the best hand, in the given order."""
        best: List[Tuple[Player, HandEvaluation]] = []

        for player in players:
            evaluation = self.evaluator.evaluate(list(player.hand) + list(cards_table))
            logger.debug(
                "%s holds %s with %s %s",
                player.name,
                " ".join(player.hand),
                evaluation.hand_name,
                list(evaluation.value),
            )
            if not best or evaluation.beats(best[0][1]):
                best = [(player, evaluation)]
            elif evaluation.ties(best[0][1]):
                best.append((player, evaluation))

        return best


def split_pot(pot: Money, winners: Sequence[Player]) -> List[Tuple[Player, Money]]:
    """
    Divide ``pot`` evenly between ``winners``.

    Odd chips go one at a time to the winners in the order given, so callers
    pass winners ordered from the dealer's left.
    """
    if not winners:
        return []

    share, remainder = divmod(pot, len(winners))
    return [
        (player, share + (1 if index < remainder else 0))
        for index, player in enumerate(winners)
    ]
