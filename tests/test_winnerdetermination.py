#!/usr/bin/env python3

import unittest
from dataclasses import dataclass, field
from typing import List

from pokertable.cards import Card
from pokertable.winnerdetermination import (
    HandEvaluator,
    HandsOfPoker,
    WinnerDetermination,
    split_pot,
)


@dataclass
class StubPlayer:
    id: str
    hand: List[Card]
    name: str = field(default="stub")


def cards(text: str) -> List[Card]:
    return [Card.parse(value) for value in text.split()]


class HandEvaluatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.evaluator = HandEvaluator()

    def assertRank(self, text: str, rank: HandsOfPoker) -> None:
        self.assertEqual(self.evaluator.evaluate(cards(text)).rank, rank)

    def test_categories(self) -> None:
        self.assertRank("A♠ K♠ Q♠ J♠ 10♠ 2♦ 3♣", HandsOfPoker.ROYAL_FLUSH)
        self.assertRank("9♥ 8♥ 7♥ 6♥ 5♥ A♦ A♣", HandsOfPoker.STRAIGHT_FLUSH)
        self.assertRank("7♠ 7♥ 7♦ 7♣ K♠ 2♦ 3♣", HandsOfPoker.FOUR_OF_A_KIND)
        self.assertRank("K♠ K♥ K♦ 4♣ 4♠ 2♦ 9♣", HandsOfPoker.FULL_HOUSE)
        self.assertRank("A♦ J♦ 8♦ 4♦ 2♦ K♠ Q♣", HandsOfPoker.FLUSH)
        self.assertRank("9♠ 8♥ 7♦ 6♣ 5♠ 2♦ 2♣", HandsOfPoker.STRAIGHT)
        self.assertRank("Q♠ Q♥ Q♦ 9♣ 5♠ 3♦ 2♣", HandsOfPoker.THREE_OF_A_KIND)
        self.assertRank("J♠ J♥ 4♦ 4♣ A♠ 8♦ 2♣", HandsOfPoker.TWO_PAIR)
        self.assertRank("10♠ 10♥ A♦ 8♣ 5♠ 3♦ 2♣", HandsOfPoker.PAIR)
        self.assertRank("A♠ J♥ 9♦ 7♣ 5♠ 3♦ 2♣", HandsOfPoker.HIGH_CARD)

    def test_wheel_is_five_high_straight(self) -> None:
        wheel = self.evaluator.evaluate(cards("A♠ 2♥ 3♦ 4♣ 5♠ 9♦ K♣"))
        six_high = self.evaluator.evaluate(cards("2♥ 3♦ 4♣ 5♠ 6♦ K♣ Q♥"))

        self.assertEqual(wheel.rank, HandsOfPoker.STRAIGHT)
        self.assertEqual(wheel.value, (5,))
        self.assertTrue(six_high.beats(wheel))

    def test_kicker_breaks_pair_tie(self) -> None:
        board = cards("K♠ K♥ 9♦ 6♣ 2♠")
        strong = self.evaluator.evaluate(cards("A♦ 3♣") + board)
        weak = self.evaluator.evaluate(cards("Q♦ 3♥") + board)

        self.assertEqual(strong.rank, HandsOfPoker.PAIR)
        self.assertTrue(strong.beats(weak))

    def test_short_hands_classify_pairs_only(self) -> None:
        self.assertRank("A♠ A♥", HandsOfPoker.PAIR)
        self.assertRank("A♠ K♠ Q♠", HandsOfPoker.HIGH_CARD)

    def test_empty_hand(self) -> None:
        evaluation = self.evaluator.evaluate([])

        self.assertEqual(evaluation.rank, HandsOfPoker.HIGH_CARD)
        self.assertEqual(evaluation.hand_name, "No cards")


class WinnerDeterminationTests(unittest.TestCase):
    def test_detects_straight_flush_winner(self) -> None:
        board = cards("10♠ J♠ K♠ 2♣ 9♠")
        player_one = StubPlayer(id="p0", hand=cards("A♠ Q♠"))
        player_two = StubPlayer(id="p1", hand=cards("A♦ K♦"))

        winners = WinnerDetermination().determine_winners(
            [player_one, player_two],
            board,
        )

        self.assertEqual(len(winners), 1)
        self.assertIs(winners[0][0], player_one)
        self.assertEqual(winners[0][1].hand_name, "Royal Flush")

    def test_split_when_board_plays(self) -> None:
        board = cards("A♣ K♦ Q♥ J♣ 10♦")
        player_one = StubPlayer(id="p0", hand=cards("2♠ 3♠"))
        player_two = StubPlayer(id="p1", hand=cards("4♥ 5♥"))

        winners = WinnerDetermination().determine_winners(
            [player_one, player_two],
            board,
        )

        self.assertEqual([p.id for p, _ in winners], ["p0", "p1"])
        self.assertEqual(winners[0][1].rank, HandsOfPoker.STRAIGHT)


class SplitPotTests(unittest.TestCase):
    def test_remainder_goes_to_first_winners(self) -> None:
        a, b, c = (StubPlayer(id=f"p{i}", hand=[]) for i in range(3))

        payouts = split_pot(100, [a, b, c])

        self.assertEqual([amount for _, amount in payouts], [34, 33, 33])
        self.assertEqual(sum(amount for _, amount in payouts), 100)

    def test_no_winners(self) -> None:
        self.assertEqual(split_pot(50, []), [])


if __name__ == "__main__":
    unittest.main()
