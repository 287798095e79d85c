#!/usr/bin/env python3

import logging
import random
from typing import List, Optional

logger = logging.getLogger(__name__)

RANKS = ("2", "3", "4", "5", "6", "7", "8", "9", "10", "J", "Q", "K", "A")
SUITS = ("♥", "♦", "♣", "♠")
DECK_SIZE = len(RANKS) * len(SUITS)


class Card(str):
    """
    Immutable playing card in "<rank><suit>" form.
    Our format: "2♥", "A♠", "10♣"
    PokerKit format: "2h", "As", "Tc"
    """

    # Mapping from our suit symbols to pokerkit suit letters
    SUIT_MAP = {
        '♥': 'h',  # hearts
        '♦': 'd',  # diamonds
        '♣': 'c',  # clubs
        '♠': 's',  # spades
    }

    # Reverse mapping
    SUIT_REVERSE_MAP = {v: k for k, v in SUIT_MAP.items()}

    @classmethod
    def parse(cls, text: str) -> 'Card':
        """Validate ``text`` and return it as a Card.

        Raises:
            ValueError: If ``text`` is not one of the 52 standard cards.
        """
        if not isinstance(text, str):
            raise ValueError(f"Invalid card: {text!r}")
        rank, suit = text[:-1], text[-1:]
        if rank not in RANKS or suit not in SUITS:
            raise ValueError(f"Invalid card: {text!r}")
        return cls(text)

    @property
    def suit(self) -> str:
        """Return suit symbol (♥, ♦, ♣, ♠)"""
        return self[-1:]

    @property
    def rank(self) -> str:
        """Return rank string (2-10, J, Q, K, A)"""
        return self[:-1]

    @property
    def value(self) -> int:
        """Return numeric value for comparison"""
        rank = self.rank
        if rank == "J":
            return 11
        elif rank == "Q":
            return 12
        elif rank == "K":
            return 13
        elif rank == "A":
            return 14
        return int(rank)

    def to_pokerkit(self) -> str:
        """Convert to pokerkit notation (e.g., '2h', 'As')"""
        rank = self.rank
        suit_letter = self.SUIT_MAP[self.suit]

        # Convert rank: 10 -> T, others stay the same
        if rank == "10":
            rank = "T"

        return f"{rank}{suit_letter}"

    @classmethod
    def from_pokerkit(cls, pokerkit_card: str) -> 'Card':
        """Create Card from pokerkit notation (e.g., '2h', 'As')"""
        if len(pokerkit_card) != 2:
            raise ValueError(f"Invalid pokerkit card: {pokerkit_card}")

        rank = pokerkit_card[0].upper()
        suit_letter = pokerkit_card[1].lower()

        # Convert T back to 10
        if rank == "T":
            rank = "10"

        suit_symbol = cls.SUIT_REVERSE_MAP.get(suit_letter)
        if suit_symbol is None:
            raise ValueError(f"Invalid pokerkit card: {pokerkit_card}")

        return cls.parse(f"{rank}{suit_symbol}")


Cards = List[Card]


def get_cards() -> Cards:
    """Generate an ordered standard 52-card deck"""
    return [Card(f"{rank}{suit}") for suit in SUITS for rank in RANKS]


def cards_to_pokerkit_string(cards: Cards) -> str:
    """Convert a list of Cards to pokerkit string format"""
    return ''.join(card.to_pokerkit() for card in cards)


class Deck:
    """Ordered stack of cards; the top of the deck is the end of the list."""

    def __init__(self, rng: Optional[random.Random] = None):
        self._rng = rng if rng is not None else random.SystemRandom()
        self._cards: Cards = get_cards()

    def __len__(self) -> int:
        return len(self._cards)

    def __repr__(self):
        return "{}(remaining={})".format(self.__class__.__name__, len(self))

    def cards_count(self) -> int:
        return len(self._cards)

    def shuffle(self) -> None:
        """Fisher-Yates shuffle of the remaining cards."""
        cards = self._cards
        for i in range(len(cards) - 1, 0, -1):
            j = self._rng.randrange(i + 1)
            cards[i], cards[j] = cards[j], cards[i]

    def deal(self) -> Optional[Card]:
        """Remove and return the top card, or ``None`` once exhausted."""
        if not self._cards:
            logger.warning("Deck exhausted, nothing to deal")
            return None
        return self._cards.pop()

    def reset(self) -> None:
        """Rebuild the full 52 card set and shuffle it."""
        self._cards = get_cards()
        self.shuffle()

    def remove_cards(self, cards: Cards) -> None:
        """Take cards already in play out of the deck."""
        known = set(cards)
        self._cards = [card for card in self._cards if card not in known]
