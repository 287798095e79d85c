import random

import pytest

from pokertable.cards import DECK_SIZE, Card, Deck, cards_to_pokerkit_string, get_cards


def test_get_cards_returns_52_distinct_cards():
    cards = get_cards()

    assert len(cards) == DECK_SIZE == 52
    assert len(set(cards)) == 52


def test_deal_until_exhausted_returns_none():
    deck = Deck(random.Random(1))
    dealt = [deck.deal() for _ in range(52)]

    assert len(set(dealt)) == 52
    assert len(deck) == 0
    assert deck.deal() is None


def test_reset_restores_full_deck():
    deck = Deck(random.Random(2))
    deck.deal()
    deck.deal()

    deck.reset()

    assert deck.cards_count() == 52
    assert len({deck.deal() for _ in range(52)}) == 52


def test_seeded_shuffles_repeat():
    first = Deck(random.Random(7))
    second = Deck(random.Random(7))
    first.shuffle()
    second.shuffle()

    assert [first.deal() for _ in range(10)] == [second.deal() for _ in range(10)]


def test_remove_cards_drops_known_cards():
    deck = Deck(random.Random(3))
    deck.remove_cards([Card("A♠"), Card("10♥")])

    remaining = {deck.deal() for _ in range(len(deck))}

    assert len(remaining) == 50
    assert Card("A♠") not in remaining
    assert Card("10♥") not in remaining


@pytest.mark.parametrize("text", ["1♠", "A", "", "Ax", "11♥", "A♠♠"])
def test_parse_rejects_invalid_cards(text):
    with pytest.raises(ValueError):
        Card.parse(text)


def test_card_properties():
    card = Card.parse("10♣")

    assert card.rank == "10"
    assert card.suit == "♣"
    assert card.value == 10
    assert Card("A♦").value == 14
    assert Card("J♥").value == 11


def test_pokerkit_notation_conversion():
    assert Card("10♣").to_pokerkit() == "Tc"
    assert Card("A♠").to_pokerkit() == "As"
    assert Card.from_pokerkit("Th") == Card("10♥")
    assert Card.from_pokerkit("2d") == Card("2♦")
    assert cards_to_pokerkit_string([Card("K♥"), Card("2♠")]) == "Kh2s"


def test_from_pokerkit_rejects_unknown_suit():
    with pytest.raises(ValueError):
        Card.from_pokerkit("Ax")
