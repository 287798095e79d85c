import random

from pokertable.cards import Card
from pokertable.compact_formatter import CompactFormatter
from pokertable.entities import Player, PlayerAction
from pokertable.game_state import GameState


def test_format_cards():
    assert CompactFormatter.format_card(Card("10♥")) == "T♥"
    assert CompactFormatter.format_cards([Card("A♠"), Card("K♦")]) == "A♠ K♦"
    assert CompactFormatter.format_cards([]) == "—"
    assert CompactFormatter.format_cards([Card("A♠"), Card("K♦")], hidden=True) == "🂠 🂠"


def test_player_line_hides_cards_unless_shown():
    player = Player("p0", "Alice", 990)
    player.receive_card(Card("A♠"))
    player.receive_card(Card("A♥"))
    player.bet(10)

    hidden = CompactFormatter.format_player_compact(player)
    shown = CompactFormatter.format_player_compact(player, show_cards=True)

    assert "Alice:980 (10)" in hidden
    assert "A♠" not in hidden
    assert shown.endswith("A♠ A♥")


def test_folded_and_all_in_icons():
    folded = Player("p0", "Alice", 10)
    folded.fold()
    shoved = Player("p1", "Bob", 10)
    shoved.bet(10)

    assert CompactFormatter.format_player_compact(folded).startswith("⏸")
    assert CompactFormatter.format_player_compact(shoved).startswith("🔥")


def test_action_and_pot():
    assert CompactFormatter.format_action_compact("Bob", PlayerAction.RAISE, 20) == "Bob:📈20"
    assert CompactFormatter.format_action_compact("Bob", PlayerAction.CHECK) == "Bob:👍"
    assert CompactFormatter.format_pot_compact(15) == "💰15"


def test_format_table_reveals_only_viewer_cards():
    state = GameState(["Alice", "Bob"], 1000, rng=random.Random(1))
    state.setup_new_hand()
    before = state.to_dict()

    text = CompactFormatter.format_table(state, viewer_id="p1")

    lines = text.splitlines()
    assert lines[0] == "Hand #1 Preflop 💰15"
    assert lines[1] == "Board: —"
    assert "(D)" in lines[2]
    assert CompactFormatter.HIDDEN_CARD in lines[2]
    assert CompactFormatter.HIDDEN_CARD not in lines[3]
    assert lines[-1] == "To call: 5 of 10"
    assert state.to_dict() == before


def test_format_table_game_over():
    state = GameState(["Alice", "Bob"], 100)
    state.players[1].chips = 0
    state.setup_new_hand()

    assert CompactFormatter.format_table(state) == "Game over: Alice 100, Bob 0"
