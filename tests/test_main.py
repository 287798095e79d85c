import pytest

import main
from pokertable.entities import BettingRound, InvalidActionError
from pokertable.game_state import GameState
from pokertable.kvstore import RedisKVStore
from pokertable.winnerdetermination import HandEvaluation, HandsOfPoker


class FirstSeatWins:
    def determine_winners(self, players, cards_table):
        evaluation = HandEvaluation(HandsOfPoker.HIGH_CARD, (1,), "High Card")
        return [(p, evaluation) for p in players if p.id == "p0"]


def test_parse_command():
    assert main.parse_command(" Raise 20 ") == ("raise", 20)
    assert main.parse_command("check") == ("check", None)
    with pytest.raises(InvalidActionError):
        main.parse_command("")
    with pytest.raises(InvalidActionError):
        main.parse_command("bet lots")
    with pytest.raises(InvalidActionError):
        main.parse_command("bet 10 20")


def test_final_hand_result_is_printed(monkeypatch, capsys):
    state = GameState(
        ["Alice", "Bob"], 1000, 5, 10, winner_determination=FirstSeatWins()
    )
    state.players[1].chips = 10
    state.setup_new_hand()
    monkeypatch.setattr("builtins.input", lambda prompt: "call")

    main.play(state, RedisKVStore(), 60)

    assert state.betting_round == BettingRound.GAME_OVER
    assert state.hand_number == 1
    assert "Alice wins 20 with High Card" in capsys.readouterr().out


def test_bad_integer_setting_exits_cleanly(monkeypatch):
    monkeypatch.setenv("POKERTABLE_INITIAL_CHIPS", "lots")

    with pytest.raises(SystemExit) as excinfo:
        main.main()

    assert excinfo.value.code == 1
