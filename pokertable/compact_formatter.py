"""Compact text rendering of a table for console and log output."""

from __future__ import annotations

from typing import List, Optional, Sequence

from pokertable.cards import Card
from pokertable.entities import BettingRound, Player, PlayerAction
from pokertable.game_state import GameState


class CompactFormatter:
    """Read-only helpers turning table state into short text lines.

    Nothing here mutates the table; hidden hole cards are rendered as
    backs so the same helpers serve both the acting seat and observers."""

    HIDDEN_CARD = "🂠"
    EMPTY = "—"

    _ACTION_ICONS = {
        PlayerAction.FOLD: "❌",
        PlayerAction.CHECK: "👍",
        PlayerAction.CALL: "📞",
        PlayerAction.BET: "💸",
        PlayerAction.RAISE: "📈",
    }

    @staticmethod
    def format_card(card: Card) -> str:
        """Return a short "rank+suit" rendering such as "A♠" or "T♥"."""

        rank = "T" if card.rank == "10" else card.rank
        return f"{rank}{card.suit}"

    @staticmethod
    def format_cards(cards: Sequence[Card], hidden: bool = False) -> str:
        """Join cards with spaces, returning "—" when empty."""

        if not cards:
            return CompactFormatter.EMPTY
        if hidden:
            return " ".join(CompactFormatter.HIDDEN_CARD for _ in cards)
        return " ".join(CompactFormatter.format_card(card) for card in cards)

    @staticmethod
    def _player_icon(player: Player, is_current: bool) -> str:
        if player.folded:
            return "⏸"
        if player.is_all_in:
            return "🔥"
        if is_current:
            return "▶️"
        return "•"

    @staticmethod
    def format_player_compact(
        player: Player,
        show_cards: bool = False,
        is_current: bool = False,
    ) -> str:
        """Return a single-line summary: icon, name, stack and round bet."""

        icon = CompactFormatter._player_icon(player, is_current)
        line = f"{icon} {player.name}:{max(player.chips, 0)} ({player.current_bet})"
        if player.hand:
            cards = CompactFormatter.format_cards(player.hand, hidden=not show_cards)
            line = f"{line} {cards}"
        return line

    @staticmethod
    def format_action_compact(
        player_name: str,
        action: PlayerAction,
        amount: Optional[int] = None,
    ) -> str:
        icon = CompactFormatter._ACTION_ICONS.get(action, "➖")
        amount_text = f"{amount}" if amount else ""
        return f"{player_name}:{icon}{amount_text}"

    @staticmethod
    def format_pot_compact(pot: int) -> str:
        return f"💰{max(pot, 0)}"

    @staticmethod
    def format_table(
        state: GameState,
        viewer_id: Optional[str] = None,
    ) -> str:
        """Render the whole table, revealing only ``viewer_id``'s cards."""

        if state.betting_round == BettingRound.GAME_OVER:
            leaders = sorted(state.players, key=lambda p: p.chips, reverse=True)
            return "Game over: " + ", ".join(
                f"{p.name} {p.chips}" for p in leaders
            )

        current = state.current_player
        lines: List[str] = [
            "Hand #{} {} {}".format(
                state.hand_number,
                state.betting_round.name.capitalize(),
                CompactFormatter.format_pot_compact(state.pot),
            ),
            "Board: " + CompactFormatter.format_cards(state.community_cards),
        ]
        for seat, player in enumerate(state.players):
            line = CompactFormatter.format_player_compact(
                player,
                show_cards=viewer_id is not None and player.id == viewer_id,
                is_current=current is not None and current.id == player.id,
            )
            if seat == state.dealer_index:
                line = f"{line} (D)"
            lines.append(line)
        if current is not None and state.current_round_bet:
            lines.append(
                f"To call: {state.to_call(current.id)} of {state.current_round_bet}"
            )
        return "\n".join(lines)
