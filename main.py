#!/usr/bin/env python3
"""Main entry point for a hot-seat console table."""

import logging
import sys
from typing import List, Optional, Tuple

from dotenv import load_dotenv

from pokertable.compact_formatter import CompactFormatter
from pokertable.config import Config
from pokertable.entities import BettingRound, InvalidActionError, make_action
from pokertable.game_state import GameState, HandResult
from pokertable.kvstore import RedisKVStore

logger = logging.getLogger(__name__)

CONSOLE_TABLE_ID = "console"


def parse_command(line: str) -> Tuple[str, Optional[int]]:
    """Split "raise 20" style input into an action tag and amount."""
    parts = line.strip().lower().split()
    if not parts:
        raise InvalidActionError("empty command")
    if len(parts) > 2:
        raise InvalidActionError(f"too many arguments: {line!r}")
    amount = None
    if len(parts) == 2:
        try:
            amount = int(parts[1])
        except ValueError:
            raise InvalidActionError(f"amount must be a number: {parts[1]!r}") from None
    return parts[0], amount


def result_lines(state: GameState, result: HandResult) -> List[str]:
    suffix = f" with {result.hand_name}" if result.hand_name else ""
    lines = []
    for player_id in result.winners:
        winner = state.get_player(player_id)
        lines.append(f"{winner.name} wins {result.payouts[player_id]}{suffix}")
    return lines


def play(state: GameState, store: RedisKVStore, ttl: int) -> None:
    shown_hand = 0
    while state.betting_round != BettingRound.GAME_OVER:
        player = state.current_player
        if player is None:
            logger.error("No player to act in %s", state.betting_round.name)
            return

        print()
        print(CompactFormatter.format_table(state, viewer_id=player.id))
        options = "/".join(a.value for a in state.legal_actions(player.id))
        try:
            line = input(f"{player.name} [{options}]> ")
        except EOFError:
            print()
            return

        try:
            tag, amount = parse_command(line)
            action = make_action(tag, amount)
        except InvalidActionError as exc:
            print(f"Invalid input: {exc}")
            continue

        if not state.handle_player_action(player.id, action):
            print("Action not allowed right now.")
            continue

        result = state.last_result
        if result is not None and result.hand_number != shown_hand:
            shown_hand = result.hand_number
            for line in result_lines(state, result):
                print(line)
        store.save_table_snapshot(CONSOLE_TABLE_ID, state.to_dict(), ttl)

    print(CompactFormatter.format_table(state))


def main() -> None:
    """Configure logging, build the table and run the console loop."""
    load_dotenv()

    try:
        cfg = Config()
        cfg.validate()
    except ValueError as exc:
        logging.basicConfig(level=logging.ERROR)
        logger.error("Invalid configuration: %s", exc)
        sys.exit(1)

    logging.basicConfig(
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        level=cfg.log_level
    )
    logger.info("Debug mode: %s", cfg.DEBUG)

    store = RedisKVStore.from_config(cfg)
    state = GameState(
        cfg.PLAYER_NAMES,
        cfg.INITIAL_CHIPS,
        cfg.SMALL_BLIND,
        cfg.BIG_BLIND,
    )
    state.setup_new_hand()

    try:
        play(state, store, cfg.SNAPSHOT_TTL_SECONDS)
    except KeyboardInterrupt:
        logger.info("Received interrupt signal, shutting down...")


if __name__ == '__main__':
    main()
