#!/usr/bin/env python3
"""
Two-seat networked table session.

Glues a ``GameState`` to an injected transport (anything with a
``send(message)`` method) and a snapshot store. The host owns the deck:
whenever an action opens a new street or a new hand on the host, the full
table is re-sent so the peer's board and hole cards follow the host's.
"""

import logging
import random
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from pokertable.entities import (
    Action,
    BettingRound,
    InvalidActionError,
    Money,
    PlayerAction,
    PlayerId,
    SnapshotError,
    make_action,
)
from pokertable.game_state import ACTION_TYPES, GameState
from pokertable.kvstore import ensure_kv
from pokertable.snapshot import decode_message, encode_message

logger = logging.getLogger(__name__)

MSG_FULL_STATE = "gameStateFull"
MSG_STATE_UPDATE = "gameStateUpdate"
MSG_PLAYER_ACTION = "playerAction"


class TableSession:
    def __init__(
        self,
        *,
        local_player_id: PlayerId,
        transport=None,
        kv_store=None,
        table_id: str = "default",
        snapshot_ttl_seconds: Optional[int] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        self.local_player_id = local_player_id
        self.is_host = False
        self.game: Optional[GameState] = None
        self._transport = transport
        self._kv = ensure_kv(kv_store)
        self._table_id = str(table_id)
        self._snapshot_ttl = snapshot_ttl_seconds
        self._rng = rng

    @property
    def table_id(self) -> str:
        return self._table_id

    def is_local_turn(self) -> bool:
        if self.game is None:
            return False
        current = self.game.current_player
        return current is not None and current.id == self.local_player_id

    # ------------------------------------------------------------------
    # Outbound
    # ------------------------------------------------------------------

    def host_new_table(
        self,
        player_names: Sequence[str],
        initial_chips: Money,
        small_blind: Money = 5,
        big_blind: Money = 10,
    ) -> GameState:
        """Create the table as the initiating peer and share it."""
        self.is_host = True
        self.game = GameState(
            player_names,
            initial_chips,
            small_blind,
            big_blind,
            rng=self._rng,
        )
        self.game.setup_new_hand()
        logger.info(
            "Hosting table %s with %d seats", self._table_id, len(self.game.players)
        )
        self._send(MSG_FULL_STATE, self.game.to_dict())
        self._persist()
        return self.game

    def resume_from_store(self) -> Optional[GameState]:
        """Reload the last persisted snapshot of this table, if any."""
        payload = self._kv.load_table_snapshot(self._table_id)
        if payload is None:
            return None
        try:
            self.game = GameState.from_dict(payload, self.local_player_id, rng=self._rng)
        except SnapshotError as exc:
            logger.error("Stored snapshot for %s rejected: %s", self._table_id, exc)
            return None
        return self.game

    def perform_local_action(
        self,
        action: Union[str, PlayerAction, Action],
        amount: Optional[Money] = None,
    ) -> bool:
        """Apply the local player's action and forward it to the peer."""
        if self.game is None:
            logger.warning("No table yet, ignoring local %s", action)
            return False
        if not self.is_local_turn():
            current = self.game.current_player
            logger.warning(
                "Not %s's turn (waiting for %s)",
                self.local_player_id,
                current.id if current is not None else None,
            )
            return False

        try:
            if isinstance(action, ACTION_TYPES):
                variant = action
            else:
                variant = make_action(action, amount)
        except InvalidActionError as exc:
            logger.warning("Rejected local action: %s", exc)
            return False

        before = self._progress_marker()
        if not self.game.handle_player_action(self.local_player_id, variant):
            return False

        self._send(
            MSG_PLAYER_ACTION,
            {
                "player_id": self.local_player_id,
                "action": variant.tag.value,
                "amount": getattr(variant, "amount", None),
            },
        )
        self._after_change(before)
        return True

    # ------------------------------------------------------------------
    # Inbound
    # ------------------------------------------------------------------

    def handle_message(self, raw: Union[Dict[str, Any], str, bytes]) -> bool:
        """Apply one peer message; ``False`` when it was ignored."""
        try:
            message = decode_message(raw)
        except SnapshotError as exc:
            logger.warning("Dropping malformed peer message: %s", exc)
            return False

        if self.game is None and message.type != MSG_FULL_STATE:
            logger.warning("No table yet, ignoring %s", message.type)
            return False

        if message.type == MSG_FULL_STATE:
            self.game = GameState.from_dict(
                message.payload.model_dump(mode="json"),
                self.local_player_id,
                rng=self._rng,
            )
            self._persist()
            return True

        if message.type == MSG_STATE_UPDATE:
            self.game.update_from_dict(
                message.payload.model_dump(mode="json"),
                self.local_player_id,
            )
            self._persist()
            return True

        payload = message.payload
        if payload.player_id == self.local_player_id:
            logger.debug("Ignoring echo of our own %s", payload.action.value)
            return False

        before = self._progress_marker()
        applied = self.game.handle_player_action(payload.player_id, payload.to_action())
        if not applied:
            # No reconciliation: the host's next full snapshot realigns us.
            logger.warning(
                "Peer action %s from %s does not fit local state",
                payload.action.value,
                payload.player_id,
            )
            return False

        self._after_change(before)
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _progress_marker(self) -> Tuple[int, BettingRound]:
        return (self.game.hand_number, self.game.betting_round)

    def _after_change(self, before: Tuple[int, BettingRound]) -> None:
        if self.is_host and self._progress_marker() != before:
            self._send(MSG_FULL_STATE, self.game.to_dict())
        self._persist()

    def _send(self, message_type: str, payload: Dict[str, Any]) -> None:
        if self._transport is None:
            return
        try:
            message = encode_message(message_type, payload)
        except SnapshotError as exc:
            logger.error("Refusing to send invalid %s: %s", message_type, exc)
            return
        try:
            self._transport.send(message)
        except Exception as exc:
            logger.warning("Failed to send %s to peer: %s", message_type, exc)

    def _persist(self) -> None:
        if self.game is None:
            return
        self._kv.save_table_snapshot(
            self._table_id,
            self.game.to_dict(),
            ttl_seconds=self._snapshot_ttl,
        )
