"""Versioned pydantic models for table snapshots and peer messages."""

from __future__ import annotations

import json
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    field_validator,
    model_validator,
)

from pokertable.cards import Card
from pokertable.entities import (
    Action,
    BettingRound,
    InvalidActionError,
    PlayerAction,
    SnapshotError,
    make_action,
)

SCHEMA_VERSION = 1
BOARD_SIZES = (0, 3, 4, 5)


def _parse_cards(values: List[str]) -> List[str]:
    cards = [Card.parse(value) for value in values]
    if len(set(cards)) != len(cards):
        raise ValueError("duplicate cards")
    return cards


class _StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class PlayerSnapshot(_StrictModel):
    id: str = Field(min_length=1)
    name: str = ""
    chips: int = Field(ge=0)
    current_bet: int = Field(ge=0)
    folded: bool = False
    is_all_in: bool = False
    hand: List[str] = Field(default_factory=list, max_length=2)

    @field_validator("hand")
    @classmethod
    def _check_hand(cls, value: List[str]) -> List[str]:
        return _parse_cards(value)

    @model_validator(mode="after")
    def _check_all_in(self) -> "PlayerSnapshot":
        if self.is_all_in and self.chips > 0:
            raise ValueError("an all-in player cannot hold chips")
        return self


class GameSnapshot(_StrictModel):
    schema_version: Literal[1]
    players: List[PlayerSnapshot] = Field(min_length=2, max_length=10)
    active_player_ids: List[str] = Field(default_factory=list)
    community_cards: List[str] = Field(default_factory=list)
    pot: int = Field(ge=0)
    current_player_id: Optional[str] = None
    current_round_bet: int = Field(ge=0)
    betting_round: BettingRound
    dealer_index: int = Field(ge=-1)
    min_raise_amount: int = Field(ge=0)
    small_blind: int = Field(gt=0)
    big_blind: int = Field(gt=0)
    last_player_to_raise_id: Optional[str] = None
    acted_player_ids: List[str] = Field(default_factory=list)
    hand_number: int = Field(default=0, ge=0)

    @field_validator("community_cards")
    @classmethod
    def _check_board(cls, value: List[str]) -> List[str]:
        if len(value) not in BOARD_SIZES:
            raise ValueError(f"board must hold 0, 3, 4 or 5 cards, got {len(value)}")
        return _parse_cards(value)

    @model_validator(mode="after")
    def _check_consistency(self) -> "GameSnapshot":
        ids = [p.id for p in self.players]
        if len(set(ids)) != len(ids):
            raise ValueError("player ids must be unique")
        known = set(ids)
        unknown = set(self.active_player_ids) | set(self.acted_player_ids)
        for optional_id in (self.current_player_id, self.last_player_to_raise_id):
            if optional_id is not None:
                unknown.add(optional_id)
        unknown -= known
        if unknown:
            raise ValueError(f"unknown player ids: {sorted(unknown)}")
        if self.dealer_index >= len(self.players):
            raise ValueError("dealer_index out of range")
        if self.small_blind > self.big_blind:
            raise ValueError("small blind exceeds big blind")

        all_cards = list(self.community_cards)
        for player in self.players:
            all_cards.extend(player.hand)
        if len(set(all_cards)) != len(all_cards):
            raise ValueError("a card appears twice on the table")
        return self


class ActionPayload(_StrictModel):
    player_id: str = Field(min_length=1)
    action: PlayerAction
    amount: Optional[int] = Field(default=None, ge=1)

    @model_validator(mode="after")
    def _check_amount(self) -> "ActionPayload":
        try:
            make_action(self.action, self.amount)
        except InvalidActionError as exc:
            raise ValueError(str(exc)) from exc
        return self

    def to_action(self) -> Action:
        return make_action(self.action, self.amount)


class FullStateMessage(_StrictModel):
    type: Literal["gameStateFull"]
    payload: GameSnapshot


class StateUpdateMessage(_StrictModel):
    type: Literal["gameStateUpdate"]
    payload: GameSnapshot


class PlayerActionMessage(_StrictModel):
    type: Literal["playerAction"]
    payload: ActionPayload


GameMessage = Union[FullStateMessage, StateUpdateMessage, PlayerActionMessage]

_MESSAGE_TYPES = {
    "gameStateFull": FullStateMessage,
    "gameStateUpdate": StateUpdateMessage,
    "playerAction": PlayerActionMessage,
}


def _load(data: Union[Dict[str, Any], str, bytes]) -> Any:
    if isinstance(data, (str, bytes)):
        try:
            return json.loads(data)
        except ValueError as exc:
            raise SnapshotError(f"payload is not valid JSON: {exc}") from exc
    return data


def decode_snapshot(data: Union[Dict[str, Any], str, bytes]) -> GameSnapshot:
    """Validate a table snapshot, failing closed with ``SnapshotError``."""
    try:
        return GameSnapshot.model_validate(_load(data))
    except ValidationError as exc:
        raise SnapshotError(f"invalid snapshot: {exc}") from exc


def decode_message(data: Union[Dict[str, Any], str, bytes]) -> GameMessage:
    """Validate a peer message, failing closed with ``SnapshotError``."""
    raw = _load(data)
    if not isinstance(raw, dict):
        raise SnapshotError("message must be an object")
    message_type = raw.get("type")
    model = _MESSAGE_TYPES.get(message_type) if isinstance(message_type, str) else None
    if model is None:
        raise SnapshotError(f"unknown message type: {message_type!r}")
    try:
        return model.model_validate(raw)
    except ValidationError as exc:
        raise SnapshotError(f"invalid {raw['type']} message: {exc}") from exc


def encode_message(message_type: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    """Build an outbound message, validating it against the schema first."""
    message = decode_message({"type": message_type, "payload": payload})
    return message.model_dump(mode="json")
