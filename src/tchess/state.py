"""Caller-owned game snapshot and the attack context handed to defend decisions."""

from collections.abc import Mapping
from dataclasses import dataclass, field

import chess

from tchess.board import Board
from tchess.combat import AttackType
from tchess.pieces import Piece, parse_color

__all__ = [
    "AttackContext",
    "GameState",
]


@dataclass(frozen=True)
class GameState:
    """Snapshot of everything the decision core reads.

    The core never mutates ``board``; it works on private copies.
    """

    board: Board
    accelerated: bool = False
    defends: Mapping[chess.Color, int] = field(
        default_factory=lambda: {chess.WHITE: 0, chess.BLACK: 0}
    )

    def tokens(self, color: chess.Color) -> int:
        return self.defends.get(color, 0)

    def validate(self) -> None:
        self.board.validate_kings()
        for color, count in self.defends.items():
            if count < 0:
                raise ValueError(f"Negative defend count for {chess.COLOR_NAMES[color]}")

    @classmethod
    def from_dict(cls, data: dict) -> "GameState":
        """Parse the page's state form: ``{board, accelerated, defends: {"w", "b"}}``."""
        defends = {parse_color(k): int(v) for k, v in (data.get("defends") or {}).items()}
        return cls(
            board=Board.from_rows(data["board"]),
            accelerated=bool(data.get("accelerated", False)),
            defends=defends,
        )


@dataclass(frozen=True)
class AttackContext:
    attack_type: AttackType
    attacker: Piece
    defender: Piece
    defend_locked: bool = False
