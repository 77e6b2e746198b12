"""Piece types, per-type combat tables, and the HP-carrying piece value."""

import enum
from dataclasses import dataclass

import chess

__all__ = [
    "PieceType",
    "MAX_HP",
    "BASE_DAMAGE",
    "MATERIAL_VALUE",
    "Piece",
    "max_hp",
    "material_value",
    "parse_color",
    "color_code",
]


class PieceType(enum.IntEnum):
    # Values match the python-chess piece type constants.
    PAWN = chess.PAWN
    KNIGHT = chess.KNIGHT
    BISHOP = chess.BISHOP
    ROOK = chess.ROOK
    QUEEN = chess.QUEEN
    KING = chess.KING

    @property
    def letter(self) -> str:
        """Uppercase piece letter: 'P', 'N', ..."""
        return chess.piece_symbol(self).upper()

    @classmethod
    def from_letter(cls, letter: str) -> "PieceType":
        try:
            return cls(chess.PIECE_SYMBOLS.index(letter.lower()))
        except ValueError:
            raise ValueError(f"Unknown piece type: {letter!r}") from None


MAX_HP: dict[PieceType, int] = {
    PieceType.PAWN: 2, PieceType.KNIGHT: 4, PieceType.BISHOP: 4,
    PieceType.ROOK: 6, PieceType.QUEEN: 8, PieceType.KING: 0,
}

BASE_DAMAGE: dict[PieceType, int] = {
    PieceType.PAWN: 1, PieceType.KNIGHT: 2, PieceType.BISHOP: 2,
    PieceType.ROOK: 3, PieceType.QUEEN: 4, PieceType.KING: 0,
}

MATERIAL_VALUE: dict[PieceType, int] = {
    PieceType.PAWN: 1, PieceType.KNIGHT: 3, PieceType.BISHOP: 3,
    PieceType.ROOK: 5, PieceType.QUEEN: 9, PieceType.KING: 100,
}


def max_hp(piece_type: PieceType) -> int:
    return MAX_HP.get(piece_type, 0)


def material_value(piece_type: PieceType) -> int:
    return MATERIAL_VALUE.get(piece_type, 0)


_COLOR_CODES = {
    "w": chess.WHITE, "white": chess.WHITE,
    "b": chess.BLACK, "black": chess.BLACK,
}


def parse_color(code: str) -> chess.Color:
    """Convert "w"/"b" (or "white"/"black") to chess.Color."""
    try:
        return _COLOR_CODES[code.lower()]
    except KeyError:
        raise ValueError(f"Unknown color: {code!r}") from None


def color_code(color: chess.Color) -> str:
    """chess.Color -> "w"/"b"."""
    return "w" if color == chess.WHITE else "b"


@dataclass(frozen=True)
class Piece:
    """A piece on the board. ``hp=None`` means the piece is at full health."""

    piece_type: PieceType
    color: chess.Color
    hp: int | None = None

    def __post_init__(self):
        if self.hp is not None and not 0 <= self.hp <= max_hp(self.piece_type):
            raise ValueError(
                f"HP {self.hp} out of range for {self.piece_type.name.lower()} "
                f"(max {max_hp(self.piece_type)})"
            )

    @property
    def current_hp(self) -> int:
        return max_hp(self.piece_type) if self.hp is None else self.hp

    @property
    def hp_fraction(self) -> float:
        """Remaining health as a fraction of max. Kings always count as whole."""
        if self.piece_type == PieceType.KING:
            return 1.0
        return self.current_hp / max_hp(self.piece_type)

    def symbol(self) -> str:
        """FEN-style letter, uppercase for White."""
        letter = self.piece_type.letter
        return letter if self.color == chess.WHITE else letter.lower()

    def with_hp(self, hp: int | None) -> "Piece":
        return Piece(self.piece_type, self.color, hp)
