"""Board with per-piece HP on top of python-chess square geometry.

Squares are python-chess square indices (a1=0 .. h8=63). The page that
drives the agent addresses squares as (row, col) with row 0 being Black's
back rank; ``square_at`` and ``row_col`` convert between the two.
"""

from collections.abc import Mapping
from dataclasses import dataclass

import chess

from tchess.combat import AttackType, promote
from tchess.pieces import Piece, PieceType, color_code, parse_color

__all__ = [
    "Board",
    "InvalidBoardError",
    "Move",
    "square_at",
    "row_col",
]


class InvalidBoardError(ValueError):
    """The board breaks a precondition of the decision core."""


def square_at(row: int, col: int) -> chess.Square:
    if not (0 <= row < 8 and 0 <= col < 8):
        raise ValueError(f"Square out of range: ({row}, {col})")
    return chess.square(col, 7 - row)


def row_col(square: chess.Square) -> tuple[int, int]:
    return 7 - chess.square_rank(square), chess.square_file(square)


@dataclass(frozen=True)
class Move:
    from_square: chess.Square
    to_square: chess.Square
    capture: bool = False
    forced: AttackType | None = None
    defend_locked: bool = False

    def __str__(self) -> str:
        return chess.square_name(self.from_square) + chess.square_name(self.to_square)

    def to_dict(self) -> dict:
        fr, fc = row_col(self.from_square)
        tr, tc = row_col(self.to_square)
        out = {
            "from": {"r": fr, "c": fc},
            "to": {"r": tr, "c": tc},
            "capture": self.capture,
            "uci": str(self),
        }
        if self.forced is not None:
            out["forced"] = self.forced.value
        if self.defend_locked:
            out["defendLocked"] = True
        return out


@dataclass
class _Undo:
    move: Move
    moved: Piece
    captured: Piece | None


class Board:
    """Mutable 8x8 placement of HP-carrying pieces.

    A python-chess ``BaseBoard`` mirrors the placement so that attack
    geometry comes from its precomputed tables.
    """

    def __init__(self):
        self._base = chess.BaseBoard.empty()
        self._pieces: dict[chess.Square, Piece] = {}

    # --- Factories ---

    @classmethod
    def empty(cls) -> "Board":
        return cls()

    @classmethod
    def starting(cls) -> "Board":
        return cls.from_fen(chess.STARTING_BOARD_FEN)

    @classmethod
    def from_fen(cls, fen: str, hp: Mapping[str | int, int] | None = None) -> "Board":
        """Build a board from a FEN (placement field is enough) plus HP overrides.

        ``hp`` maps square names ("e4") or indices to current HP; pieces not
        listed are at full health.
        """
        placement = fen.split()[0] if fen.strip() else fen
        try:
            base = chess.BaseBoard(placement)
        except ValueError as e:
            raise ValueError(f"Invalid FEN: {fen}") from e
        overrides = {
            chess.parse_square(k) if isinstance(k, str) else k: v
            for k, v in (hp or {}).items()
        }
        board = cls()
        for sq, p in base.piece_map().items():
            board.set_piece_at(sq, Piece(PieceType(p.piece_type), p.color, overrides.pop(sq, None)))
        if overrides:
            names = ", ".join(chess.square_name(sq) for sq in overrides)
            raise ValueError(f"HP given for empty squares: {names}")
        return board

    @classmethod
    def from_rows(cls, rows: list[list[dict | None]]) -> "Board":
        """Build a board from the page's row-major form (row 0 = rank 8).

        Each cell is ``None`` or ``{"type": "P", "color": "w", "hp": 2}``
        with ``hp`` optional.
        """
        if len(rows) != 8 or any(len(row) != 8 for row in rows):
            raise ValueError("Board must have 8 rows of 8 squares")
        board = cls()
        for r, row in enumerate(rows):
            for c, cell in enumerate(row):
                if cell is None:
                    continue
                try:
                    letter, color = cell["type"], cell["color"]
                except (KeyError, TypeError):
                    raise ValueError(f"Bad cell at ({r}, {c}): {cell!r}") from None
                piece = Piece(PieceType.from_letter(letter), parse_color(color), cell.get("hp"))
                board.set_piece_at(square_at(r, c), piece)
        return board

    def to_rows(self) -> list[list[dict | None]]:
        rows: list[list[dict | None]] = [[None] * 8 for _ in range(8)]
        for sq, piece in self._pieces.items():
            r, c = row_col(sq)
            cell = {"type": piece.piece_type.letter, "color": color_code(piece.color)}
            if piece.hp is not None:
                cell["hp"] = piece.hp
            rows[r][c] = cell
        return rows

    # --- Access ---

    def piece_at(self, square: chess.Square) -> Piece | None:
        return self._pieces.get(square)

    def set_piece_at(self, square: chess.Square, piece: Piece | None) -> None:
        if piece is None:
            self._pieces.pop(square, None)
            self._base.remove_piece_at(square)
            return
        self._pieces[square] = piece
        self._base.set_piece_at(square, chess.Piece(piece.piece_type, piece.color))

    def pieces(self, color: chess.Color | None = None) -> list[tuple[chess.Square, Piece]]:
        """Occupied squares in scan order (a8..h8, a7..h7, ..., a1..h1)."""
        out = []
        for sq in chess.SQUARES_180:
            piece = self._pieces.get(sq)
            if piece is not None and (color is None or piece.color == color):
                out.append((sq, piece))
        return out

    def king(self, color: chess.Color) -> chess.Square | None:
        for sq, piece in self.pieces(color):
            if piece.piece_type == PieceType.KING:
                return sq
        return None

    def attacks_mask(self, square: chess.Square) -> chess.Bitboard:
        """Squares attacked by the piece on ``square`` (0 if empty)."""
        return self._base.attacks_mask(square)

    def board_fen(self) -> str:
        return self._base.board_fen()

    def hp_map(self) -> dict[str, int]:
        """Square name -> HP for every piece carrying an explicit HP value."""
        return {
            chess.square_name(sq): piece.hp
            for sq, piece in self.pieces()
            if piece.hp is not None
        }

    def validate_kings(self) -> None:
        """Raise InvalidBoardError unless each side has exactly one king."""
        for color in (chess.WHITE, chess.BLACK):
            count = len(self._base.pieces(chess.KING, color))
            if count != 1:
                raise InvalidBoardError(
                    f"Expected exactly one {chess.COLOR_NAMES[color]} king, found {count}"
                )

    # --- Make / unmake ---

    def make(self, move: Move) -> _Undo:
        """Place the moving piece on the target square (promoting if due).

        Whatever stood on the target is lifted off; combat outcomes are not
        considered here. Returns the token ``unmake`` needs.
        """
        moved = self._pieces.get(move.from_square)
        if moved is None:
            raise ValueError(f"No piece on {chess.square_name(move.from_square)}")
        captured = self._pieces.get(move.to_square)
        self.set_piece_at(move.from_square, None)
        self.set_piece_at(move.to_square, promote(moved, move.to_square))
        return _Undo(move, moved, captured)

    def unmake(self, undo: _Undo) -> None:
        self.set_piece_at(undo.move.to_square, undo.captured)
        self.set_piece_at(undo.move.from_square, undo.moved)

    def moved(self, move: Move) -> "Board":
        """Copy of the board with ``move`` played as a plain placement."""
        board = self.copy()
        board.make(move)
        return board

    def copy(self) -> "Board":
        board = Board()
        board._base = self._base.copy()
        board._pieces = dict(self._pieces)
        return board

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._pieces == other._pieces

    def __repr__(self) -> str:
        return f"Board({self.board_fen()!r}, hp={self.hp_map()!r})"
