"""Combat model: damage, lethality, and the promotion rule."""

import enum

import chess

from tchess.pieces import BASE_DAMAGE, Piece, PieceType, max_hp

__all__ = [
    "AttackType",
    "base_damage",
    "super_damage",
    "damage_for",
    "is_lethal",
    "promote",
    "side_hp",
]


class AttackType(str, enum.Enum):
    BASE = "base"
    SUPER = "super"


def base_damage(piece_type: PieceType, accelerated: bool = False) -> int:
    """Damage of a plain hit. The accelerated flag adds one to every piece."""
    return BASE_DAMAGE.get(piece_type, 0) + (1 if accelerated else 0)


def super_damage(piece_type: PieceType, accelerated: bool = False) -> int:
    return 2 * base_damage(piece_type, accelerated)


def damage_for(attack_type: AttackType, piece_type: PieceType, accelerated: bool = False) -> int:
    if attack_type == AttackType.SUPER:
        return super_damage(piece_type, accelerated)
    return base_damage(piece_type, accelerated)


def is_lethal(damage: int, defender_hp: int) -> bool:
    return damage >= defender_hp


def promote(piece: Piece, to_square: chess.Square) -> Piece:
    """Return the piece as it stands on ``to_square`` after moving there.

    A pawn reaching the far rank becomes a queen at full queen HP. Every
    other move leaves the piece unchanged.
    """
    if piece.piece_type != PieceType.PAWN:
        return piece
    last_rank = 7 if piece.color == chess.WHITE else 0
    if chess.square_rank(to_square) != last_rank:
        return piece
    return Piece(PieceType.QUEEN, piece.color, max_hp(PieceType.QUEEN))


def side_hp(board, color: chess.Color) -> int:
    """Total current HP of ``color``'s non-king pieces."""
    return sum(
        piece.current_hp
        for _, piece in board.pieces(color)
        if piece.piece_type != PieceType.KING
    )
