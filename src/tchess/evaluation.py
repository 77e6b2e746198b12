"""Static evaluation used to rank quiet moves.

Scores are from the point of view of ``color``: positive is good for it.
"""

import math

import chess

from tchess.board import Board, Move
from tchess.legality import is_in_check, legal_moves
from tchess.pieces import material_value

__all__ = [
    "material_eval",
    "mobility_eval",
    "king_safety_eval",
    "static_eval",
    "center_bias",
]

MOBILITY_WEIGHT = 0.02
CHECK_PENALTY = 0.5
CENTER_WEIGHT = 0.01


def material_eval(board: Board, color: chess.Color) -> float:
    """Material weighted by remaining HP, own side minus the other."""
    own = other = 0.0
    for _, piece in board.pieces():
        v = material_value(piece.piece_type) * piece.hp_fraction
        if piece.color == color:
            own += v
        else:
            other += v
    return own - other


def mobility_eval(board: Board, color: chess.Color) -> float:
    own = len(legal_moves(board, color))
    other = len(legal_moves(board, not color))
    return MOBILITY_WEIGHT * (own - other)


def king_safety_eval(board: Board, color: chess.Color) -> float:
    score = 0.0
    if is_in_check(board, color):
        score -= CHECK_PENALTY
    if is_in_check(board, not color):
        score += CHECK_PENALTY
    return score


def static_eval(board: Board, color: chess.Color) -> float:
    return material_eval(board, color) + mobility_eval(board, color) + king_safety_eval(board, color)


def center_bias(move: Move) -> float:
    """Small bonus for landing near the middle of the board (max 0.035)."""
    dx = abs(chess.square_file(move.to_square) - 3.5)
    dy = abs(chess.square_rank(move.to_square) - 3.5)
    return CENTER_WEIGHT * (3.5 - math.hypot(dx, dy))
