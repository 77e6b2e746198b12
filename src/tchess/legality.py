"""Attack detection, move generation, and the check-response restriction.

Legality is decided by plain placement: a move is legal when the mover's
king is not attacked after the piece lands on its target. Combat outcomes
(damage, tokens) never enter legality, with one exception: while in single
check the checker may only be captured by a piece whose base damage is
certain to kill it.
"""

import enum

import chess

from tchess.board import Board, Move, row_col
from tchess.combat import AttackType, base_damage, is_lethal
from tchess.pieces import PieceType

__all__ = [
    "CheckStatus",
    "attacks",
    "square_attacked",
    "pseudo_moves",
    "legal_moves",
    "find_king",
    "is_in_check",
    "king_checkers",
    "interpose_squares",
    "check_status",
    "restricted_moves",
    "state_moves",
]


class CheckStatus(enum.Enum):
    NOT_IN_CHECK = "not_in_check"
    SINGLE_CHECK = "single_check"
    DOUBLE_CHECK = "double_check"


def attacks(board: Board, from_square: chess.Square, to_square: chess.Square) -> bool:
    """Does the piece on from_square attack to_square?

    Pawns attack one step diagonally forward, sliders need every square in
    between to be empty.
    """
    return bool(board.attacks_mask(from_square) & chess.BB_SQUARES[to_square])


def square_attacked(board: Board, square: chess.Square, by_color: chess.Color) -> bool:
    for sq, _ in board.pieces(by_color):
        if attacks(board, sq, square):
            return True
    return False


def _pawn_moves(board: Board, square: chess.Square, color: chess.Color) -> list[Move]:
    moves = []
    step = 8 if color == chess.WHITE else -8
    start_rank = 1 if color == chess.WHITE else 6
    one = square + step
    if 0 <= one < 64 and board.piece_at(one) is None:
        moves.append(Move(square, one))
        two = one + step
        if chess.square_rank(square) == start_rank and board.piece_at(two) is None:
            moves.append(Move(square, two))
    for target in chess.SquareSet(chess.BB_PAWN_ATTACKS[color][square]):
        victim = board.piece_at(target)
        if victim is not None and victim.color != color and victim.piece_type != PieceType.KING:
            moves.append(Move(square, target, capture=True))
    return moves


# Target order per piece, as (row, col) steps with row 0 on rank 8.
_KNIGHT_STEPS = [(-2, -1), (-2, 1), (-1, -2), (-1, 2), (1, -2), (1, 2), (2, -1), (2, 1)]
_DIAGONALS = [(-1, -1), (-1, 1), (1, -1), (1, 1)]
_ORTHOGONALS = [(-1, 0), (1, 0), (0, -1), (0, 1)]
_RAYS = {
    PieceType.BISHOP: _DIAGONALS,
    PieceType.ROOK: _ORTHOGONALS,
    PieceType.QUEEN: _DIAGONALS + _ORTHOGONALS,
}


def _sign(n: int) -> int:
    return (n > 0) - (n < 0)


def _target_key(piece_type: PieceType, origin: chess.Square, target: chess.Square) -> tuple:
    fr, fc = row_col(origin)
    tr, tc = row_col(target)
    dr, dc = tr - fr, tc - fc
    if piece_type == PieceType.KNIGHT:
        return (_KNIGHT_STEPS.index((dr, dc)),)
    if piece_type == PieceType.KING:
        return (dr, dc)
    direction = (_sign(dr), _sign(dc))
    return (_RAYS[piece_type].index(direction), chess.square_distance(origin, target))


def pseudo_moves(board: Board, square: chess.Square) -> list[Move]:
    """Moves for the piece on ``square`` ignoring king safety.

    No castling, no en passant. Kings are never offered as capture targets.
    Targets come out in a fixed order: knight steps as listed above, king
    steps row by row from the rank above, slider rays one direction at a
    time walking outward. Move selection keeps the first of equal scores,
    so this order decides ties.
    """
    piece = board.piece_at(square)
    if piece is None:
        return []
    if piece.piece_type == PieceType.PAWN:
        return _pawn_moves(board, square, piece.color)

    moves = []
    targets = sorted(
        chess.SquareSet(board.attacks_mask(square)),
        key=lambda t: _target_key(piece.piece_type, square, t),
    )
    for target in targets:
        victim = board.piece_at(target)
        if victim is None:
            moves.append(Move(square, target))
        elif victim.color != piece.color and victim.piece_type != PieceType.KING:
            moves.append(Move(square, target, capture=True))
    return moves


def find_king(board: Board, color: chess.Color) -> chess.Square | None:
    return board.king(color)


def _king_safe(board: Board, color: chess.Color) -> bool:
    king = find_king(board, color)
    return king is not None and not square_attacked(board, king, not color)


def legal_moves(board: Board, color: chess.Color) -> list[Move]:
    """All moves of ``color`` that do not leave its own king attacked."""
    work = board.copy()
    legal = []
    for sq, _ in board.pieces(color):
        for move in pseudo_moves(board, sq):
            undo = work.make(move)
            if _king_safe(work, color):
                legal.append(move)
            work.unmake(undo)
    return legal


def is_in_check(board: Board, color: chess.Color) -> bool:
    """A side without a king is reported as not in check."""
    king = find_king(board, color)
    if king is None:
        return False
    return square_attacked(board, king, not color)


def king_checkers(board: Board, color: chess.Color) -> list[chess.Square]:
    king = find_king(board, color)
    if king is None:
        return []
    return [sq for sq, _ in board.pieces(not color) if attacks(board, sq, king)]


def interpose_squares(attacker_square: chess.Square, king_square: chess.Square) -> list[chess.Square]:
    """Squares strictly between attacker and king, nearest the attacker first.

    Empty when the two do not share a rank, file or diagonal (knight checks),
    or when they are adjacent.
    """
    between = chess.SquareSet(chess.between(attacker_square, king_square))
    return sorted(between, key=lambda sq: chess.square_distance(attacker_square, sq))


def check_status(board: Board, color: chess.Color) -> CheckStatus:
    checkers = king_checkers(board, color)
    if not checkers:
        return CheckStatus.NOT_IN_CHECK
    if len(checkers) == 1:
        return CheckStatus.SINGLE_CHECK
    return CheckStatus.DOUBLE_CHECK


def restricted_moves(board: Board, color: chess.Color, accelerated: bool = False) -> list[Move]:
    """Legal moves after applying the check-response restriction.

    Not in check: every legal move. Double check: king moves only. Single
    check: king moves, quiet moves onto an interposition square, and
    captures of the checker that kill it on base damage alone. Those
    captures come back marked forced-base and defend-locked.
    """
    legal = legal_moves(board, color)
    checkers = king_checkers(board, color)
    if not checkers:
        return legal

    def is_king_move(move: Move) -> bool:
        return board.piece_at(move.from_square).piece_type == PieceType.KING

    if len(checkers) > 1:
        return [m for m in legal if is_king_move(m)]

    checker_sq = checkers[0]
    checker = board.piece_at(checker_sq)
    blocks = set(interpose_squares(checker_sq, find_king(board, color)))

    out = []
    for move in legal:
        if is_king_move(move):
            out.append(move)
        elif move.capture:
            if move.to_square != checker_sq:
                continue
            attacker = board.piece_at(move.from_square)
            if is_lethal(base_damage(attacker.piece_type, accelerated), checker.current_hp):
                out.append(Move(
                    move.from_square, move.to_square, capture=True,
                    forced=AttackType.BASE, defend_locked=True,
                ))
        elif move.to_square in blocks:
            out.append(move)
    return out


def state_moves(state, color: chess.Color) -> list[Move]:
    """restricted_moves for a GameState snapshot."""
    return restricted_moves(state.board, color, state.accelerated)
