"""Move selection: captures by expected value, quiet moves by static eval.

Only the immediate move is considered. Captures always outrank quiet
moves; among captures the highest EV wins, among quiet moves the highest
``static_eval + center_bias``. Ties keep the first candidate in scan order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import chess

from tchess.board import Move, row_col
from tchess.capture_ev import expected_capture_gain
from tchess.combat import AttackType
from tchess.evaluation import center_bias, static_eval
from tchess.legality import is_in_check, restricted_moves
from tchess.pieces import PieceType
from tchess.state import GameState

logger = logging.getLogger(__name__)

__all__ = [
    "PickDebug",
    "PickResult",
    "pick",
]


@dataclass
class PickDebug:
    kind: str                   # "capture" or "quiet"
    score: float                # capture EV or quiet eval
    from_name: str
    to_name: str
    detail: dict = field(default_factory=dict)


@dataclass
class PickResult:
    move: Move
    attack_type: AttackType
    debug: PickDebug

    @property
    def from_square(self) -> chess.Square:
        return self.move.from_square

    @property
    def to_square(self) -> chess.Square:
        return self.move.to_square

    def to_dict(self) -> dict:
        fr, fc = row_col(self.from_square)
        tr, tc = row_col(self.to_square)
        debug = {
            "kind": self.debug.kind,
            "ev" if self.debug.kind == "capture" else "eval": self.debug.score,
            "from": self.debug.from_name,
            "to": self.debug.to_name,
        }
        if self.debug.detail:
            debug["detail"] = self.debug.detail
        return {
            "from": {"r": fr, "c": fc},
            "to": {"r": tr, "c": tc},
            "attackType": self.attack_type.value,
            "debug": debug,
        }


def _targets_king(state: GameState, move: Move) -> bool:
    target = state.board.piece_at(move.to_square)
    return target is not None and target.piece_type == PieceType.KING


def pick(state: GameState, color: chess.Color = chess.BLACK, depth: int = 1) -> PickResult | None:
    """Choose a move for ``color``, or None when it has no legal move.

    Raises InvalidBoardError if either side does not have exactly one king.
    ``depth`` is accepted for API compatibility; no lookahead is done.
    """
    state.validate()
    board = state.board
    in_check = is_in_check(board, color)
    moves = restricted_moves(board, color, state.accelerated)
    if not moves:
        logger.info("No legal move for %s (in_check=%s)", chess.COLOR_NAMES[color], in_check)
        return None

    best: PickResult | None = None
    best_score = float("-inf")

    for move in moves:
        if not move.capture or _targets_king(state, move):
            continue
        estimate = expected_capture_gain(state, move)
        if estimate.ev > best_score:
            best_score = estimate.ev
            forced = in_check and move.forced == AttackType.BASE
            best = PickResult(
                move=move,
                attack_type=AttackType.BASE if forced else estimate.choose,
                debug=PickDebug(
                    kind="capture",
                    score=estimate.ev,
                    from_name=chess.square_name(move.from_square),
                    to_name=chess.square_name(move.to_square),
                    detail=estimate.to_dict(),
                ),
            )

    if best is None:
        for move in moves:
            if move.capture:
                continue
            score = static_eval(board.moved(move), color) + center_bias(move)
            if score > best_score:
                best_score = score
                best = PickResult(
                    move=move,
                    attack_type=AttackType.BASE,
                    debug=PickDebug(
                        kind="quiet",
                        score=score,
                        from_name=chess.square_name(move.from_square),
                        to_name=chess.square_name(move.to_square),
                    ),
                )

    if best is not None:
        logger.debug(
            "pick %s: %s %s (%s, score=%.3f, depth=%d)",
            chess.COLOR_NAMES[color], best.move, best.attack_type.value,
            best.debug.kind, best.debug.score, depth,
        )
    return best
