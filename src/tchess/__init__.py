"""Decision core for the tChess HP variant: legal moves, capture EV, defend tokens."""

from tchess.board import Board, InvalidBoardError, Move
from tchess.combat import AttackType
from tchess.defend import DefendDecision, should_defend
from tchess.pieces import Piece, PieceType
from tchess.policy import PickResult, pick
from tchess.state import AttackContext, GameState

__all__ = [
    "AttackContext",
    "AttackType",
    "Board",
    "DefendDecision",
    "GameState",
    "InvalidBoardError",
    "Move",
    "PickResult",
    "Piece",
    "PieceType",
    "pick",
    "should_defend",
]
