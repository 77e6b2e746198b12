"""Tests for the capture EV model: defend propensity, kill odds, mode choice."""

import chess
import pytest

from tchess.board import Board, Move
from tchess.capture_ev import defend_propensity, expected_capture_gain
from tchess.combat import AttackType
from tchess.pieces import Piece, PieceType
from tchess.state import GameState


# Black rook d5 can take the white pawn d2; nothing attacks d5.
ROOK_TAKES_PAWN = "4k3/8/8/3r4/8/8/3P4/4K3"
# Same, but a white rook on a5 eyes the black rook's origin.
ROOK_TAKES_PAWN_EXPOSED = "4k3/8/8/R2r4/8/8/3P4/4K3"
# Black knight f6 hits a wounded white rook on e4.
KNIGHT_HITS_ROOK = "k7/8/5n2/8/4R3/8/8/4K3"


def _state(fen, hp=None, white=0, black=0, accelerated=False):
    return GameState(
        board=Board.from_fen(fen, hp=hp),
        accelerated=accelerated,
        defends={chess.WHITE: white, chess.BLACK: black},
    )


RXP = Move(chess.D5, chess.D2, capture=True)


# ---------------------------------------------------------------------------
# Kill probability and EV
# ---------------------------------------------------------------------------


class TestRookTakesPawn:
    def test_no_tokens_is_certain_kill(self):
        est = expected_capture_gain(_state(ROOK_TAKES_PAWN), RXP)
        assert est.lethal_base and est.lethal_super
        assert est.p_kill_base == 1.0
        assert est.p_kill_super == pytest.approx(0.4)
        assert est.ev_base == pytest.approx(1.0)
        assert est.ev == pytest.approx(1.0)
        assert est.choose == AttackType.BASE

    def test_exposed_origin_penalises_only_missed_kills(self):
        est = expected_capture_gain(_state(ROOK_TAKES_PAWN_EXPOSED), RXP)
        assert est.hang_factor == pytest.approx(5 * 0.35)
        assert est.ev_base == pytest.approx(1.0)
        assert est.ev_super == pytest.approx(0.4 - 0.6 * 1.75)
        assert est.choose == AttackType.BASE

    def test_opponent_token_lowers_kill_odds(self):
        est = expected_capture_gain(_state(ROOK_TAKES_PAWN, white=1), RXP)
        # lethal on a pawn: 0.2 + 0.1 * 1, no conservation discounts at 2 HP
        assert est.p_use_base == pytest.approx(0.3)
        assert est.p_kill_base == pytest.approx(1 - 0.3 * 0.5)
        assert est.ev_base == pytest.approx(0.85)

    def test_forced_base_escape_ignores_tokens(self):
        move = Move(chess.D5, chess.D2, capture=True, forced=AttackType.BASE, defend_locked=True)
        est = expected_capture_gain(_state(ROOK_TAKES_PAWN, white=2), move)
        assert est.forced_base_escape
        assert est.p_use_base == 0.0
        assert est.p_kill_base == 1.0
        assert est.p_kill_super == pytest.approx(0.4)

    def test_requested_mode_ev(self):
        state = _state(ROOK_TAKES_PAWN)
        assert expected_capture_gain(state, RXP, AttackType.SUPER).ev == pytest.approx(0.4)
        assert expected_capture_gain(state, RXP, AttackType.BASE).ev == pytest.approx(1.0)


class TestSuperChoice:
    def test_super_chosen_when_only_super_kills(self):
        state = _state(KNIGHT_HITS_ROOK, hp={"e4": 4})
        est = expected_capture_gain(state, Move(chess.F6, chess.E4, capture=True))
        assert not est.lethal_base and est.lethal_super
        # chip: 0.6 * 5 / 6 per point, 2 points landed
        assert est.val_chip_base == pytest.approx(1.0)
        assert est.ev_base == pytest.approx(1.0)
        assert est.ev_super == pytest.approx(2.0)
        assert est.choose == AttackType.SUPER

    def test_small_gain_keeps_base(self):
        # Full HP rook: neither mode kills; super chip 4 * 0.4 = 1.6 vs base 2
        state = _state(KNIGHT_HITS_ROOK)
        est = expected_capture_gain(state, Move(chess.F6, chess.E4, capture=True))
        assert est.ev_super < est.ev_base
        assert est.choose == AttackType.BASE

    def test_acceleration_raises_damage(self):
        state = _state(KNIGHT_HITS_ROOK, hp={"e4": 3}, accelerated=True)
        est = expected_capture_gain(state, Move(chess.F6, chess.E4, capture=True))
        assert est.base_dmg == 3
        assert est.lethal_base


class TestDegenerateInputs:
    def test_empty_target(self):
        est = expected_capture_gain(_state(ROOK_TAKES_PAWN), Move(chess.D5, chess.D4, capture=True))
        assert est.ev == -1.0
        assert est.reason == "no_atk_or_def"

    def test_king_target(self):
        state = _state("4k3/8/8/8/8/8/8/4R2K")
        est = expected_capture_gain(state, Move(chess.E1, chess.E8, capture=True))
        assert est.ev == -1.0
        assert est.reason == "king_illegal"

    def test_to_dict_is_plain(self):
        data = expected_capture_gain(_state(ROOK_TAKES_PAWN), RXP).to_dict()
        assert data["choose"] == "base"
        assert data["p_kill_base"] == 1.0


# ---------------------------------------------------------------------------
# Defend propensity
# ---------------------------------------------------------------------------


class TestDefendPropensity:
    def test_no_tokens(self):
        queen = Piece(PieceType.QUEEN, chess.WHITE)
        state = GameState(board=Board.starting())
        assert defend_propensity(state, queen, lethal=True, base_dmg=4) == 0.0

    def test_lethal_queen_with_full_army_and_two_tokens(self):
        queen = Piece(PieceType.QUEEN, chess.WHITE)
        state = GameState(board=Board.starting(), defends={chess.WHITE: 2, chess.BLACK: 0})
        # min(0.95, 1.1) * 0.8 (HP > 18) * 0.85 (two tokens)
        assert defend_propensity(state, queen, lethal=True, base_dmg=4) == pytest.approx(0.95 * 0.8 * 0.85)

    def test_non_lethal_heavy_piece(self):
        rook = Piece(PieceType.ROOK, chess.WHITE)
        state = _state("4k3/8/8/8/8/8/8/R3K3", white=1)
        # 0.08 + 0.25 * (3/6) + 0.05; side HP 6 so no discount
        assert defend_propensity(state, rook, lethal=False, base_dmg=3) == pytest.approx(0.255)

    def test_forced_escape(self):
        pawn = Piece(PieceType.PAWN, chess.WHITE)
        state = _state(ROOK_TAKES_PAWN, white=3)
        assert defend_propensity(state, pawn, True, 3, forced_base_escape=True) == 0.0
