"""Expected value of a capture under an uncertain opponent defend.

A capture can be played as a base attack (deterministic damage) or a super
attack (double damage, connects 40% of the time). The defender may spend a
token, which blocks the hit half the time. This module estimates how likely
the defender is to spend one, turns that into kill and chip-damage
expectations for both modes, and recommends a mode.
"""

from dataclasses import asdict, dataclass

from tchess.board import Move
from tchess.combat import AttackType, base_damage, is_lethal, side_hp
from tchess.legality import square_attacked
from tchess.pieces import Piece, PieceType, material_value, max_hp
from tchess.state import GameState

__all__ = [
    "P_BLOCK",
    "P_HIT_SUPER",
    "SUPER_MARGIN",
    "CaptureEstimate",
    "defend_propensity",
    "expected_capture_gain",
]

P_BLOCK = 0.5       # a spent token blocks the hit
P_HIT_SUPER = 0.4   # a super attack connects at all
SUPER_MARGIN = 0.35  # super must beat base by this much to be chosen
HANG_RISK = 0.35
CHIP_WEIGHT = 0.6


@dataclass
class CaptureEstimate:
    ev: float
    choose: AttackType
    reason: str | None = None
    ev_base: float = 0.0
    ev_super: float = 0.0
    p_kill_base: float = 0.0
    p_kill_super: float = 0.0
    p_use_base: float = 0.0
    p_use_super: float = 0.0
    val_kill: int = 0
    val_chip_base: float = 0.0
    val_chip_super: float = 0.0
    hang_factor: float = 0.0
    lethal_base: bool = False
    lethal_super: bool = False
    base_dmg: int = 0
    super_dmg: int = 0
    forced_base_escape: bool = False

    def to_dict(self) -> dict:
        out = asdict(self)
        out["choose"] = self.choose.value
        return out


def defend_propensity(
    state: GameState,
    defender: Piece,
    lethal: bool,
    base_dmg: int,
    forced_base_escape: bool = False,
) -> float:
    """Probability the defender's side spends a token against this hit.

    Higher for lethal hits on valuable pieces. Lowered while the side still
    has plenty of HP on the board, and again when it holds two or more
    tokens (it likes to keep one back).
    """
    tokens = state.tokens(defender.color)
    if tokens <= 0 or forced_base_escape:
        return 0.0
    value = material_value(defender.piece_type)
    if lethal:
        p = min(0.95, 0.20 + 0.10 * value)
    else:
        frac = min(1.0, base_dmg / (defender.current_hp or max_hp(defender.piece_type)))
        p = 0.08 + 0.25 * frac + (0.05 if value >= 5 else 0.0)

    total = side_hp(state.board, defender.color)
    if total > 18:
        p *= 0.8
    elif total > 10:
        p *= 0.9
    if tokens >= 2:
        p *= 0.85
    return max(0.0, min(0.98, p))


def expected_capture_gain(
    state: GameState, move: Move, attack_type: AttackType | None = None
) -> CaptureEstimate:
    """Score a capturing move.

    ``ev`` is the EV of ``attack_type`` when given, else the better of the
    two modes. ``choose`` is SUPER only when it beats BASE by SUPER_MARGIN.
    """
    board = state.board
    attacker = board.piece_at(move.from_square)
    defender = board.piece_at(move.to_square)
    if attacker is None or defender is None:
        return CaptureEstimate(ev=-1.0, choose=AttackType.BASE, reason="no_atk_or_def")
    if defender.piece_type == PieceType.KING:
        return CaptureEstimate(ev=-1.0, choose=AttackType.BASE, reason="king_illegal")

    b_dmg = base_damage(attacker.piece_type, state.accelerated)
    s_dmg = 2 * b_dmg
    def_hp = defender.current_hp
    lethal_base = is_lethal(b_dmg, def_hp)
    lethal_super = is_lethal(s_dmg, def_hp)
    forced = move.defend_locked or move.forced == AttackType.BASE

    p_use_base = defend_propensity(state, defender, lethal_base, b_dmg, forced)
    p_use_super = defend_propensity(state, defender, lethal_super, b_dmg, forced)

    land_base = 1.0 if forced else 1 - p_use_base * P_BLOCK
    land_super = P_HIT_SUPER if forced else P_HIT_SUPER * (1 - p_use_super * P_BLOCK)

    p_kill_base = land_base if lethal_base else 0.0
    p_kill_super = land_super if lethal_super else 0.0
    exp_dmg_base = 0.0 if lethal_base else b_dmg * land_base
    exp_dmg_super = 0.0 if lethal_super else s_dmg * land_super

    val_kill = material_value(defender.piece_type)
    chip_weight = CHIP_WEIGHT * val_kill / (max_hp(defender.piece_type) or 1)
    val_chip_base = chip_weight * exp_dmg_base
    val_chip_super = chip_weight * exp_dmg_super

    # A hit that neither kills nor lands leaves the attacker on its origin.
    # Chip damage is not subtracted from the bounce mass.
    exposed = square_attacked(board, move.from_square, defender.color)
    hang_factor = material_value(attacker.piece_type) * HANG_RISK if exposed else 0.0

    ev_base = p_kill_base * val_kill + val_chip_base - (1 - p_kill_base) * hang_factor
    ev_super = p_kill_super * val_kill + val_chip_super - (1 - p_kill_super) * hang_factor

    choose = AttackType.SUPER if ev_super - ev_base > SUPER_MARGIN else AttackType.BASE
    if attack_type == AttackType.BASE:
        ev = ev_base
    elif attack_type == AttackType.SUPER:
        ev = ev_super
    else:
        ev = max(ev_base, ev_super)

    return CaptureEstimate(
        ev=ev,
        choose=choose,
        ev_base=ev_base,
        ev_super=ev_super,
        p_kill_base=p_kill_base,
        p_kill_super=p_kill_super,
        p_use_base=p_use_base,
        p_use_super=p_use_super,
        val_kill=val_kill,
        val_chip_base=val_chip_base,
        val_chip_super=val_chip_super,
        hang_factor=hang_factor,
        lethal_base=lethal_base,
        lethal_super=lethal_super,
        base_dmg=b_dmg,
        super_dmg=s_dmg,
        forced_base_escape=forced,
    )
