"""Defend-token economy: should the attacked side spend a token?"""

import random
from dataclasses import dataclass

from tchess.capture_ev import P_HIT_SUPER
from tchess.combat import AttackType, base_damage, is_lethal, side_hp
from tchess.pieces import material_value, max_hp
from tchess.state import AttackContext, GameState

__all__ = [
    "DEFEND_THRESHOLD",
    "DefendDecision",
    "should_defend",
]

DEFEND_THRESHOLD = 0.55


@dataclass
class DefendDecision:
    use: bool
    reason: str
    decision_value: float = 0.0
    score_to_save: float = 0.0
    scarcity: float = 0.0
    p_kill: float = 0.0  # chance the incoming hit kills if not defended

    def to_dict(self) -> dict:
        return {
            "use": self.use,
            "reason": self.reason,
            "decisionValue": self.decision_value,
            "scoreToSave": self.score_to_save,
            "scarcity": self.scarcity,
            "pKill": self.p_kill,
        }


def _scarcity(tokens: int, hp_on_board: int) -> float:
    reserve = 0.85 if tokens >= 2 else 1.0
    if hp_on_board > 14:
        conserve = 0.85
    elif hp_on_board > 8:
        conserve = 0.95
    else:
        conserve = 1.0
    return reserve * conserve


def should_defend(
    state: GameState,
    context: AttackContext,
    rng: random.Random | None = None,
) -> DefendDecision:
    """Decide for the defender's side whether to spend a token on this attack.

    A super attack only connects with probability P_HIT_SUPER. Without
    ``rng`` that probability weights the kill and chip outcomes directly, so
    the decision is deterministic. With ``rng`` the connection is sampled
    from it instead; pass a seeded ``random.Random`` for repeatable results.
    """
    if context.defend_locked:
        return DefendDecision(use=False, reason="locked")
    defender = context.defender
    tokens = state.tokens(defender.color)
    if tokens <= 0:
        return DefendDecision(use=False, reason="none_left")

    b_dmg = base_damage(context.attacker.piece_type, state.accelerated)
    s_dmg = 2 * b_dmg
    def_hp = defender.hp or max_hp(defender.piece_type)
    value = material_value(defender.piece_type)

    if context.attack_type == AttackType.BASE:
        p_kill = 1.0 if is_lethal(b_dmg, def_hp) else 0.0
        expected = b_dmg
    else:
        lethal = is_lethal(s_dmg, def_hp)
        if rng is not None:
            p_kill = 1.0 if lethal and rng.random() < P_HIT_SUPER else 0.0
        else:
            p_kill = P_HIT_SUPER if lethal else 0.0
        expected = P_HIT_SUPER * s_dmg

    frac = min(1.0, expected / (def_hp or 1))
    score_to_save = value * (p_kill + (1 - p_kill) * 0.6 * frac)

    scarcity = _scarcity(tokens, side_hp(state.board, defender.color))
    decision_value = score_to_save * scarcity
    use = decision_value >= DEFEND_THRESHOLD
    return DefendDecision(
        use=use,
        reason="worth_token" if use else "save_token",
        decision_value=decision_value,
        score_to_save=score_to_save,
        scarcity=scarcity,
        p_kill=p_kill,
    )
