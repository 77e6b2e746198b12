"""CLI utility for single-position decisions.

Usage:
    python -m tchess.cli pick <fen> [--hp SQ=HP ...] [--defends w=N,b=N]
        [--accelerated] [--color w|b]
    python -m tchess.cli defend <fen> --attacker R --defender q
        [--defender-hp N] [--attack-type base|super] [--locked]
        [--defends w=N,b=N] [--accelerated] [--seed N]

Piece letters follow FEN case: uppercase is White, lowercase Black.
Prints the decision as JSON.
"""

from __future__ import annotations

import argparse
import json
import logging
import random
import sys

import chess

from tchess.board import Board
from tchess.combat import AttackType
from tchess.config import Settings
from tchess.defend import should_defend
from tchess.legality import is_in_check
from tchess.pieces import Piece, PieceType, parse_color
from tchess.policy import pick
from tchess.state import AttackContext, GameState


def _parse_hp(items: list[str]) -> dict[str, int]:
    hp = {}
    for item in items:
        square, _, value = item.partition("=")
        if not value:
            raise ValueError(f"Expected SQUARE=HP, got {item!r}")
        hp[square.strip().lower()] = int(value)
    return hp


def _parse_defends(text: str) -> dict[chess.Color, int]:
    defends = {chess.WHITE: 0, chess.BLACK: 0}
    for part in filter(None, (p.strip() for p in text.split(","))):
        code, _, value = part.partition("=")
        defends[parse_color(code)] = int(value)
    return defends


def _parse_piece(letter: str, hp: int | None = None) -> Piece:
    color = chess.WHITE if letter.isupper() else chess.BLACK
    return Piece(PieceType.from_letter(letter), color, hp)


def _build_state(args: argparse.Namespace) -> GameState:
    return GameState(
        board=Board.from_fen(args.fen, hp=_parse_hp(args.hp)),
        accelerated=args.accelerated,
        defends=_parse_defends(args.defends),
    )


def _run_pick(args: argparse.Namespace, settings: Settings) -> dict:
    state = _build_state(args)
    color = parse_color(args.color or settings.ai_color)
    result = pick(state, color, depth=settings.default_depth)
    return {
        "move": result.to_dict() if result is not None else None,
        "in_check": is_in_check(state.board, color),
    }


def _run_defend(args: argparse.Namespace, settings: Settings) -> dict:
    state = _build_state(args)
    ctx = AttackContext(
        attack_type=AttackType(args.attack_type),
        attacker=_parse_piece(args.attacker),
        defender=_parse_piece(args.defender, args.defender_hp),
        defend_locked=args.locked,
    )
    seed = args.seed if args.seed is not None else settings.defend_seed
    rng = random.Random(seed) if seed is not None else None
    return should_defend(state, ctx, rng=rng).to_dict()


def _add_state_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("fen", help="Piece placement FEN (quote the full string)")
    parser.add_argument(
        "--hp", action="append", default=[], metavar="SQ=HP",
        help="Current HP of the piece on SQ (repeatable); others are at full HP",
    )
    parser.add_argument(
        "--defends", default="w=0,b=0",
        help="Defend tokens per side, e.g. w=1,b=2 (default: none)",
    )
    parser.add_argument(
        "--accelerated", action="store_true",
        help="Add +1 to every base damage",
    )


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="tChess decision core",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    sub = parser.add_subparsers(dest="command", required=True)

    pick_parser = sub.add_parser("pick", help="Choose a move")
    _add_state_args(pick_parser)
    pick_parser.add_argument("--color", help="Side to move: w or b (default: settings)")

    defend_parser = sub.add_parser("defend", help="Decide whether to spend a defend token")
    _add_state_args(defend_parser)
    defend_parser.add_argument("--attacker", required=True, help="Attacking piece letter")
    defend_parser.add_argument("--defender", required=True, help="Defending piece letter")
    defend_parser.add_argument("--defender-hp", type=int, default=None)
    defend_parser.add_argument(
        "--attack-type", default="base", choices=[t.value for t in AttackType],
    )
    defend_parser.add_argument("--locked", action="store_true", help="Attack is defend-locked")
    defend_parser.add_argument(
        "--seed", type=int, default=None,
        help="Sample the super-attack connection with this seed",
    )

    args = parser.parse_args(argv)
    settings = Settings()
    logging.basicConfig(level=settings.log_level.upper(), stream=sys.stderr)

    try:
        if args.command == "pick":
            result = _run_pick(args, settings)
        else:
            result = _run_defend(args, settings)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)

    json.dump(result, sys.stdout, indent=2)
    print()


if __name__ == "__main__":
    main()
