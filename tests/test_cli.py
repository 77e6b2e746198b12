"""Tests for the command-line entry point."""

import json

import chess
import pytest

from tchess.cli import main


def _run(capsys, *argv):
    main(list(argv))
    return json.loads(capsys.readouterr().out)


def test_pick_capture(capsys):
    data = _run(capsys, "pick", "4k3/8/8/3r4/8/8/3P4/4K3")
    assert data["in_check"] is False
    assert data["move"]["debug"]["from"] == "d5"
    assert data["move"]["debug"]["to"] == "d2"


def test_pick_with_hp_and_color(capsys):
    data = _run(capsys, "pick", "k7/8/5n2/8/4R3/8/8/4K3", "--hp", "e4=4", "--color", "b")
    assert data["move"]["attackType"] == "super"


def test_pick_forced_base(capsys):
    data = _run(
        capsys, "pick", "4R2k/6pp/3n4/8/8/8/8/K7",
        "--hp", "e8=2", "--defends", "w=2,b=0",
    )
    assert data["in_check"] is True
    assert data["move"]["attackType"] == "base"


def test_pick_checkmate(capsys):
    data = _run(capsys, "pick", "R2k4/8/3K4/8/8/8/8/8")
    assert data == {"move": None, "in_check": True}


def test_defend(capsys):
    data = _run(
        capsys, "defend", chess.STARTING_BOARD_FEN,
        "--attacker", "Q", "--defender", "q", "--defender-hp", "4",
        "--defends", "w=0,b=1",
    )
    assert data["use"] is True
    assert data["pKill"] == 1.0


def test_defend_locked(capsys):
    data = _run(
        capsys, "defend", "4k3/8/8/8/8/8/8/4K3",
        "--attacker", "R", "--defender", "n", "--locked", "--defends", "b=1",
    )
    assert data == {
        "use": False, "reason": "locked", "decisionValue": 0,
        "scoreToSave": 0, "scarcity": 0, "pKill": 0,
    }


def test_defend_seeded_is_reproducible(capsys):
    argv = [
        "defend", "4k3/8/8/8/8/8/8/4K3", "--attacker", "Q", "--defender", "r",
        "--attack-type", "super", "--defends", "b=1", "--seed", "3",
    ]
    first = _run(capsys, *argv)
    second = _run(capsys, *argv)
    assert first == second
    assert first["pKill"] in (0.0, 1.0)


def test_bad_fen_exits_with_error(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["pick", "not/a/fen"])
    assert exc.value.code == 1
    assert "error:" in capsys.readouterr().err


def test_bad_hp_argument(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["pick", "4k3/8/8/8/8/8/8/4K3", "--hp", "e1"])
    assert exc.value.code == 1
