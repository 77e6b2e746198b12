import logging
import random
from contextlib import asynccontextmanager

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, ConfigDict, Field

from tchess.combat import AttackType
from tchess.config import Settings
from tchess.config_flags import is_connect_sampling_enabled
from tchess.defend import should_defend
from tchess.legality import check_status, is_in_check, restricted_moves
from tchess.pieces import Piece, PieceType, parse_color
from tchess.policy import pick
from tchess.state import AttackContext, GameState

logger = logging.getLogger(__name__)

settings = Settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logging.getLogger("tchess").setLevel(settings.log_level.upper())
    yield


app = FastAPI(title="tChess AI", lifespan=lifespan)


# --- Request models ---

class PieceModel(BaseModel):
    type: str
    color: str
    hp: int | None = None

    def to_piece(self) -> Piece:
        return Piece(PieceType.from_letter(self.type), parse_color(self.color), self.hp)


class StateModel(BaseModel):
    board: list[list[PieceModel | None]]
    accelerated: bool = False
    defends: dict[str, int] = Field(default_factory=dict)

    def to_state(self) -> GameState:
        return GameState.from_dict(self.model_dump())


class PickRequest(BaseModel):
    state: StateModel
    color: str | None = None
    depth: int | None = None


class ContextModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    attack_type: AttackType = Field(alias="attackType")
    attacker: PieceModel
    defender: PieceModel
    defend_locked: bool = Field(default=False, alias="defendLocked")


class DefendRequest(BaseModel):
    state: StateModel
    context: ContextModel
    seed: int | None = None


class LegalMovesRequest(BaseModel):
    state: StateModel
    color: str | None = None


def _bad_request(e: ValueError) -> HTTPException:
    logger.warning("Rejected request: %s", e)
    return HTTPException(status_code=400, detail=str(e))


# --- Endpoints ---

@app.get("/api/health")
async def health():
    return {"status": "ok"}


@app.post("/api/ai/pick")
async def ai_pick(req: PickRequest):
    try:
        state = req.state.to_state()
        color = parse_color(req.color or settings.ai_color)
        result = pick(state, color, depth=req.depth or settings.default_depth)
    except ValueError as e:
        raise _bad_request(e) from e
    # No move: the caller tells checkmate from stalemate by in_check.
    return {
        "move": result.to_dict() if result is not None else None,
        "in_check": is_in_check(state.board, color),
    }


@app.post("/api/ai/defend")
async def ai_defend(req: DefendRequest):
    try:
        state = req.state.to_state()
        ctx = AttackContext(
            attack_type=req.context.attack_type,
            attacker=req.context.attacker.to_piece(),
            defender=req.context.defender.to_piece(),
            defend_locked=req.context.defend_locked,
        )
    except ValueError as e:
        raise _bad_request(e) from e
    rng = None
    if is_connect_sampling_enabled():
        rng = random.Random(req.seed if req.seed is not None else settings.defend_seed)
    return should_defend(state, ctx, rng=rng).to_dict()


@app.post("/api/ai/legal-moves")
async def ai_legal_moves(req: LegalMovesRequest):
    try:
        state = req.state.to_state()
        state.validate()
        color = parse_color(req.color or settings.ai_color)
    except ValueError as e:
        raise _bad_request(e) from e
    moves = restricted_moves(state.board, color, state.accelerated)
    return {
        "color": chess.COLOR_NAMES[color],
        "status": check_status(state.board, color).value,
        "moves": [m.to_dict() for m in moves],
    }
