"""REST API for the Kukuys manager game."""

from __future__ import annotations

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncIterator, NoReturn

from fastapi import BackgroundTasks, FastAPI, HTTPException

from kukuys.api.schemas import (
    ActionRequest,
    ActionResultResponse,
    BackfillResponse,
    ExpandResponse,
    RecruitConfigResponse,
    RecruitResponse,
    RecycleRequest,
    StateResponse,
    TeamsResponse,
    TournamentResponse,
    TournamentsResponse,
)
from kukuys.config.economy import REAL_TEAMS, REAL_TOURNAMENTS
from kukuys.config_loader import Settings
from kukuys.engine import (
    GameError,
    PlayerNotFound,
    apply_passive_income,
    expand_collection,
    game_snapshot,
    player_action,
    recruit,
    recruit_config,
    recycle_player,
    reset_collection,
    run_tournament,
)
from kukuys.enrichment import PlayerEnricher, build_lookup
from kukuys.persistence import GameStore


logger = logging.getLogger(__name__)


def _raise_http(exc: GameError) -> NoReturn:
    status_code = 404 if isinstance(exc, PlayerNotFound) else 400
    raise HTTPException(status_code=status_code, detail={"error": exc.message, "code": exc.code}) from exc


async def _income_loop(store: GameStore, interval: float) -> None:
    while True:
        await asyncio.sleep(interval)
        try:
            await asyncio.to_thread(apply_passive_income, store)
        except Exception:
            logger.exception("Passive income tick failed")


def create_app(
    store: GameStore | None = None,
    enricher: PlayerEnricher | None = None,
    settings: Settings | None = None,
    rng: random.Random | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    store = store or GameStore(settings.db_path)
    enricher = enricher or PlayerEnricher(store, build_lookup(settings))
    rng = rng or random.Random()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        task = None
        if settings.income_interval > 0:
            task = asyncio.create_task(_income_loop(store, settings.income_interval))
        try:
            yield
        finally:
            if task is not None:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass

    app = FastAPI(title="Kukuys Master", lifespan=lifespan)
    app.state.store = store
    app.state.enricher = enricher
    app.state.settings = settings

    @app.get("/health")
    async def health() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/state", response_model=StateResponse)
    def get_state():
        state, players = game_snapshot(store, rng=rng)
        return StateResponse(state=state, players=players)

    @app.post("/api/recruit", response_model=RecruitResponse)
    def recruit_player(background_tasks: BackgroundTasks):
        try:
            player = recruit(
                store,
                rng=rng,
                on_recruited=lambda recruited: background_tasks.add_task(
                    enricher.enrich, recruited.id, recruited.name
                ),
            )
        except GameError as exc:
            _raise_http(exc)
        return RecruitResponse(player=player)

    @app.get("/api/recruit-config", response_model=RecruitConfigResponse)
    async def get_recruit_config():
        return RecruitConfigResponse.model_validate(recruit_config())

    @app.post("/api/expand-collection", response_model=ExpandResponse)
    def expand():
        try:
            state = expand_collection(store)
        except GameError as exc:
            _raise_http(exc)
        return ExpandResponse(state=state)

    @app.post("/api/action", response_model=ActionResultResponse)
    def action(payload: ActionRequest):
        try:
            state, players = player_action(store, payload.player_id, payload.action, rng=rng)
        except GameError as exc:
            _raise_http(exc)
        return ActionResultResponse(state=state, players=players)

    @app.post("/api/recycle-player", response_model=ActionResultResponse)
    def recycle(payload: RecycleRequest):
        try:
            state, players = recycle_player(store, payload.player_id)
        except GameError as exc:
            _raise_http(exc)
        return ActionResultResponse(state=state, players=players)

    @app.post("/api/reset-collection", response_model=ActionResultResponse)
    def reset():
        state, players = reset_collection(store)
        return ActionResultResponse(state=state, players=players)

    @app.post("/api/tournament-run", response_model=TournamentResponse)
    def tournament_run():
        try:
            result = run_tournament(store, rng=rng)
        except GameError as exc:
            _raise_http(exc)
        return TournamentResponse.from_result(result)

    @app.post("/api/backfill", response_model=BackfillResponse)
    def backfill():
        updated = enricher.backfill()
        _, players = game_snapshot(store, rng=rng)
        return BackfillResponse(updated=updated, players=players)

    @app.get("/api/teams", response_model=TeamsResponse)
    async def teams():
        return TeamsResponse(teams=list(REAL_TEAMS))

    @app.get("/api/tournaments", response_model=TournamentsResponse)
    async def tournaments():
        return TournamentsResponse(tournaments=list(REAL_TOURNAMENTS))

    return app
