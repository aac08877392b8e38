"""Command-line interface for playing against a local game database."""

from __future__ import annotations

import argparse
import json
import logging
import random
from pathlib import Path
from typing import Any

from kukuys.api.schemas import RecruitConfigResponse, StateResponse, TournamentResponse
from kukuys.config_loader import Settings
from kukuys.engine import (
    ACTIONS,
    GameError,
    expand_collection,
    game_snapshot,
    player_action,
    recruit,
    recruit_config,
    reset_collection,
    run_tournament,
)
from kukuys.enrichment import PlayerEnricher, build_lookup
from kukuys.persistence import GameStore


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Kukuys Master: Dota 2 team manager")
    parser.add_argument("--db", default=None, help="SQLite database path (overrides KUKUYS_DB_PATH)")
    parser.add_argument("--seed", type=int, default=None, help="Seed for reproducible rolls")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (e.g. INFO, DEBUG)")
    parser.add_argument("--load-profile", type=Path, default=None, help="Load settings JSON")
    parser.add_argument("--save-profile", type=Path, default=None, help="Save resolved settings JSON")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=3000)

    sub.add_parser("state", help="Print coins, slots and the collection")
    recruit_cmd = sub.add_parser("recruit", help="Spend 200 coins on a gacha roll")
    recruit_cmd.add_argument(
        "--enrich",
        action="store_true",
        help="Look the recruit up on Liquipedia before returning",
    )
    sub.add_parser("expand", help="Buy one more collection slot")

    action = sub.add_parser("action", help="Apply an action to one player")
    action.add_argument("player_id")
    action.add_argument("action", choices=ACTIONS)

    sub.add_parser("tournament", help="Enter the roster into a tournament")
    sub.add_parser("rates", help="Print recruit rates and name pools")
    sub.add_parser("reset", help="Delete every player and restore starting coins")
    return parser.parse_args(argv)


def _print(payload: Any) -> None:
    print(json.dumps(payload, indent=2))


def _resolve_settings(args: argparse.Namespace) -> Settings:
    settings = Settings.load(args.load_profile) if args.load_profile else Settings.from_env()
    if args.db:
        settings.db_path = args.db
    if args.save_profile:
        settings.save(args.save_profile)
        print(f"Saved settings profile to {args.save_profile}")
    return settings


def _serve(settings: Settings, host: str, port: int) -> None:
    import uvicorn

    from kukuys.api import create_app

    uvicorn.run(create_app(settings=settings), host=host, port=port)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    settings = _resolve_settings(args)

    if args.command == "serve":
        _serve(settings, args.host, args.port)
        return 0

    store = GameStore(settings.db_path)
    rng = random.Random(args.seed)
    try:
        if args.command == "state":
            state, players = game_snapshot(store, rng=rng)
            _print(StateResponse(state=state, players=players).model_dump(mode="json"))
        elif args.command == "recruit":
            player = recruit(store, rng=rng)
            if args.enrich:
                PlayerEnricher(store, build_lookup(settings)).enrich(player.id, player.name)
                player = store.get_player(player.id) or player
            _print({"player": player.model_dump(mode="json")})
        elif args.command == "expand":
            _print({"state": expand_collection(store).model_dump(mode="json")})
        elif args.command == "action":
            state, players = player_action(store, args.player_id, args.action, rng=rng)
            _print(StateResponse(state=state, players=players).model_dump(mode="json"))
        elif args.command == "tournament":
            result = run_tournament(store, rng=rng)
            _print(TournamentResponse.from_result(result).model_dump(mode="json"))
        elif args.command == "rates":
            _print(RecruitConfigResponse.model_validate(recruit_config()).model_dump(mode="json"))
        elif args.command == "reset":
            state, players = reset_collection(store)
            _print(StateResponse(state=state, players=players).model_dump(mode="json"))
    except GameError as exc:
        _print({"error": exc.message, "code": exc.code})
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
