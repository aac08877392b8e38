"""Lightweight REST client for a running Kukuys API."""

from __future__ import annotations

import argparse
import json

import httpx


def _show(resp: httpx.Response) -> None:
    if resp.status_code in (400, 404):
        detail = resp.json().get("detail", {})
        message = detail.get("error") if isinstance(detail, dict) else detail
        raise SystemExit(f"{resp.status_code}: {message}")
    resp.raise_for_status()
    print(json.dumps(resp.json(), indent=2))


def main() -> None:
    parser = argparse.ArgumentParser(description="Interact with the Kukuys REST API")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:3000")
    parser.add_argument("--state", action="store_true", help="Print state and players")
    parser.add_argument("--recruit", type=int, default=0, metavar="N", help="Recruit N players")
    parser.add_argument("--expand", action="store_true", help="Buy one more collection slot")
    parser.add_argument(
        "--action",
        nargs=2,
        metavar=("PLAYER_ID", "ACTION"),
        help="Apply train, sleep, toggle_stream, toggle_roster or recycle",
    )
    parser.add_argument("--tournament", action="store_true", help="Run a tournament")
    parser.add_argument("--rates", action="store_true", help="Print recruit rates")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=30.0) as client:
        if args.rates:
            _show(client.get("/api/recruit-config"))
        for _ in range(args.recruit):
            _show(client.post("/api/recruit"))
        if args.expand:
            _show(client.post("/api/expand-collection"))
        if args.action:
            player_id, action = args.action
            _show(client.post("/api/action", json={"playerId": player_id, "action": action}))
        if args.tournament:
            resp = client.post("/api/tournament-run")
            if resp.is_success:
                result = resp.json()
                for bracket_round in result["rounds"]:
                    print(bracket_round["round"])
                    for match in bracket_round["matches"]:
                        print(
                            f"  {match['team1']} ({match['team1_odds']}%) vs "
                            f"{match['team2']} ({match['team2_odds']}%): {match['winner']}"
                        )
                print(f"{result['tournament_name']} champion: {result['champion']}")
                print(f"Coins awarded: {result['coins_awarded']}")
            else:
                _show(resp)
        if args.state:
            _show(client.get("/api/state"))


if __name__ == "__main__":
    main()
