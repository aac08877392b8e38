import json

import httpx
import pytest

from kukuys.config_loader import Settings
from kukuys.enrichment import (
    Enrichment,
    LiquipediaLookup,
    NullLookup,
    PlayerEnricher,
    TTLCache,
    build_lookup,
    map_role,
)
from kukuys.enrichment.liquipedia import _RateLimiter
from kukuys.models import Player
from kukuys.persistence import GameStore


class _Clock:
    def __init__(self) -> None:
        self.now = 1000.0
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


WIKITEXT = "{{Infobox player\n|id=Gabbi\n|team=[[Talon Esports]]\n|roles=[[Carry]]/[[Mid]]\n}}"


def _liquipedia(request: httpx.Request) -> httpx.Response:
    params = request.url.params
    if params.get("prop") == "images":
        pages = {"1": {"images": [{"title": "File:Talon logo.png"}, {"title": "File:Gabbi 2023.jpg"}]}}
        return httpx.Response(200, json={"query": {"pages": pages}})
    if params.get("prop") == "imageinfo":
        assert params["titles"] == "File:Gabbi 2023.jpg"
        pages = {"2": {"imageinfo": [{"url": "https://liquipedia.net/images/gabbi.jpg"}]}}
        return httpx.Response(200, json={"query": {"pages": pages}})
    if params.get("prop") == "revisions":
        pages = {"3": {"revisions": [{"slots": {"main": {"*": WIKITEXT}}}]}}
        return httpx.Response(200, json={"query": {"pages": pages}})
    return httpx.Response(404, text="")


def _lookup(handler, calls=None) -> LiquipediaLookup:
    def recording(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return handler(request)

    clock = _Clock()
    return LiquipediaLookup(
        client=httpx.Client(transport=httpx.MockTransport(recording)),
        rate_interval=0,
        parse_rate_interval=0,
        clock=clock,
        sleep=clock.sleep,
    )


@pytest.fixture
def store(tmp_path) -> GameStore:
    return GameStore(tmp_path / "game.sqlite")


def _insert(store: GameStore, player_id: str, name: str, **overrides) -> None:
    data = dict(
        id=player_id,
        name=name,
        tier="Legendary",
        drafting=40,
        mechanics=40,
        mental_strength=40,
        leadership=40,
        trashtalk=40,
    )
    data.update(overrides)
    store.insert_player(Player(**data))


def test_cache_entries_expire_on_read():
    clock = _Clock()
    cache: TTLCache[str] = TTLCache(60, clock=clock)
    cache.set("Gabbi", "Talon Esports")

    clock.now += 59
    assert cache.get("Gabbi") == "Talon Esports"
    clock.now += 1
    assert cache.get("Gabbi") is None
    assert len(cache) == 0


def test_rate_limiter_spaces_calls():
    clock = _Clock()
    limiter = _RateLimiter(2.0, clock=clock, sleep=clock.sleep)

    limiter.wait()
    limiter.wait()
    clock.now += 5
    limiter.wait()

    assert clock.sleeps == [2.0]


@pytest.mark.parametrize(
    "raw, role",
    [
        ("Offlaner", "Offlane"),
        ("Carry", "Carry"),
        ("[[Mid]]", "Mid"),
        ("position 4", "Soft Support"),
        ("Support", "Hard Support"),
        ("Hard Support", "Hard Support"),
        ("Roles|Carry", "Carry"),
        ("Coach", None),
        ("Analyst", None),
    ],
)
def test_map_role(raw, role):
    assert map_role(raw) == role


def test_lookup_reads_image_team_and_role():
    calls: list[httpx.Request] = []
    lookup = _lookup(_liquipedia, calls)

    result = lookup.lookup("Gabbi")

    assert result == Enrichment(
        image_url="https://liquipedia.net/images/gabbi.jpg",
        team="Talon Esports",
        role="Carry",
    )
    assert all(call.headers["User-Agent"].startswith("KukuysMaster") for call in calls)

    made = len(calls)
    assert lookup.lookup("Gabbi") == result
    assert len(calls) == made


def test_html_responses_count_as_no_data():
    lookup = _lookup(lambda request: httpx.Response(200, text="<!DOCTYPE html><html>captcha</html>"))

    result = lookup.lookup("Nobody")

    assert result.image_url is None
    assert result.role is None
    assert result.team == "Kukuys"


def test_network_errors_fall_back_to_known_team():
    def down(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("liquipedia unreachable", request=request)

    result = _lookup(down).lookup("Gabbi")

    assert result == Enrichment(image_url=None, team="Execration", role=None)


def test_team_falls_back_to_parsed_page():
    html = "<div>Team: Blacklist International</div><div>Alternate IDs</div>"

    def handler(request: httpx.Request) -> httpx.Response:
        params = request.url.params
        if params.get("action") == "parse":
            return httpx.Response(200, content=json.dumps({"parse": {"text": {"*": html}}}))
        return httpx.Response(200, json={"query": {"pages": {"-1": {"missing": ""}}}})

    assert _lookup(handler).team("Nobody") == "Blacklist International"


def test_enrichment_as_updates_skips_missing_fields():
    assert Enrichment(team="OG").as_updates() == {"team": "OG"}
    assert Enrichment().as_updates() == {}


class _StaticLookup:
    def __init__(self, result: Enrichment):
        self.result = result
        self.names: list[str] = []

    def lookup(self, name: str) -> Enrichment:
        self.names.append(name)
        return self.result


class _BrokenLookup:
    def lookup(self, name: str) -> Enrichment:
        raise RuntimeError("boom")


def test_enricher_applies_only_found_fields(store):
    _insert(store, "Armel_1", "Armel", role="Mid")
    enricher = PlayerEnricher(store, _StaticLookup(Enrichment(team="Talon Esports", role="Offlane")))

    assert enricher.enrich("Armel_1", "Armel")

    player = store.get_player("Armel_1")
    assert player.team == "Talon Esports"
    assert player.role == "Offlane"
    assert player.image_url is None


def test_enricher_swallows_lookup_failures(store):
    _insert(store, "Armel_1", "Armel", team="Old Team")

    assert PlayerEnricher(store, _BrokenLookup()).enrich("Armel_1", "Armel") is False
    assert store.get_player("Armel_1").team == "Old Team"


def test_enricher_ignores_deleted_players(store):
    enricher = PlayerEnricher(store, _StaticLookup(Enrichment(team="OG")))
    assert enricher.enrich("gone", "Ghost") is False


def test_backfill_only_touches_incomplete_players(store):
    _insert(store, "done", "Karl", team="Blacklist", image_url="https://example/karl.png")
    _insert(store, "todo", "Tino")
    lookup = _StaticLookup(Enrichment(team="Execration", image_url="https://example/tino.png"))

    updated = PlayerEnricher(store, lookup).backfill()

    assert updated == ["todo"]
    assert lookup.names == ["Tino"]
    assert store.get_player("todo").team == "Execration"


def test_build_lookup_respects_settings():
    assert isinstance(build_lookup(Settings(enrichment="off")), NullLookup)
    lookup = build_lookup(Settings(enrichment="liquipedia", liquipedia_rate=0.5))
    assert isinstance(lookup, LiquipediaLookup)
    lookup.close()


def test_programming_errors_are_not_hidden_as_missing_data(store):
    def broken(request: httpx.Request) -> httpx.Response:
        raise TypeError("bad handler")

    lookup = _lookup(broken)
    with pytest.raises(TypeError):
        lookup.image("Gabbi")

    _insert(store, "Gabbi_1", "Gabbi")
    assert PlayerEnricher(store, lookup).enrich("Gabbi_1", "Gabbi") is False
    assert store.get_player("Gabbi_1").team is None
