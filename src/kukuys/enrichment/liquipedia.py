"""Player image, team and role lookups against the Liquipedia MediaWiki API.

Liquipedia asks API users for at most one request every 2 seconds and one
``action=parse`` request every 30 seconds, so every call goes through a
client-side rate limiter. Responses that are HTML (error or captcha pages) or
not JSON are treated as "no data".
"""

from __future__ import annotations

import logging
import re
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional, Protocol

import httpx

from kukuys.config import KNOWN_PLAYER_TEAMS
from kukuys.config.economy import KUKUYS_TEAM
from kukuys.config_loader import DEFAULT_USER_AGENT
from kukuys.enrichment.cache import TTLCache


logger = logging.getLogger(__name__)

LIQUIPEDIA_API = "https://liquipedia.net/dota2/api.php"

_LOOKUP_ERRORS = (httpx.HTTPError, ValueError)

_WIKI_TEAM_LINKED = re.compile(r"\|team\s*=\s*\[\[([^\]|]+)", re.IGNORECASE)
_WIKI_TEAM_PLAIN = re.compile(r"\|team\s*=\s*([^\n|\[]+)", re.IGNORECASE)
_WIKI_ROLE_LINE = re.compile(r"\|roles?\s*=\s*(.+?)(?:\n\||$)", re.IGNORECASE | re.DOTALL)
_WIKI_FIRST_LINK = re.compile(r"\[\[([^\]|]+)\]\]")
_HTML_TEAM = re.compile(
    r"Team:\s*([A-Za-z0-9_\s.\-]+?)(?=\s+Alternate|\s+Approx|\s+Years|</|\n\n|$)",
    re.IGNORECASE,
)
_HTML_PRESENT = re.compile(
    r"Present\s+([A-Za-z0-9_\s.\-]+?)(?=\s+Recent|\s+Upcoming|\s+\d{4}|$)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class Enrichment:
    image_url: Optional[str] = None
    team: Optional[str] = None
    role: Optional[str] = None

    def as_updates(self) -> dict[str, str]:
        """Only the fields that were found; missing ones never overwrite stored data."""

        return {key: value for key, value in vars(self).items() if value}


class PlayerLookup(Protocol):
    def lookup(self, name: str) -> Enrichment: ...


class NullLookup:
    """Lookup used when enrichment is switched off."""

    def lookup(self, name: str) -> Enrichment:
        return Enrichment()


def map_role(raw: str) -> Optional[str]:
    """Map a Liquipedia role string onto the game's five roles.

    Offlane is checked before the generic "support" patterns so that
    "Offlaner/Carry" maps to Offlane. Coaches map to nothing.
    """

    text = re.sub(r"[\[\]{}]", "", raw.lower()).strip()
    if "|" in text:
        text = text.split("|")[-1].strip()
    if text == "coach":
        return None
    if re.search(r"\bofflane|\bofflaner|position\s*3|pos\s*3|pos3", text):
        return "Offlane"
    if re.search(r"\bcarry|position\s*1|pos\s*1|pos1|hard\s*carry", text):
        return "Carry"
    if re.search(r"\bmid|\bmiddle|position\s*2|pos\s*2|pos2", text):
        return "Mid"
    if re.search(r"soft\s*support|position\s*4|pos\s*4|pos4", text):
        return "Soft Support"
    if re.search(r"hard\s*support|position\s*5|pos\s*5|pos5|\bsupport\b", text):
        return "Hard Support"
    return None


class _RateLimiter:
    def __init__(
        self,
        interval: float,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.interval = interval
        self._clock = clock
        self._sleep = sleep
        self._last: Optional[float] = None
        self._lock = threading.Lock()

    def wait(self) -> None:
        with self._lock:
            if self._last is not None:
                remaining = self._last + self.interval - self._clock()
                if remaining > 0:
                    self._sleep(remaining)
            self._last = self._clock()


def _first_page(data: Any) -> Optional[Mapping[str, Any]]:
    pages = (data or {}).get("query", {}).get("pages") if isinstance(data, dict) else None
    if not isinstance(pages, dict) or not pages:
        return None
    page = next(iter(pages.values()))
    return page if isinstance(page, dict) else None


class LiquipediaLookup:
    """Rate-limited, cached Liquipedia client."""

    def __init__(
        self,
        *,
        client: Optional[httpx.Client] = None,
        user_agent: str = DEFAULT_USER_AGENT,
        rate_interval: float = 2.1,
        parse_rate_interval: float = 31.0,
        cache_ttl: float = 24 * 60 * 60,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._client = client or httpx.Client(timeout=15.0, follow_redirects=True)
        self._headers = {
            "User-Agent": user_agent,
            "Accept": "application/json",
            "Accept-Encoding": "gzip, deflate",
        }
        self._limiter = _RateLimiter(rate_interval, clock=clock, sleep=sleep)
        self._parse_limiter = _RateLimiter(parse_rate_interval, clock=clock, sleep=sleep)
        self.image_cache: TTLCache[str] = TTLCache(cache_ttl, clock=clock)
        self.team_cache: TTLCache[str] = TTLCache(cache_ttl, clock=clock)
        self.role_cache: TTLCache[str] = TTLCache(cache_ttl, clock=clock)

    def close(self) -> None:
        self._client.close()

    def _fetch_json(self, params: Mapping[str, str], *, parse: bool = False) -> Any:
        (self._parse_limiter if parse else self._limiter).wait()
        response = self._client.get(
            LIQUIPEDIA_API,
            params={**params, "format": "json", "origin": "*"},
            headers=self._headers,
        )
        text = response.text.strip()
        if not response.is_success or not text or text.startswith("<"):
            return None
        try:
            return response.json()
        except ValueError:
            return None

    def _wikitext(self, title: str) -> Optional[str]:
        data = self._fetch_json(
            {
                "action": "query",
                "titles": title,
                "prop": "revisions",
                "rvprop": "content",
                "rvslots": "main",
                "redirects": "1",
            }
        )
        page = _first_page(data)
        if page is None:
            return None
        revisions = page.get("revisions") or []
        if not revisions:
            return None
        wikitext = revisions[0].get("slots", {}).get("main", {}).get("*")
        return wikitext if isinstance(wikitext, str) else None

    def image(self, name: str) -> Optional[str]:
        cached = self.image_cache.get(name)
        if cached:
            return cached

        candidates = (f"File:{name} ", f"File:{name}_")
        exact = {f"File:{name}.png", f"File:{name}.jpg"}

        def matches(title: str) -> bool:
            return title.startswith(candidates) or title in exact

        try:
            portrait: Optional[str] = None
            imcontinue: Optional[str] = None
            continue_param: Optional[str] = None
            while True:
                params = {
                    "action": "query",
                    "titles": name.replace(" ", "_"),
                    "prop": "images",
                    "imlimit": "50",
                }
                if imcontinue:
                    params["imcontinue"] = imcontinue
                if continue_param:
                    params["continue"] = continue_param
                data = self._fetch_json(params)
                page = _first_page(data)
                if page is None:
                    break
                titles = [image.get("title", "") for image in page.get("images") or []]
                portrait = next((title for title in titles if matches(title)), None)
                cont = data.get("continue") or {}
                imcontinue = cont.get("imcontinue")
                continue_param = cont.get("continue")
                if portrait or not imcontinue:
                    break
            if not portrait:
                return None

            info = self._fetch_json(
                {"action": "query", "titles": portrait, "prop": "imageinfo", "iiprop": "url"}
            )
            page = _first_page(info)
            if page is None:
                return None
            image_info = page.get("imageinfo") or []
            url = image_info[0].get("url") if image_info else None
        except _LOOKUP_ERRORS as exc:
            logger.warning("Liquipedia image fetch failed for %s: %s", name, exc)
            return None
        if url:
            self.image_cache.set(name, url)
        return url

    def _resolve_redirect(self, title: str) -> str:
        try:
            data = self._fetch_json({"action": "query", "titles": title, "redirects": "1"})
            query = data.get("query") if isinstance(data, dict) else None
            if not query:
                return title
            redirects = query.get("redirects") or []
            if redirects and redirects[0].get("to"):
                return redirects[0]["to"].replace(" ", "_")
            page = _first_page(data)
            if page and page.get("title"):
                return page["title"].replace(" ", "_")
        except _LOOKUP_ERRORS as exc:
            logger.debug("Redirect lookup failed for %s: %s", title, exc)
        return title

    def _team_from_parsed_page(self, title: str) -> Optional[str]:
        try:
            data = self._fetch_json(
                {"action": "parse", "page": title, "prop": "text"},
                parse=True,
            )
            if not isinstance(data, dict) or (data.get("error") or {}).get("code") == "missingtitle":
                return None
            html = (data.get("parse") or {}).get("text", {}).get("*")
            if not isinstance(html, str) or not html:
                return None
        except _LOOKUP_ERRORS as exc:
            logger.debug("Parse lookup failed for %s: %s", title, exc)
            return None
        html = re.sub(r"&#160;|&nbsp;", " ", html)
        match = _HTML_TEAM.search(html)
        if match:
            team = match.group(1).strip()
            if 0 < len(team) < 80:
                return team
        match = _HTML_PRESENT.search(html)
        if match:
            team = match.group(1).strip()
            if 0 < len(team) < 80 and not team[0].isdigit():
                return team
        return None

    def team(self, name: str) -> str:
        """Current team; falls back to the known-player table, then "Kukuys"."""

        cached = self.team_cache.get(name)
        if cached:
            return cached

        page_title = name.replace(" ", "_")
        team: Optional[str] = None
        try:
            wikitext = self._wikitext(page_title)
        except _LOOKUP_ERRORS as exc:
            logger.warning("Liquipedia team fetch failed for %s: %s", name, exc)
            wikitext = None
        if wikitext:
            linked = _WIKI_TEAM_LINKED.search(wikitext)
            if linked and not linked.group(1).startswith("{{"):
                candidate = linked.group(1).strip()
                if 0 < len(candidate) < 120:
                    team = candidate
            if team is None:
                plain = _WIKI_TEAM_PLAIN.search(wikitext)
                if plain:
                    candidate = plain.group(1).strip()
                    if candidate and "{{" not in candidate and len(candidate) < 120:
                        team = candidate

        if team is None:
            resolved = self._resolve_redirect(page_title)
            team = self._team_from_parsed_page(resolved)
            if team is None and resolved != page_title:
                team = self._team_from_parsed_page(page_title)
        if team is None:
            team = KNOWN_PLAYER_TEAMS.get(name, KUKUYS_TEAM)
        self.team_cache.set(name, team)
        return team

    def role(self, name: str) -> Optional[str]:
        cached = self.role_cache.get(name)
        if cached:
            return cached

        try:
            wikitext = self._wikitext(name.replace(" ", "_"))
        except _LOOKUP_ERRORS as exc:
            logger.warning("Liquipedia role fetch failed for %s: %s", name, exc)
            return None
        if not wikitext:
            return None
        line = _WIKI_ROLE_LINE.search(wikitext)
        if not line:
            return None
        raw = line.group(1).strip()
        first_link = _WIKI_FIRST_LINK.search(raw)
        if first_link:
            first_role = first_link.group(1)
        else:
            first_role = re.split(r"[/\[\]]", raw)[0].strip() or raw
        role = map_role(first_role)
        if role:
            self.role_cache.set(name, role)
        return role

    def lookup(self, name: str) -> Enrichment:
        return Enrichment(image_url=self.image(name), team=self.team(name), role=self.role(name))
