"""Runtime settings read from the environment or a JSON profile."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields
from pathlib import Path


logger = logging.getLogger(__name__)

_DB_PATH_ENV = "KUKUYS_DB_PATH"
_ENRICHMENT_ENV = "KUKUYS_ENRICHMENT"
_LIQUIPEDIA_RATE_ENV = "KUKUYS_LIQUIPEDIA_RATE"
_LIQUIPEDIA_PARSE_RATE_ENV = "KUKUYS_LIQUIPEDIA_PARSE_RATE"
_CACHE_TTL_ENV = "KUKUYS_CACHE_TTL"
_INCOME_INTERVAL_ENV = "KUKUYS_INCOME_INTERVAL"
_USER_AGENT_ENV = "KUKUYS_USER_AGENT"

DEFAULT_DB_PATH = "kukuy_master.sqlite"
DEFAULT_USER_AGENT = "KukuysMaster/1.0 (Dota 2 Manager; https://github.com/hancesooome/kukuys-master)"
ENRICHMENT_MODES = ("liquipedia", "off")


def _env_float(name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _env_choice(name: str, default: str, choices: tuple[str, ...]) -> str:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value not in choices:
        logger.warning("Invalid value for %s: %s; using default %s", name, raw, default)
        return default
    return value


@dataclass
class Settings:
    db_path: str = DEFAULT_DB_PATH
    enrichment: str = "liquipedia"
    liquipedia_rate: float = 2.1
    liquipedia_parse_rate: float = 31.0
    cache_ttl: float = 24 * 60 * 60
    income_interval: float = 10.0
    user_agent: str = DEFAULT_USER_AGENT

    @classmethod
    def from_env(cls) -> "Settings":
        defaults = cls()
        return cls(
            db_path=os.getenv(_DB_PATH_ENV) or defaults.db_path,
            enrichment=_env_choice(_ENRICHMENT_ENV, defaults.enrichment, ENRICHMENT_MODES),
            liquipedia_rate=_env_float(_LIQUIPEDIA_RATE_ENV, defaults.liquipedia_rate, clamp_min=0.0),
            liquipedia_parse_rate=_env_float(
                _LIQUIPEDIA_PARSE_RATE_ENV, defaults.liquipedia_parse_rate, clamp_min=0.0
            ),
            cache_ttl=_env_float(_CACHE_TTL_ENV, defaults.cache_ttl, clamp_min=0.0),
            income_interval=_env_float(_INCOME_INTERVAL_ENV, defaults.income_interval, clamp_min=0.0),
            user_agent=os.getenv(_USER_AGENT_ENV) or defaults.user_agent,
        )

    @classmethod
    def load(cls, path: Path) -> "Settings":
        data = json.loads(path.read_text(encoding="utf-8"))
        known = {field.name for field in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            logger.warning("Ignoring unknown settings keys in %s: %s", path, ", ".join(unknown))
        return cls(**{key: value for key, value in data.items() if key in known})

    def save(self, path: Path) -> None:
        path.write_text(json.dumps(asdict(self), indent=2), encoding="utf-8")
