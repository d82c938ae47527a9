import logging
import os
from dataclasses import dataclass
from typing import Optional

from tourney.standings import STANDINGS_VIEWS
from tourney.status import DEFAULT_TIMEZONE

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@dataclass(frozen=True)
class Settings:
    database_url: str
    scoring_pin: str
    tournament_tz: str = DEFAULT_TIMEZONE
    log_level: str = "INFO"
    default_standings_view: str = "official"


def _normalize_database_url(value: Optional[str]) -> str:
    if not value:
        return "postgresql://localhost:5432/tourney"
    normalized = value.strip()
    if normalized.startswith("postgres://"):
        return "postgresql://" + normalized[len("postgres://"):]
    return normalized


def _standings_view(value: Optional[str]) -> str:
    view = (value or "official").strip().lower()
    if view not in STANDINGS_VIEWS:
        logger.warning("Ignoring DEFAULT_STANDINGS_VIEW=%s (expected one of %s)", value, ", ".join(STANDINGS_VIEWS))
        return "official"
    return view


def load_settings() -> Settings:
    return Settings(
        database_url=_normalize_database_url(os.getenv("DATABASE_URL")),
        scoring_pin=os.getenv("SCORING_PIN", "1234"),
        tournament_tz=os.getenv("TOURNAMENT_TZ", DEFAULT_TIMEZONE),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        default_standings_view=_standings_view(os.getenv("DEFAULT_STANDINGS_VIEW")),
    )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
