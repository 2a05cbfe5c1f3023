import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE = "swift"
DEFAULT_CONTEXT_RADIUS = 1
DEFAULT_SEARCH_LINES = 5


@dataclass(frozen=True)
class Settings:
    language: str = DEFAULT_LANGUAGE
    context_radius: int = DEFAULT_CONTEXT_RADIUS
    unexpected_code_search_lines: int = DEFAULT_SEARCH_LINES


def _int_from_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer, using %d", name, raw, default)
        return default
    if value < 0:
        logger.warning("Ignoring %s=%r: must not be negative, using %d", name, raw, default)
        return default
    return value


def get_settings() -> Settings:
    return Settings(
        language=os.getenv("SAAE_LANGUAGE", DEFAULT_LANGUAGE).strip().lower() or DEFAULT_LANGUAGE,
        context_radius=_int_from_env("SAAE_CONTEXT_RADIUS", DEFAULT_CONTEXT_RADIUS),
        unexpected_code_search_lines=_int_from_env("SAAE_SEARCH_LINES", DEFAULT_SEARCH_LINES),
    )
