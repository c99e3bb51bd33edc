"""Runtime configuration from environment variables."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

_ROOT = Path(__file__).parent.parent.parent

NOMINATIM_SEARCH_URL = "https://nominatim.openstreetmap.org/search"


class Settings(BaseSettings):
    """Settings read from ``SOLARNOON_*`` environment variables.

    Passed explicitly into the cache, geocoder and report builder.
    """

    locale: str = "en"  # accept-language sent to the geocoder
    cache_path: Path = _ROOT / "cache.json.gz"
    user_agent: str = "solar-noon-checker"
    geocode_url: str = NOMINATIM_SEARCH_URL
    max_transitions: int = Field(default=2, ge=0)
    log_level: str = "WARNING"

    model_config = {"env_prefix": "SOLARNOON_", "frozen": True, "extra": "ignore"}

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()
