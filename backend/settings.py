import os

# Basic settings helper to read environment configuration.


def _as_bool(val: str | None, default: bool = False) -> bool:
    if val is None:
        return default
    return val.lower() in ("1", "true", "yes", "on")


def _as_int(val: str | None, default: int) -> int:
    try:
        return int(val) if val is not None else default
    except ValueError:
        return default


def _as_float(val: str | None, default: float) -> float:
    try:
        return float(val) if val is not None else default
    except ValueError:
        return default


DEFAULT_DB_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "guides.db")


class Settings:
    def __init__(self) -> None:
        self.DATABASE_URL: str = os.getenv("DATABASE_URL") or f"sqlite:///{DEFAULT_DB_PATH}"
        self.PORT: int = _as_int(os.getenv("PORT"), 3000)
        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        # Outbound HTTP
        self.HTTP_TIMEOUT: float = _as_float(os.getenv("HTTP_TIMEOUT"), 10.0)
        self.ENRICHMENT_MAX_WORKERS: int = max(1, _as_int(os.getenv("ENRICHMENT_MAX_WORKERS"), 4))

        # Geocoding (Nominatim)
        self.GEOCODING_ENABLED: bool = _as_bool(os.getenv("GEOCODING_ENABLED"), True)
        self.NOMINATIM_BASE_URL: str = os.getenv(
            "NOMINATIM_BASE_URL", "https://nominatim.openstreetmap.org"
        ).rstrip("/")
        self.NOMINATIM_USER_AGENT: str | None = os.getenv("NOMINATIM_USER_AGENT")
        self.NOMINATIM_REFERER: str | None = os.getenv("NOMINATIM_REFERER")
        self.NOMINATIM_MIN_INTERVAL: float = _as_float(os.getenv("NOMINATIM_MIN_INTERVAL"), 1.1)

        # Images
        self.IMAGE_LOOKUP_ENABLED: bool = _as_bool(os.getenv("IMAGE_LOOKUP_ENABLED"), True)
        self.UNSPLASH_ACCESS_KEY: str | None = os.getenv("UNSPLASH_ACCESS_KEY")
        self.IMAGE_REDIRECT_URL_TEMPLATE: str = os.getenv(
            "IMAGE_REDIRECT_URL_TEMPLATE", "https://source.unsplash.com/800x400/?{query}"
        )


settings = Settings()
