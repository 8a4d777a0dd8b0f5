from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    ENVIRONMENT: str = "development"  # "development" or "production"
    HTTP_USER_AGENT: str = "waypoint-router/1.0"

    # Map-data provider (Overpass)
    OVERPASS_URL: str = "https://overpass-api.de/api/interpreter"
    OVERPASS_TIMEOUT_SECONDS: float = 15.0

    # Remote routing provider (OSRM)
    OSRM_BASE_URL: str = "https://router.project-osrm.org"
    OSRM_PROFILE: str = "driving"
    OSRM_TIMEOUT_SECONDS: float = 10.0

    # Hybrid routing policy
    LOCAL_ROUTING_THRESHOLD_METERS: float = 12_000.0
    BBOX_PADDING_DEGREES: float = 0.015  # ~1.5km on every side
    BBOX_KEY_PRECISION: int = 4
    URBAN_AVERAGE_SPEED_KMH: float = 30.0
    NETWORK_CACHE_MAX_ENTRIES: int = 64  # 0 = never evict
    SEARCH_HEURISTIC: str = "planar"  # "planar" or "great_circle"

    # Geocoding
    PHOTON_URL: str = "https://photon.komoot.io/api/"
    NOMINATIM_URL: str = "https://nominatim.openstreetmap.org/search"
    GEOCODE_TIMEOUT_SECONDS: float = 3.0

    @property
    def urban_average_speed_mps(self) -> float:
        return self.URBAN_AVERAGE_SPEED_KMH / 3.6

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

settings = Settings()
