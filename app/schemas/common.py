from pydantic import BaseModel, ConfigDict, Field


class Coordinate(BaseModel):
    """A point in decimal degrees. Range checks are left to the caller."""
    model_config = ConfigDict(frozen=True)

    lat: float
    lng: float


class Location(Coordinate):
    """Coordinate accepted from API clients, validated to the WGS84 range."""
    lat: float = Field(..., description="Latitude", ge=-90, le=90)
    lng: float = Field(..., description="Longitude", ge=-180, le=180)
