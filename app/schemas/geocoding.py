from pydantic import BaseModel
from typing import Optional


class GeocodeResult(BaseModel):
    """Best match for a free-text place query"""
    query: str
    lat: float
    lng: float
    display_name: Optional[str] = None
    provider: str  # "photon" or "nominatim"
