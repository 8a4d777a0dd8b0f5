from pydantic import BaseModel, Field
from typing import List
from app.schemas.common import Coordinate, Location


class RouteRequest(BaseModel):
    start: Location
    end: Location


class RouteStep(BaseModel):
    instruction: str
    distance: float = Field(..., ge=0, description="Meters")
    duration: float = Field(..., ge=0, description="Seconds")


class RouteResult(BaseModel):
    """
    Normalized route returned by the hybrid router.

    `geometry` is never empty: "no route" is represented by the absence of a
    result, not by an empty path.
    """
    geometry: List[Coordinate] = Field(..., min_length=1)
    distance: float = Field(..., ge=0, description="Meters")
    duration: float = Field(..., ge=0, description="Seconds")
    steps: List[RouteStep] = []
    algorithm: str
