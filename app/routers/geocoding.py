from fastapi import APIRouter, Depends, HTTPException, Query, status
from app.dependencies import get_geocoding_service
from app.schemas.geocoding import GeocodeResult
from app.services.geocoding import GeocodingService

router = APIRouter()


@router.get("", response_model=GeocodeResult)
async def geocode(
    q: str = Query(..., min_length=1, description="Address or place name"),
    service: GeocodingService = Depends(get_geocoding_service)
):
    """
    Resolve a place name to coordinates using the fastest of Photon and Nominatim.
    """
    result = await service.geocode(q)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No match for '{q}'"
        )
    return result
