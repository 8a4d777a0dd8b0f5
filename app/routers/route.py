from fastapi import APIRouter, Depends, HTTPException, status
from app.core.logging_config import logger
from app.dependencies import get_hybrid_router
from app.schemas.route import RouteRequest, RouteResult
from app.services.routing_engine import HybridRouter

router = APIRouter()


@router.post("", response_model=RouteResult)
async def compute_route(
    request_data: RouteRequest,
    hybrid_router: HybridRouter = Depends(get_hybrid_router)
):
    """
    Compute a driving route between two coordinates.

    Trips up to the local threshold (12 km by default) are solved with A* on
    an OpenStreetMap road graph; longer trips, or short ones the local search
    cannot serve, are delegated to OSRM. The `algorithm` field tells which
    engine answered.

    Example:
        ```json
        {
            "start": {"lat": 52.5200, "lng": 13.4050},
            "end": {"lat": 52.5163, "lng": 13.3777}
        }
        ```
    """
    result = await hybrid_router.compute_route(request_data.start, request_data.end)
    if result is None:
        logger.info(
            f"No route found: {request_data.start.lat},{request_data.start.lng} -> "
            f"{request_data.end.lat},{request_data.end.lng}"
        )
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="No route found"
        )
    return result
