from fastapi import APIRouter, Depends, HTTPException, status
from typing import List
from localretail.core.dependencies import get_storage
from localretail.storage.base import StorageGateway
from localretail.services.customer_service import get_route_names
from localretail.services.route_service import (
    get_route_by_id,
    get_all_routes,
    create_route,
    update_route,
    delete_route
)
from localretail.schemas.route import RouteInfo, RouteInfoCreate, RouteInfoUpdate, RouteListResponse
from localretail.logger_config import logger

router = APIRouter()


@router.get("", response_model=RouteListResponse)
async def get_routes(storage: StorageGateway = Depends(get_storage)):
    routes = await get_all_routes(storage)
    return RouteListResponse(total=len(routes), routes=routes)


@router.get("/names", response_model=List[str])
async def get_customer_route_names(storage: StorageGateway = Depends(get_storage)):
    """Distinct route names currently assigned to customers."""
    return await get_route_names(storage)


@router.get("/{route_id}", response_model=RouteInfo)
async def get_route(route_id: str, storage: StorageGateway = Depends(get_storage)):
    return await get_route_by_id(storage, route_id)


@router.post("", response_model=RouteInfo, status_code=status.HTTP_201_CREATED)
async def create_route_info(route_data: RouteInfoCreate, storage: StorageGateway = Depends(get_storage)):
    try:
        return await create_route(storage, route_data)
    except ValueError as e:
        logger.error(f"Error creating route: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e)
        )


@router.put("/{route_id}", response_model=RouteInfo)
async def update_route_info(
    route_id: str,
    route_data: RouteInfoUpdate,
    storage: StorageGateway = Depends(get_storage)
):
    return await update_route(storage, route_id, route_data)


@router.delete("/{route_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_route_info(route_id: str, storage: StorageGateway = Depends(get_storage)):
    await delete_route(storage, route_id)
    return None
