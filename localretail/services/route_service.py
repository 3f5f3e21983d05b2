from typing import List

from localretail.core.exceptions import NotFoundError
from localretail.logger_config import logger
from localretail.schemas.route import RouteInfo, RouteInfoCreate, RouteInfoUpdate
from localretail.storage.base import StorageGateway
from localretail.utils.identifiers import generate_route_id


async def get_route_by_id(storage: StorageGateway, route_id: str) -> RouteInfo:
    route = await storage.get_route(route_id)
    if route is None:
        raise NotFoundError("Route", route_id)
    return route


async def get_all_routes(storage: StorageGateway) -> List[RouteInfo]:
    return await storage.list_routes()


async def create_route(storage: StorageGateway, data: RouteInfoCreate) -> RouteInfo:
    """Save a route definition; the id defaults to R<epoch ms>."""
    route = RouteInfo(
        id=data.id or generate_route_id(),
        name=data.name,
        description=data.description,
        areas=data.areas,
        pincodes=data.pincodes,
        is_active=data.is_active,
    )
    if await storage.get_route(route.id) is not None:
        raise ValueError(f"Route {route.id} already exists")
    await storage.create_route(route)
    logger.info(f"Route created: {route.id} ({route.name})")
    return route


async def update_route(storage: StorageGateway, route_id: str, data: RouteInfoUpdate) -> RouteInfo:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if changes:
        await storage.update_route(route_id, changes)
        logger.info(f"Route updated: {route_id}")
    return await get_route_by_id(storage, route_id)


async def delete_route(storage: StorageGateway, route_id: str) -> None:
    await storage.delete_route(route_id)
    logger.info(f"Route deleted: {route_id}")
