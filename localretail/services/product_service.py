from typing import List

from localretail.core.exceptions import NotFoundError
from localretail.logger_config import logger
from localretail.schemas.product import Product, ProductCreate, ProductUpdate
from localretail.storage.base import StorageGateway
from localretail.utils.identifiers import generate_custom_id


async def get_product_by_id(storage: StorageGateway, product_id: str) -> Product:
    product = await storage.get_product(product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


async def get_all_products(storage: StorageGateway) -> List[Product]:
    return await storage.list_products()


async def create_product(storage: StorageGateway, data: ProductCreate) -> Product:
    product = Product(
        id=generate_custom_id("PRD"),
        name=data.name,
        default_price=data.default_price,
    )
    await storage.create_product(product)
    logger.info(f"Product created: {product.id} ({product.name}) at {product.default_price}")
    return product


async def update_product(storage: StorageGateway, product_id: str, data: ProductUpdate) -> Product:
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    if changes:
        await storage.update_product(product_id, changes)
        logger.info(f"Product updated: {product_id}")
    return await get_product_by_id(storage, product_id)


async def delete_product(storage: StorageGateway, product_id: str) -> None:
    await storage.delete_product(product_id)
    logger.info(f"Product deleted: {product_id}")
