from fastapi import APIRouter, Depends, status
from localretail.core.dependencies import get_storage
from localretail.storage.base import StorageGateway
from localretail.services.product_service import (
    get_product_by_id,
    get_all_products,
    create_product,
    update_product,
    delete_product
)
from localretail.schemas.product import Product, ProductCreate, ProductUpdate, ProductListResponse

router = APIRouter()


@router.get("", response_model=ProductListResponse)
async def get_products(storage: StorageGateway = Depends(get_storage)):
    products = await get_all_products(storage)
    return ProductListResponse(total=len(products), products=products)


@router.get("/{product_id}", response_model=Product)
async def get_product(product_id: str, storage: StorageGateway = Depends(get_storage)):
    return await get_product_by_id(storage, product_id)


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
async def create_product_route(product_data: ProductCreate, storage: StorageGateway = Depends(get_storage)):
    return await create_product(storage, product_data)


@router.put("/{product_id}", response_model=Product)
async def update_product_route(
    product_id: str,
    product_data: ProductUpdate,
    storage: StorageGateway = Depends(get_storage)
):
    return await update_product(storage, product_id, product_data)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_product_route(product_id: str, storage: StorageGateway = Depends(get_storage)):
    await delete_product(storage, product_id)
    return None
