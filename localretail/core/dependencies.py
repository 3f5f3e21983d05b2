from fastapi import Depends, Request

from localretail.core.config import settings
from localretail.services.sheet_close_service import SheetCloseService
from localretail.storage.base import StorageGateway


def get_storage(request: Request) -> StorageGateway:
    """Dependency to get the storage gateway built at startup."""
    return request.app.state.storage


def get_sheet_close_service(storage: StorageGateway = Depends(get_storage)) -> SheetCloseService:
    return SheetCloseService(storage, tolerance=settings.AMOUNT_TOLERANCE)
