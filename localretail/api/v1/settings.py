from fastapi import APIRouter, Depends
from localretail.core.dependencies import get_storage
from localretail.storage.base import StorageGateway
from localretail.services.company_service import get_company_settings, save_company_settings
from localretail.schemas.company import CompanySettings, CompanySettingsUpdate

router = APIRouter()


@router.get("/company", response_model=CompanySettings)
async def get_company(storage: StorageGateway = Depends(get_storage)):
    return await get_company_settings(storage)


@router.put("/company", response_model=CompanySettings)
async def update_company(company_data: CompanySettingsUpdate, storage: StorageGateway = Depends(get_storage)):
    return await save_company_settings(storage, company_data)
