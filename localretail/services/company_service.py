from localretail.logger_config import logger
from localretail.schemas.company import CompanySettings, CompanySettingsUpdate
from localretail.storage.base import StorageGateway


async def get_company_settings(storage: StorageGateway) -> CompanySettings:
    return await storage.get_company_settings()


async def save_company_settings(storage: StorageGateway, data: CompanySettingsUpdate) -> CompanySettings:
    company = CompanySettings(
        company_name=data.company_name,
        address=data.address,
        phone=data.phone,
        email=data.email or "",
    )
    saved = await storage.save_company_settings(company)
    logger.info(f"Company settings saved for '{saved.company_name}'")
    return saved
