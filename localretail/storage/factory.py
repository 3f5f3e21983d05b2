from localretail.core.config import Settings
from localretail.logger_config import logger
from localretail.storage.base import StorageGateway
from localretail.storage.local_storage import LocalStorage
from localretail.storage.sql_storage import SqlStorage


def build_storage(settings: Settings) -> StorageGateway:
    """Pick the backend once at startup: SQL when a database is configured, else the local store."""
    if settings.use_database:
        logger.info("Using SQL storage backend")
        return SqlStorage(
            settings.database_url,
            echo=settings.DB_ECHO,
            customer_id_start=settings.CUSTOMER_ID_START,
        )

    logger.info(f"No database configured, using local store at {settings.LOCAL_STORE_PATH}")
    return LocalStorage(settings.LOCAL_STORE_PATH, customer_id_start=settings.CUSTOMER_ID_START)
