"""Storage abstraction layer for the hosted (Supabase) and SQL backends."""
import logging

from ..config import CRMConfig
from .backend import RecordNotFound, RecordStore, StoreError
from .sql import SQLStore
from .supabase import SupabaseStore

logger = logging.getLogger(__name__)


def create_store(config: CRMConfig) -> RecordStore:
    """Factory: creates the configured storage backend."""
    store_cfg = config.store
    if store_cfg.backend == "supabase":
        logger.info(f"Using Supabase store at {store_cfg.url or '<unset>'}")
        return SupabaseStore(store_cfg.url, store_cfg.api_key, timeout_s=store_cfg.timeout_s)
    logger.info(f"Using SQL store at {store_cfg.database_url}")
    return SQLStore(url=store_cfg.database_url)


__all__ = [
    'RecordStore', 'StoreError', 'RecordNotFound',
    'SQLStore', 'SupabaseStore', 'create_store',
]
