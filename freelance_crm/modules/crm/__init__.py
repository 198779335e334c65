"""Client & project management."""

from .service import ClientDetail, CRMService, Snapshot, log_notifier, service_from_config

__all__ = ['ClientDetail', 'CRMService', 'Snapshot', 'log_notifier', 'service_from_config']
