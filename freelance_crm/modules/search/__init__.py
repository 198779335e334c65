"""Client/project search and filtering."""

from .filters import (
    SearchFilter,
    StatusFilter,
    available_tags,
    filter_clients,
    filter_projects,
    matches,
    matches_client,
    matches_project,
)

__all__ = [
    'SearchFilter', 'StatusFilter', 'available_tags', 'filter_clients',
    'filter_projects', 'matches', 'matches_client', 'matches_project',
]
