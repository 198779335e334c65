"""Search & filter predicates for client and project lists.

A record is shown when it passes all three criteria:
  text:   case-insensitive substring in any searchable field
  status: projects only; "all" passes everything
  tags:   record tags intersect the selected tags (any one is enough)

Empty criteria always pass. Projects are filtered by their owning client's
tags and name, so the project predicates take that client as an argument.
"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Union

from ...common.models import Client, Project, normalize_tags


class StatusFilter(str, Enum):
    ALL = 'all'
    PENDING = 'pending'
    ONGOING = 'ongoing'
    COMPLETED = 'completed'


@dataclass(frozen=True)
class SearchFilter:
    """Current search box, status toggle and tag picker state."""
    query: str = ''
    status: StatusFilter = StatusFilter.ALL
    tags: FrozenSet[str] = field(default_factory=frozenset)

    def __post_init__(self):
        object.__setattr__(self, 'query', (self.query or '').strip().lower())
        object.__setattr__(self, 'status', StatusFilter(self.status or StatusFilter.ALL))
        object.__setattr__(self, 'tags', frozenset(normalize_tags(self.tags)))

    @property
    def is_active(self) -> bool:
        return bool(self.query) or self.status != StatusFilter.ALL or bool(self.tags)


def _contains(value: Optional[str], needle: str) -> bool:
    return value is not None and needle in value.lower()


def _text_match(fields: Iterable[Optional[str]], query: str) -> bool:
    if not query:
        return True
    return any(_contains(value, query) for value in fields)


def _tag_match(tags: Iterable[str], wanted: FrozenSet[str]) -> bool:
    if not wanted:
        return True
    return not wanted.isdisjoint(tags)


def matches_client(client: Client, search: SearchFilter) -> bool:
    """Clients ignore the status criterion."""
    return (
        _text_match((client.full_name, client.email, client.company_name), search.query)
        and _tag_match(client.tags, search.tags)
    )


def matches_project(
    project: Project,
    search: SearchFilter,
    client: Optional[Client] = None,
) -> bool:
    """`client` is the owning client; None when it is not in the snapshot."""
    client_name = client.full_name if client else None
    client_tags = client.tags if client else ()
    return (
        _text_match((project.title, project.description, client_name), search.query)
        and (search.status == StatusFilter.ALL or project.status.value == search.status.value)
        and _tag_match(client_tags, search.tags)
    )


def matches(
    record: Union[Client, Project],
    search: SearchFilter,
    clients_by_id: Optional[Dict[str, Client]] = None,
) -> bool:
    """Dispatch on record type."""
    if isinstance(record, Project):
        client = (clients_by_id or {}).get(record.client_id)
        return matches_project(record, search, client)
    return matches_client(record, search)


def filter_clients(clients: Sequence[Client], search: SearchFilter) -> List[Client]:
    return [c for c in clients if matches_client(c, search)]


def filter_projects(
    projects: Sequence[Project],
    search: SearchFilter,
    clients: Sequence[Client] = (),
) -> List[Project]:
    by_id = {c.id: c for c in clients}
    return [p for p in projects if matches_project(p, search, by_id.get(p.client_id))]


def available_tags(clients: Iterable[Client]) -> List[str]:
    """Distinct tags across clients, first-seen order (tag picker options)."""
    seen: List[str] = []
    for client in clients:
        for tag in client.tags:
            if tag not in seen:
                seen.append(tag)
    return seen
