"""Registry of orderable catalog collections.

Each supported collection is a member of the closed ``Collection`` enum and is
mapped at import time to an immutable ``CollectionDescriptor`` naming its
physical table and the columns the ordering engine reads and writes.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union


class UnknownCollectionError(LookupError):
    """Raised when a collection name does not resolve through the registry."""

    def __init__(self, name: object) -> None:
        super().__init__(f"unknown orderable collection: {name!r}")
        self.name = name


class Collection(str, Enum):
    DESTINATIONS = "destinations"
    EXCURSIONS = "excursions"
    RESTAURANTS = "restaurants"
    SERVICES = "services"
    SERVICE_CATEGORIES = "service_categories"
    SUPERMARKETS = "supermarkets"


@dataclass(frozen=True)
class CollectionDescriptor:
    name: str
    table: str
    position_field: str = "order_position"
    id_field: str = "id"
    created_field: str = "created_at"
    name_field: str = "name"


_REGISTRY: Dict[Collection, CollectionDescriptor] = {
    member: CollectionDescriptor(name=member.value, table=member.value)
    for member in Collection
}


def get_descriptor(collection: Union[Collection, str]) -> CollectionDescriptor:
    """Resolve a ``Collection`` member or its string value to its descriptor.

    Unknown names raise ``UnknownCollectionError``; callers passing free-form
    strings (e.g. URL segments) are expected to translate it themselves.
    """
    if isinstance(collection, Collection):
        return _REGISTRY[collection]
    try:
        member = Collection(str(collection))
    except ValueError:
        raise UnknownCollectionError(collection) from None
    return _REGISTRY[member]


def all_descriptors() -> list[CollectionDescriptor]:
    return [_REGISTRY[member] for member in Collection]


__all__ = [
    "Collection",
    "CollectionDescriptor",
    "UnknownCollectionError",
    "get_descriptor",
    "all_descriptors",
]
