"""
Resource Loaders.

A resource loader is any async callable ``loader(menu_id)`` returning the
resource leaves of one menu. The cascade selector awaits it the first time
a menu's resources are needed. A loader may instead populate the state in
place (via ``PermissionState.attach_resources``) and return None.

This module provides the adapters between raw backend resource records
(``{id, systemId, menuId, code, name, type, ...}``) and ResourceNode.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .types import ResourceNode, ResourceType

logger = logging.getLogger(__name__)

ResourceLoader = Callable[[str], Awaitable[Optional[List[ResourceNode]]]]
RecordFetcher = Callable[[str], Awaitable[Iterable[Any]]]


class ResourceRecord(BaseModel):
    """Raw resource row as returned by the resource listing endpoint."""
    id: str
    name: str = ""
    code: str = ""
    type: Optional[str] = None
    menu_id: Optional[str] = Field(default=None, alias="menuId")
    system_id: Optional[str] = Field(default=None, alias="systemId")
    status: bool = True

    model_config = ConfigDict(populate_by_name=True, extra="ignore", coerce_numbers_to_str=True)

    @field_validator("name", "code", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value


def resource_from_record(
    record: Mapping[str, Any] | ResourceRecord,
    menu_id: str,
    default_type: ResourceType | str = ResourceType.BUTTON,
) -> ResourceNode:
    """
    Adapt one raw backend record into a ResourceNode owned by ``menu_id``.

    Unknown or missing ``type`` values fall back to ``default_type``.

    Raises:
        ValidationError: If the record lacks an ``id``.
    """
    row = record if isinstance(record, ResourceRecord) else ResourceRecord.model_validate(record)

    raw_type = (row.type or "").upper()
    resource_type = ResourceType(raw_type) if raw_type in ResourceType.__members__ else ResourceType(default_type)

    return ResourceNode(
        id=row.id,
        name=row.name,
        resource_id=row.id,
        menu_id=menu_id,
        type=resource_type,
        code=row.code,
    )


def resources_from_records(
    records: Iterable[Any],
    menu_id: str,
    default_type: ResourceType | str = ResourceType.BUTTON,
) -> List[ResourceNode]:
    """Adapt a batch of raw records, skipping malformed rows."""
    resources = []
    for record in records:
        if not isinstance(record, (Mapping, ResourceRecord)):
            logger.warning("Skipping non-object resource record for menu %s: %r", menu_id, record)
            continue
        try:
            resources.append(resource_from_record(record, menu_id, default_type))
        except ValidationError as e:
            logger.warning(
                "Skipping malformed resource record for menu %s (%d validation errors)",
                menu_id,
                e.error_count(),
            )
    return resources


class StaticResourceLoader:
    """
    Loader backed by an in-memory mapping of menu id -> raw records.

    Used for fixtures, the demo data and the CLI's ``--resources`` file.
    Every invocation is recorded in ``calls``.
    """

    def __init__(
        self,
        records_by_menu: Mapping[str, Iterable[Any]] | None = None,
        default_type: ResourceType | str = ResourceType.BUTTON,
    ):
        self._records: Dict[str, List[Any]] = {
            str(menu_id): list(records) for menu_id, records in (records_by_menu or {}).items()
        }
        self._default_type = default_type
        self.calls: List[str] = []

    async def __call__(self, menu_id: str) -> List[ResourceNode]:
        self.calls.append(menu_id)
        return resources_from_records(self._records.get(menu_id, []), menu_id, self._default_type)

    @property
    def call_count(self) -> int:
        return len(self.calls)


class RecordResourceLoader:
    """
    Adapts an async fetch of raw backend records into a resource loader.

    ``fetch(menu_id)`` is whatever transport the host uses (HTTP client,
    RPC, database query); its exceptions propagate unchanged.
    """

    def __init__(self, fetch: RecordFetcher, default_type: ResourceType | str = ResourceType.BUTTON):
        self._fetch = fetch
        self._default_type = default_type

    async def __call__(self, menu_id: str) -> List[ResourceNode]:
        records = await self._fetch(menu_id)
        resources = resources_from_records(records or [], menu_id, self._default_type)
        logger.debug("Fetched %d resources for menu %s", len(resources), menu_id)
        return resources
