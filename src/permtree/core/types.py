"""
Core type definitions for permtree.

Two families of models live here:

- Raw forest nodes, as returned by the backend. They form a tagged union
  discriminated by ``type`` ('system' | 'menu' | 'resource').
- Indexed nodes (SystemNode, MenuNode, ResourceNode) produced by the tree
  transformer and consumed by the selection engine.
"""

from enum import StrEnum
from typing import Annotated, Any, List, Literal, Optional, Set, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    field_validator,
    model_validator,
)


class NodeKind(StrEnum):
    """Discriminant carried by every node of the permission forest."""
    SYSTEM = "system"
    MENU = "menu"
    RESOURCE = "resource"


class ResourceType(StrEnum):
    """Kind of permission a resource leaf grants."""
    API = "API"
    BUTTON = "BUTTON"


class ToggleAction(StrEnum):
    """Operator actions that can be replayed against a session."""
    SELECT_SYSTEM = "select-system"
    DESELECT_SYSTEM = "deselect-system"
    SELECT_MENU = "select-menu"
    DESELECT_MENU = "deselect-menu"
    SELECT_RESOURCE = "select-resource"
    DESELECT_RESOURCE = "deselect-resource"


# --- Raw forest nodes ---


class _TreeNodeBase(BaseModel):
    id: str
    name: str = ""
    selected: Optional[bool] = None
    # Children stay raw so that one malformed child never rejects its parent
    children: List[Any] = Field(default_factory=list)

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        coerce_numbers_to_str=True,
    )

    @field_validator("children", mode="before")
    @classmethod
    def _none_children(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("name", mode="before")
    @classmethod
    def _none_name(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_selected(self) -> bool:
        return bool(self.selected)


class SystemTreeNode(_TreeNodeBase):
    type: Literal["system"]
    system_id: Optional[str] = Field(default=None, alias="systemId")

    @model_validator(mode="after")
    def _default_system_id(self) -> "SystemTreeNode":
        if not self.system_id:
            self.system_id = self.id
        return self


class MenuTreeNode(_TreeNodeBase):
    type: Literal["menu"]
    menu_id: Optional[str] = Field(default=None, alias="menuId")

    @model_validator(mode="after")
    def _default_menu_id(self) -> "MenuTreeNode":
        if not self.menu_id:
            self.menu_id = self.id
        return self


class ResourceTreeNode(_TreeNodeBase):
    type: Literal["resource"]
    resource_id: Optional[str] = Field(default=None, alias="resourceId")
    resource_type: ResourceType = Field(default=ResourceType.BUTTON, alias="resourceType")
    code: str = ""

    @field_validator("resource_type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if value is None or value == "":
            return ResourceType.BUTTON
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("code", mode="before")
    @classmethod
    def _none_code(cls, value: Any) -> Any:
        return "" if value is None else value

    @model_validator(mode="after")
    def _default_resource_id(self) -> "ResourceTreeNode":
        if not self.resource_id:
            self.resource_id = self.id
        return self


PermissionTreeNode = Annotated[
    Union[SystemTreeNode, MenuTreeNode, ResourceTreeNode],
    Field(discriminator="type"),
]

TREE_NODE_ADAPTER: TypeAdapter = TypeAdapter(PermissionTreeNode)


# --- Indexed nodes ---


class ResourceNode(BaseModel):
    """
    Leaf permission unit (one API endpoint or one UI button).

    Always belongs to exactly one menu.
    """
    id: str
    name: str = ""
    resource_id: str
    menu_id: str
    type: ResourceType = ResourceType.BUTTON
    code: str = ""


class MenuNode(BaseModel):
    """
    Navigable menu entry.

    ``resources`` starts empty until the menu's resources are lazily loaded,
    unless the forest already carried resource leaves. ``children`` holds the
    same node objects that are indexed in the menu map.
    """
    id: str
    name: str = ""
    menu_id: str
    system_id: str
    parent_menu_id: Optional[str] = None
    children: List["MenuNode"] = Field(default_factory=list)
    resources: List[ResourceNode] = Field(default_factory=list)
    level: int = 0

    @property
    def has_children(self) -> bool:
        return bool(self.children)

    def resource_ids(self) -> List[str]:
        return [resource.id for resource in self.resources]


class SystemNode(BaseModel):
    """Top-level application module owning a list of root menus."""
    id: str
    name: str = ""
    system_id: str
    menus: List[MenuNode] = Field(default_factory=list)


# --- Selection snapshots ---


class SelectedIds(BaseModel):
    """Ids flagged ``selected`` by the backend in a permission forest."""
    menu_ids: Set[str] = Field(default_factory=set)
    resource_ids: Set[str] = Field(default_factory=set)


class PermissionIds(BaseModel):
    """
    The (systemIds, menuIds, resourceIds) triple.

    Used both for the role's already-granted ids returned by the backend and
    for the payload persisted at save time.
    """
    system_ids: List[str] = Field(default_factory=list, alias="systemIds")
    menu_ids: List[str] = Field(default_factory=list, alias="menuIds")
    resource_ids: List[str] = Field(default_factory=list, alias="resourceIds")

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class PermissionStats(BaseModel):
    """Aggregate counts shown in the editor footer."""
    selected_system_count: int = 0
    selected_menu_count: int = 0
    selected_resource_count: int = 0
    total_system_count: int = 0
    total_menu_count: int = 0
    total_resource_count: int = 0
