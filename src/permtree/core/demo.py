"""
Demo Manager - Scaffolds a sample permission editing workspace.

This module writes a small but complete set of documents that exercises
every part of the cascade: three systems, nested menus, resources that
are only available through the lazy loader, resources already present in
the forest, and a role with some permissions already granted.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def _menu(menu_id: str, name: str, children: List[Dict[str, Any]] | None = None) -> Dict[str, Any]:
    return {
        "type": "menu",
        "id": menu_id,
        "menuId": menu_id,
        "name": name,
        "selected": False,
        "children": children or [],
    }


def _resource(resource_id: str, name: str, code: str, resource_type: str, menu_id: str) -> Dict[str, Any]:
    return {
        "id": resource_id,
        "menuId": menu_id,
        "code": code,
        "name": name,
        "type": resource_type,
        "status": True,
    }


class DemoManager:
    """
    Manages the creation of the demo workspace.
    """

    FOREST: List[Dict[str, Any]] = [
        {
            "type": "system",
            "id": "sys-001",
            "systemId": "sys-001",
            "name": "System Management",
            "selected": False,
            "children": [
                _menu("menu-001", "System Config", [
                    _menu("menu-002", "Basic Config"),
                    _menu("menu-003", "Advanced Config"),
                ]),
                _menu("menu-004", "Role Management"),
            ],
        },
        {
            "type": "system",
            "id": "sys-002",
            "systemId": "sys-002",
            "name": "User Management",
            "selected": False,
            "children": [
                _menu("menu-005", "User List", [
                    _menu("menu-006", "Active Users"),
                ]),
                _menu("menu-007", "User Profile"),
            ],
        },
        {
            "type": "system",
            "id": "sys-003",
            "systemId": "sys-003",
            "name": "Order Management",
            "selected": False,
            "children": [
                {
                    **_menu("menu-008", "Order List"),
                    # Already expanded by the backend: no lazy load needed
                    "children": [
                        {"type": "resource", "id": "res-015", "resourceId": "res-015", "name": "View Orders",
                         "resourceType": "BUTTON", "code": "order:view", "selected": False},
                        {"type": "resource", "id": "res-016", "resourceId": "res-016", "name": "Cancel Order",
                         "resourceType": "BUTTON", "code": "order:cancel", "selected": False},
                        {"type": "resource", "id": "res-017", "resourceId": "res-017", "name": "/api/order/list",
                         "resourceType": "API", "code": "api:order:list", "selected": False},
                    ],
                },
            ],
        },
    ]

    RESOURCES: Dict[str, List[Dict[str, Any]]] = {
        "menu-002": [
            _resource("res-001", "View Basic Config", "system:config:basic:view", "BUTTON", "menu-002"),
            _resource("res-002", "Edit Basic Config", "system:config:basic:edit", "BUTTON", "menu-002"),
            _resource("res-003", "/api/system/config/basic", "api:system:config:basic:get", "API", "menu-002"),
        ],
        "menu-003": [
            _resource("res-004", "View Advanced Config", "system:config:advanced:view", "BUTTON", "menu-003"),
            _resource("res-005", "/api/system/config/advanced/update",
                      "api:system:config:advanced:update", "API", "menu-003"),
        ],
        "menu-004": [
            _resource("res-006", "Add Role", "role:add", "BUTTON", "menu-004"),
            _resource("res-007", "Edit Role", "role:edit", "BUTTON", "menu-004"),
            _resource("res-008", "Delete Role", "role:delete", "BUTTON", "menu-004"),
            _resource("res-009", "/api/role/list", "api:role:list", "API", "menu-004"),
        ],
        "menu-005": [
            _resource("res-010", "Add User", "user:add", "BUTTON", "menu-005"),
            _resource("res-011", "Edit User", "user:edit", "BUTTON", "menu-005"),
            _resource("res-012", "/api/user/list", "api:user:list", "API", "menu-005"),
        ],
        "menu-006": [
            _resource("res-013", "View Active Users", "user:active:view", "BUTTON", "menu-006"),
        ],
        "menu-007": [
            _resource("res-014", "Edit User Profile", "user:profile:edit", "BUTTON", "menu-007"),
        ],
    }

    ROLE: Dict[str, List[str]] = {
        "systemIds": ["sys-001", "sys-002"],
        "menuIds": ["menu-001", "menu-002", "menu-004", "menu-005"],
        "resourceIds": ["res-001", "res-002", "res-006", "res-007", "res-010"],
    }

    FILES = {
        "forest.json": FOREST,
        "resources.json": RESOURCES,
        "role.json": ROLE,
    }

    def __init__(self, root_dir: Path):
        self.root_dir = root_dir

    def provision(self, dirname: str = "permtree-demo") -> Path:
        """
        Create the demo workspace and return its path.

        Existing demo files are overwritten.
        """
        demo_dir = self.root_dir / dirname
        demo_dir.mkdir(parents=True, exist_ok=True)

        for filename, content in self.FILES.items():
            path = demo_dir / filename
            path.write_text(json.dumps(content, indent=2, ensure_ascii=False), encoding="utf-8")
            logger.debug("Wrote demo document %s", path)

        return demo_dir
