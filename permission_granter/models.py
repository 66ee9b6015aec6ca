from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class PermissionType(str, Enum):
    ROLE = "Role"  # application permission
    SCOPE = "Scope"  # delegated permission


@dataclass(frozen=True)
class PermissionEntry:
    resource_app_id: str
    permission_id: str
    permission_type: PermissionType
    display_name: str

    def to_resource_access(self) -> "ResourceAccess":
        return ResourceAccess(id=self.permission_id, type=self.permission_type.value)


@dataclass(frozen=True)
class ResourceAccess:
    id: str
    type: str

    @classmethod
    def from_graph(cls, item: Dict[str, Any]) -> "ResourceAccess":
        return cls(id=item.get("id"), type=item.get("type"))

    def to_graph(self) -> Dict[str, str]:
        return {"id": self.id, "type": self.type}


@dataclass
class ApplicationRegistration:
    object_id: str
    app_id: str
    display_name: str
    service_principal_id: Optional[str] = None
    required_resource_access: List[Dict[str, Any]] = field(default_factory=list)


@dataclass(frozen=True)
class CatalogProfile:
    name: str
    description: str
    entries: Tuple[PermissionEntry, ...]
    grant_consent: bool
    multi_service: bool


@dataclass
class RunResult:
    app_id: Optional[str] = None
    display_name: Optional[str] = None
    updated_resources: List[str] = field(default_factory=list)
    unchanged_resources: List[str] = field(default_factory=list)
    failed_resources: Dict[str, str] = field(default_factory=dict)
    granted_roles: List[str] = field(default_factory=list)
    skipped_roles: List[str] = field(default_factory=list)
    failed_roles: Dict[str, str] = field(default_factory=dict)
    cancelled: bool = False
    aborted: bool = False
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return not self.aborted
