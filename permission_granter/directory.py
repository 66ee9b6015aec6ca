# directory.py
import logging
from typing import Any, Dict, List, Optional

from .config import GRAPH_BASE
from .errors import ApplicationNotFoundError
from .graph_client import GraphAPIError, GraphClient
from .models import ApplicationRegistration

logger = logging.getLogger(__name__)


class Directory:
    """
    The identity-directory operations the engine needs.

    Responsibilities:
    - appId → application registration + its service principal
    - read / replace an application's requiredResourceAccess
    - list / create app-role assignments on a service principal
    - resource appId → tenant servicePrincipal objectId (cached)
    """

    def __init__(self, client: GraphClient, graph_base: str = GRAPH_BASE):
        self.client = client
        self.graph_base = graph_base

        # Cache: resource appId -> servicePrincipal objectId
        self._resource_sp_cache: Dict[str, Optional[str]] = {}

    # --------------------------------------------------------
    # Application + service principal lookup
    # --------------------------------------------------------
    def find_service_principal_id(self, app_id: str) -> Optional[str]:
        if app_id in self._resource_sp_cache:
            return self._resource_sp_cache[app_id]

        resp = self.client.get(
            f"{self.graph_base}/servicePrincipals",
            params={"$filter": f"appId eq '{app_id}'", "$select": "id,appId"},
        )
        sp = (resp.get("value") or [None])[0]
        sp_id = sp.get("id") if sp else None
        self._resource_sp_cache[app_id] = sp_id
        return sp_id

    def resolve_application(self, app_id: str) -> ApplicationRegistration:
        resp = self.client.get(
            f"{self.graph_base}/applications",
            params={
                "$filter": f"appId eq '{app_id}'",
                "$select": "id,appId,displayName,requiredResourceAccess",
            },
        )
        app = (resp.get("value") or [None])[0]
        if not app:
            raise ApplicationNotFoundError(
                f"No application registration with appId {app_id} in this tenant"
            )

        try:
            sp_id = self.find_service_principal_id(app_id)
        except GraphAPIError as e:
            logger.warning("Service principal lookup for %s failed: %s", app_id, e)
            sp_id = None
        if not sp_id:
            logger.warning(
                "Application %s has no service principal; consent cannot be granted",
                app_id,
            )

        return ApplicationRegistration(
            object_id=app["id"],
            app_id=app.get("appId", app_id),
            display_name=app.get("displayName", "") or "",
            service_principal_id=sp_id,
            required_resource_access=app.get("requiredResourceAccess") or [],
        )

    # --------------------------------------------------------
    # requiredResourceAccess
    # --------------------------------------------------------
    def get_required_resource_access(self, object_id: str) -> List[Dict[str, Any]]:
        app = self.client.get(
            f"{self.graph_base}/applications/{object_id}",
            params={"$select": "requiredResourceAccess"},
        )
        return app.get("requiredResourceAccess") or []

    def replace_required_resource_access(
        self, object_id: str, required_resource_access: List[Dict[str, Any]]
    ) -> None:
        self.client.patch(
            f"{self.graph_base}/applications/{object_id}",
            {"requiredResourceAccess": required_resource_access},
        )

    # --------------------------------------------------------
    # App-role assignments
    # --------------------------------------------------------
    def list_app_role_assignments(self, sp_id: str) -> List[Dict[str, Any]]:
        return self.client.paged_get(
            f"{self.graph_base}/servicePrincipals/{sp_id}/appRoleAssignments"
        )

    def grant_app_role(
        self, principal_sp_id: str, resource_sp_id: str, app_role_id: str
    ) -> Dict[str, Any]:
        return self.client.post(
            f"{self.graph_base}/servicePrincipals/{principal_sp_id}/appRoleAssignments",
            {
                "principalId": principal_sp_id,
                "resourceId": resource_sp_id,
                "appRoleId": app_role_id,
            },
        )
