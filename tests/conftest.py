import copy
from unittest import mock

import pytest

from permission_granter.catalog import MICROSOFT_GRAPH
from permission_granter.directory import Directory
from permission_granter.errors import ApplicationNotFoundError
from permission_granter.graph_client import GraphAPIError, GraphClient
from permission_granter.models import ApplicationRegistration

APP_ID = "11111111-2222-3333-4444-555555555555"
APP_OBJECT_ID = "aaaaaaaa-0000-0000-0000-000000000001"
APP_SP_ID = "bbbbbbbb-0000-0000-0000-000000000001"
GRAPH_SP_ID = "cccccccc-0000-0000-0000-000000000001"


class FakeDirectory:
    """In-memory stand-in for Directory, recording every call."""

    def __init__(self):
        self.applications = {}  # appId -> registration dict
        self.service_principals = {MICROSOFT_GRAPH: GRAPH_SP_ID}
        self.assignments = {}  # sp id -> list of assignment dicts
        self.calls = []
        self.fail_update_for = set()  # resourceAppIds whose PATCH is rejected
        self.fail_grant_for = set()  # appRoleIds whose POST is rejected
        self.drop_connection_for = set()  # resourceAppIds / appRoleIds with no response
        self.external_edit = None  # callable(rra) run after the first read

    def add_application(self, app_id=APP_ID, required_resource_access=None, sp_id=APP_SP_ID):
        self.applications[app_id] = {
            "id": APP_OBJECT_ID,
            "appId": app_id,
            "displayName": "Contoso Sync",
            "requiredResourceAccess": required_resource_access or [],
        }
        if sp_id:
            self.service_principals[app_id] = sp_id
            self.assignments.setdefault(sp_id, [])

    def _by_object_id(self, object_id):
        for app in self.applications.values():
            if app["id"] == object_id:
                return app
        raise GraphAPIError(404, "Request_ResourceNotFound")

    @property
    def write_calls(self):
        return [c for c in self.calls if c[0] in ("replace", "grant")]

    def find_service_principal_id(self, app_id):
        self.calls.append(("find_sp", app_id))
        return self.service_principals.get(app_id)

    def resolve_application(self, app_id):
        self.calls.append(("resolve", app_id))
        app = self.applications.get(app_id)
        if not app:
            raise ApplicationNotFoundError(f"No application registration with appId {app_id}")
        return ApplicationRegistration(
            object_id=app["id"],
            app_id=app_id,
            display_name=app["displayName"],
            service_principal_id=self.service_principals.get(app_id),
            required_resource_access=copy.deepcopy(app["requiredResourceAccess"]),
        )

    def get_required_resource_access(self, object_id):
        self.calls.append(("read", object_id))
        app = self._by_object_id(object_id)
        snapshot = copy.deepcopy(app["requiredResourceAccess"])
        if self.external_edit:
            edit, self.external_edit = self.external_edit, None
            edit(app["requiredResourceAccess"])
        return snapshot

    def replace_required_resource_access(self, object_id, required_resource_access):
        self.calls.append(("replace", object_id))
        app = self._by_object_id(object_id)
        changed = {
            block["resourceAppId"]
            for block in required_resource_access
            if block not in app["requiredResourceAccess"]
        }
        if changed & self.fail_update_for:
            raise GraphAPIError(400, "Request_BadRequest")
        if changed & self.drop_connection_for:
            raise GraphAPIError(None, "ConnectionError: connection reset by peer")
        app["requiredResourceAccess"] = copy.deepcopy(required_resource_access)

    def list_app_role_assignments(self, sp_id):
        self.calls.append(("list_assignments", sp_id))
        return list(self.assignments.get(sp_id, []))

    def grant_app_role(self, principal_sp_id, resource_sp_id, app_role_id):
        self.calls.append(("grant", app_role_id))
        if app_role_id in self.fail_grant_for:
            raise GraphAPIError(403, "Authorization_RequestDenied")
        if app_role_id in self.drop_connection_for:
            raise GraphAPIError(None, "ReadTimeout: read timed out")
        assignment = {
            "principalId": principal_sp_id,
            "resourceId": resource_sp_id,
            "appRoleId": app_role_id,
        }
        self.assignments.setdefault(principal_sp_id, []).append(assignment)
        return assignment


@pytest.fixture
def directory():
    fake = FakeDirectory()
    fake.add_application()
    return fake


GRAPH_BASE = "https://graph.example/v1.0"


def graph_response(status=200, payload=None):
    resp = mock.Mock()
    resp.status_code = status
    resp.text = "" if payload is None else str(payload)
    resp.content = b"" if payload is None else b"{}"
    resp.json.return_value = payload
    return resp


class GraphSession:
    """
    requests.Session double answering the Graph calls Directory makes.

    ``fail`` is called with (method, path, json) before each request and may
    return an exception to raise instead of answering.
    """

    def __init__(self, service_principals=None):
        self.headers = {}
        self.required_resource_access = []
        self.service_principals = {APP_ID: APP_SP_ID, MICROSOFT_GRAPH: GRAPH_SP_ID}
        self.service_principals.update(service_principals or {})
        self.granted = []
        self.fail = lambda method, path, json: None

    def close(self):
        pass

    def request(self, method, url, timeout=None, params=None, json=None):
        path = url[len(GRAPH_BASE):]
        error = self.fail(method, path, json)
        if error:
            raise error

        if method == "GET" and path == "/applications":
            return graph_response(payload={"value": [{
                "id": APP_OBJECT_ID,
                "appId": APP_ID,
                "displayName": "Contoso Sync",
                "requiredResourceAccess": copy.deepcopy(self.required_resource_access),
            }]})
        if method == "GET" and path == "/servicePrincipals":
            app_id = params["$filter"].split("'")[1]
            sp_id = self.service_principals.get(app_id)
            return graph_response(payload={"value": [{"id": sp_id}] if sp_id else []})
        if method == "GET" and path == f"/applications/{APP_OBJECT_ID}":
            return graph_response(payload={
                "requiredResourceAccess": copy.deepcopy(self.required_resource_access)
            })
        if method == "PATCH":
            self.required_resource_access = copy.deepcopy(json["requiredResourceAccess"])
            return graph_response(204)
        if method == "GET" and path.endswith("/appRoleAssignments"):
            return graph_response(payload={"value": []})
        if method == "POST" and path.endswith("/appRoleAssignments"):
            self.granted.append(json["appRoleId"])
            return graph_response(201, json)
        return graph_response(404, {"error": {"code": "Request_ResourceNotFound"}})


@pytest.fixture
def graph_session():
    return GraphSession()


@pytest.fixture
def graph_directory(graph_session):
    return Directory(GraphClient("tok", session=graph_session), graph_base=GRAPH_BASE)
