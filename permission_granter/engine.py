import logging
from enum import Enum
from typing import Callable, List, Optional, Set

from .catalog import group_by_resource, resource_name
from .directory import Directory
from .errors import (
    ApplicationNotFoundError,
    ConcurrentModificationError,
    ConsentGrantError,
    PermissionUpdateError,
)
from .graph_client import GraphAPIError
from .merge import apply_resource_access
from .models import (
    ApplicationRegistration,
    CatalogProfile,
    PermissionEntry,
    PermissionType,
    RunResult,
)
from .prompts import ask_app_id, confirm
from .validation import is_valid_guid, normalize_guid

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    CONNECTED = "connected"
    IDENTIFIER_CAPTURED = "identifier_captured"
    APPLICATION_RESOLVED = "application_resolved"
    PERMISSIONS_MERGED = "permissions_merged"
    CONSENT_GRANTED = "consent_granted"
    DONE = "done"


class PermissionEngine:
    """
    Merges a catalog profile into an application's requiredResourceAccess and,
    when enabled, grants admin consent for its application permissions.

    The directory handle is injected already connected, so a run starts in
    CONNECTED. Any fatal failure ends the run in DONE with ``aborted`` set.
    """

    def __init__(
        self,
        directory: Directory,
        profile: CatalogProfile,
        grant_consent: Optional[bool] = None,
        ask_identifier: Callable[[], str] = ask_app_id,
        confirm_fn: Callable[[str], bool] = confirm,
    ):
        self.directory = directory
        self.profile = profile
        self.grant_consent = (
            profile.grant_consent if grant_consent is None else grant_consent
        )
        self.ask_identifier = ask_identifier
        self.confirm_fn = confirm_fn
        self.state = RunState.CONNECTED

    def _transition(self, state: RunState):
        logger.debug("State %s -> %s", self.state.value, state.value)
        self.state = state

    # --------------------------------------------------------
    # Run
    # --------------------------------------------------------
    def run(self, app_id: Optional[str] = None, assume_yes: bool = False) -> RunResult:
        result = RunResult()

        if app_id:
            if not is_valid_guid(app_id):
                return self._abort(result, f"'{app_id}' is not a valid GUID")
            app_id = normalize_guid(app_id)
        else:
            try:
                app_id = self.ask_identifier()
            except (EOFError, KeyboardInterrupt):
                return self._cancel(result)
        result.app_id = app_id
        self._transition(RunState.IDENTIFIER_CAPTURED)

        try:
            app = self.directory.resolve_application(app_id)
        except (ApplicationNotFoundError, GraphAPIError) as e:
            return self._abort(result, f"Could not resolve application {app_id}: {e}")
        result.display_name = app.display_name
        self._transition(RunState.APPLICATION_RESOLVED)
        logger.info("Resolved application '%s' (%s)", app.display_name, app.app_id)

        prompt = (
            f"Add {len(self.profile.entries)} permission(s) from profile "
            f"'{self.profile.name}' to '{app.display_name}'"
            f"{' and grant admin consent' if self.grant_consent else ''}?"
        )
        if not assume_yes:
            try:
                confirmed = self.confirm_fn(prompt)
            except (EOFError, KeyboardInterrupt):
                confirmed = False
            if not confirmed:
                return self._cancel(result)

        merged_resources = []
        grouped = group_by_resource(self.profile.entries)
        for resource_app_id, entries in grouped.items():
            name = resource_name(resource_app_id)
            try:
                changed = self.merge_and_update(app, resource_app_id, entries)
            except PermissionUpdateError as e:
                if not self.profile.multi_service:
                    return self._abort(result, f"Updating {name} failed: {e}")
                logger.error("Updating %s failed, continuing: %s", name, e)
                result.failed_resources[resource_app_id] = str(e)
                continue

            merged_resources.append(resource_app_id)
            if changed:
                result.updated_resources.append(resource_app_id)
            else:
                result.unchanged_resources.append(resource_app_id)
        self._transition(RunState.PERMISSIONS_MERGED)

        if self.grant_consent:
            roles = [
                entry
                for resource_app_id in merged_resources
                for entry in grouped[resource_app_id]
                if entry.permission_type == PermissionType.ROLE
            ]
            self.grant_admin_consent(app, roles, result)
            self._transition(RunState.CONSENT_GRANTED)

        self._transition(RunState.DONE)
        return result

    def _cancel(self, result: RunResult) -> RunResult:
        logger.info("Cancelled by operator, nothing was changed")
        result.cancelled = True
        self._transition(RunState.DONE)
        return result

    def _abort(self, result: RunResult, message: str) -> RunResult:
        logger.error(message)
        result.aborted = True
        result.error = message
        self._transition(RunState.DONE)
        return result

    # --------------------------------------------------------
    # Merge-and-update
    # --------------------------------------------------------
    def merge_and_update(
        self,
        app: ApplicationRegistration,
        resource_app_id: str,
        entries: List[PermissionEntry],
    ) -> bool:
        """
        Merge ``entries`` into the block for ``resource_app_id`` and write the
        list back. Returns False when nothing had to change.

        Raises PermissionUpdateError on any read/write failure and
        ConcurrentModificationError when the declaration changed between the
        read and the write.
        """
        new = [entry.to_resource_access() for entry in entries]
        try:
            current = self.directory.get_required_resource_access(app.object_id)
        except GraphAPIError as e:
            raise PermissionUpdateError(resource_app_id, f"read failed: {e}") from e

        updated = apply_resource_access(current, resource_app_id, new)
        if updated == current:
            logger.info("%s: already up to date", resource_name(resource_app_id))
            app.required_resource_access = current
            return False

        try:
            latest = self.directory.get_required_resource_access(app.object_id)
            if latest != current:
                raise ConcurrentModificationError(
                    resource_app_id,
                    "requiredResourceAccess was modified by someone else, re-run to merge again",
                )
            self.directory.replace_required_resource_access(app.object_id, updated)
        except GraphAPIError as e:
            raise PermissionUpdateError(resource_app_id, f"update failed: {e}") from e

        app.required_resource_access = updated
        logger.info(
            "%s: declared %d permission(s)", resource_name(resource_app_id), len(new)
        )
        return True

    # --------------------------------------------------------
    # Admin consent
    # --------------------------------------------------------
    def grant_admin_consent(
        self,
        app: ApplicationRegistration,
        roles: List[PermissionEntry],
        result: RunResult,
    ) -> None:
        """Create one app-role assignment per role; failures don't stop the loop."""
        if not roles:
            return
        if not app.service_principal_id:
            for entry in roles:
                self._record_grant_failure(
                    result,
                    ConsentGrantError(entry.permission_id, "application has no service principal"),
                    entry,
                )
            return

        existing = self._existing_assignments(app.service_principal_id)
        for entry in roles:
            try:
                granted = self.grant_role(app, entry, existing)
            except ConsentGrantError as e:
                self._record_grant_failure(result, e, entry)
                continue
            if granted:
                result.granted_roles.append(entry.permission_id)
            else:
                result.skipped_roles.append(entry.permission_id)

    def grant_role(
        self, app: ApplicationRegistration, entry: PermissionEntry, existing: Set[tuple]
    ) -> bool:
        try:
            resource_sp_id = self.directory.find_service_principal_id(entry.resource_app_id)
        except GraphAPIError as e:
            raise ConsentGrantError(entry.permission_id, f"resource lookup failed: {e}") from e
        if not resource_sp_id:
            raise ConsentGrantError(
                entry.permission_id,
                f"{resource_name(entry.resource_app_id)} has no service principal in this tenant",
            )

        if (resource_sp_id, entry.permission_id) in existing:
            logger.info("Consent for %s already granted", entry.display_name)
            return False

        try:
            self.directory.grant_app_role(
                app.service_principal_id, resource_sp_id, entry.permission_id
            )
        except GraphAPIError as e:
            raise ConsentGrantError(entry.permission_id, str(e)) from e
        logger.info("Granted admin consent for %s", entry.display_name)
        return True

    def _existing_assignments(self, sp_id: str) -> Set[tuple]:
        try:
            assignments = self.directory.list_app_role_assignments(sp_id)
        except GraphAPIError as e:
            logger.warning("Could not list existing app role assignments: %s", e)
            return set()
        return {(a.get("resourceId"), a.get("appRoleId")) for a in assignments}

    @staticmethod
    def _record_grant_failure(result: RunResult, error: ConsentGrantError, entry: PermissionEntry):
        logger.error("Granting consent for %s failed: %s", entry.display_name, error)
        result.failed_roles[entry.permission_id] = str(error)
