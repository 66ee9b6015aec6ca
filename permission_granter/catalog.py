"""
Static permission catalog.

Every identifier below is assigned by Microsoft (resource appIds, appRole ids
and oauth2PermissionScope ids) and has to be sent to Graph verbatim.
"""
from collections import OrderedDict
from typing import Dict, Iterable, List

from .errors import UnknownProfileError
from .models import CatalogProfile, PermissionEntry, PermissionType

ROLE = PermissionType.ROLE
SCOPE = PermissionType.SCOPE

# --------------------------------------------------------
# Resource applications
# --------------------------------------------------------
MICROSOFT_GRAPH = "00000003-0000-0000-c000-000000000000"
SHAREPOINT_ONLINE = "00000003-0000-0ff1-ce00-000000000000"
MIP_SYNC_SERVICE = "870c4f2e-85b6-4d43-bdda-6ed9a579b725"
OFFICE_365_MANAGEMENT = "c5393580-f805-4401-95e8-94b7a6ef2fc2"

RESOURCE_NAMES = {
    MICROSOFT_GRAPH: "Microsoft Graph",
    SHAREPOINT_ONLINE: "Office 365 SharePoint Online",
    MIP_SYNC_SERVICE: "Microsoft Information Protection Sync Service",
    OFFICE_365_MANAGEMENT: "Office 365 Management APIs",
}

# --------------------------------------------------------
# Microsoft Graph
# --------------------------------------------------------
GRAPH_APPLICATION_PERMISSIONS = (
    PermissionEntry(MICROSOFT_GRAPH, "75359482-378d-4052-8f01-80520e7db3cd", ROLE, "Files.ReadWrite.All"),
    PermissionEntry(MICROSOFT_GRAPH, "df021288-bdef-4463-88db-98f22de89214", ROLE, "User.Read.All"),
    PermissionEntry(MICROSOFT_GRAPH, "332a536c-c7ef-4017-ab91-336970924f0d", ROLE, "Sites.Read.All"),
    PermissionEntry(MICROSOFT_GRAPH, "5b567255-7703-4780-807c-7be8301ae99b", ROLE, "Group.Read.All"),
    PermissionEntry(MICROSOFT_GRAPH, "7ab1d382-f21e-4acd-a863-ba3e13f7da61", ROLE, "Directory.Read.All"),
    PermissionEntry(MICROSOFT_GRAPH, "19da66cb-0fb0-4390-b071-ebc76a349482", ROLE, "InformationProtectionPolicy.Read.All"),
    PermissionEntry(MICROSOFT_GRAPH, "b0afded3-3588-46d8-8b3d-9842eff778da", ROLE, "AuditLog.Read.All"),
)

GRAPH_DELEGATED_PERMISSIONS = (
    PermissionEntry(MICROSOFT_GRAPH, "e1fe6dd8-ba31-4d61-89e7-88639da4683d", SCOPE, "User.Read"),
    PermissionEntry(MICROSOFT_GRAPH, "37f7f235-527c-4136-accd-4a02d197296e", SCOPE, "openid"),
    PermissionEntry(MICROSOFT_GRAPH, "14dad69e-099b-42c9-810b-d002981feec1", SCOPE, "profile"),
    PermissionEntry(MICROSOFT_GRAPH, "7427e0e9-2fba-42fe-b0c0-848c9e6a8182", SCOPE, "offline_access"),
    PermissionEntry(MICROSOFT_GRAPH, "863451e7-0667-486c-a5d6-d135439485f0", SCOPE, "Files.ReadWrite.All"),
    PermissionEntry(MICROSOFT_GRAPH, "205e70e5-aba6-4c52-a976-6d2d46c48043", SCOPE, "Sites.Read.All"),
)

# --------------------------------------------------------
# Office 365 SharePoint Online
# --------------------------------------------------------
SHAREPOINT_PERMISSIONS = (
    PermissionEntry(SHAREPOINT_ONLINE, "678536fe-1083-478a-9c59-b99265e6b0d3", ROLE, "Sites.FullControl.All"),
    PermissionEntry(SHAREPOINT_ONLINE, "fbcd29d2-fcca-4405-aded-518d457caae4", ROLE, "Sites.ReadWrite.All"),
    PermissionEntry(SHAREPOINT_ONLINE, "d13f72ca-a275-4b96-b789-48ebcc4da984", ROLE, "Sites.Read.All"),
    PermissionEntry(SHAREPOINT_ONLINE, "4e0d77b0-96ba-4398-af14-3baa780278f4", SCOPE, "AllSites.Read"),
)

# --------------------------------------------------------
# Microsoft Information Protection Sync Service
# --------------------------------------------------------
MIP_SYNC_PERMISSIONS = (
    PermissionEntry(MIP_SYNC_SERVICE, "8b2071cd-015a-4025-8052-1c0dba2d3f64", ROLE, "UnifiedPolicy.Tenant.Read"),
    PermissionEntry(MIP_SYNC_SERVICE, "19766c1b-905b-43af-8756-06526ab42875", SCOPE, "UnifiedPolicy.User.Read"),
)

# --------------------------------------------------------
# Office 365 Management APIs
# --------------------------------------------------------
OFFICE_365_MANAGEMENT_PERMISSIONS = (
    PermissionEntry(OFFICE_365_MANAGEMENT, "594c1fb6-4f81-4475-ae41-0c394909246c", ROLE, "ActivityFeed.Read"),
    PermissionEntry(OFFICE_365_MANAGEMENT, "4807a72c-ad38-4250-94c9-4eabfe26cd55", ROLE, "ActivityFeed.ReadDlp"),
    PermissionEntry(OFFICE_365_MANAGEMENT, "e2cea78f-e743-4d8f-a16a-75b629a038ae", ROLE, "ServiceHealth.Read"),
)

# --------------------------------------------------------
# Profiles
# --------------------------------------------------------
PROFILES: Dict[str, CatalogProfile] = OrderedDict(
    (p.name, p)
    for p in (
        CatalogProfile(
            name="graph",
            description="Microsoft Graph application permissions with admin consent",
            entries=GRAPH_APPLICATION_PERMISSIONS,
            grant_consent=True,
            multi_service=False,
        ),
        CatalogProfile(
            name="graph-delegated",
            description="Microsoft Graph delegated permissions only",
            entries=GRAPH_DELEGATED_PERMISSIONS,
            grant_consent=False,
            multi_service=False,
        ),
        CatalogProfile(
            name="full",
            description="Graph, SharePoint, MIP Sync and Office 365 Management APIs",
            entries=GRAPH_APPLICATION_PERMISSIONS
            + GRAPH_DELEGATED_PERMISSIONS
            + SHAREPOINT_PERMISSIONS
            + MIP_SYNC_PERMISSIONS
            + OFFICE_365_MANAGEMENT_PERMISSIONS,
            grant_consent=True,
            multi_service=True,
        ),
    )
)


def get_profile(name: str) -> CatalogProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise UnknownProfileError(
            f"Unknown profile '{name}' (choose from: {', '.join(PROFILES)})"
        ) from None


def group_by_resource(
    entries: Iterable[PermissionEntry],
) -> "OrderedDict[str, List[PermissionEntry]]":
    """Group entries by resource appId, keeping first-seen resource order."""
    grouped: "OrderedDict[str, List[PermissionEntry]]" = OrderedDict()
    for entry in entries:
        grouped.setdefault(entry.resource_app_id, []).append(entry)
    return grouped


def resource_name(resource_app_id: str) -> str:
    return RESOURCE_NAMES.get(resource_app_id, resource_app_id)
