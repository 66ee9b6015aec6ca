import os
import dotenv

dotenv.load_dotenv()

TENANT_ID = os.getenv("AZ_TENANT_ID")
CLIENT_ID = os.getenv("AZ_CLIENT_ID")
CLIENT_SECRET = os.getenv("AZ_CLIENT_SECRET")

AUTHORITY = f"https://login.microsoftonline.com/{TENANT_ID or 'organizations'}"

GRAPH_BASE = os.getenv("GRAPH_BASE", "https://graph.microsoft.com/v1.0")
GRAPH_TIMEOUT = int(os.getenv("GRAPH_TIMEOUT", "60"))

# App-only token for the confidential client
GRAPH_DEFAULT_SCOPE = ["https://graph.microsoft.com/.default"]

# Delegated scopes requested from the operator in the device code flow
OPERATOR_SCOPES = [
    "Application.ReadWrite.All",
    "AppRoleAssignment.ReadWrite.All",
]

DEFAULT_PROFILE = os.getenv("PERMISSION_PROFILE", "graph")
