class PermissionGranterError(Exception):
    """Base class for every failure surfaced to the operator."""


class ConfigurationError(PermissionGranterError):
    pass


class AuthenticationError(PermissionGranterError):
    """Could not connect to the directory. Fatal before any prompt."""


class InvalidIdentifierError(PermissionGranterError, ValueError):
    pass


class UnknownProfileError(PermissionGranterError, KeyError):
    def __str__(self):
        return str(self.args[0]) if self.args else ""


class ApplicationNotFoundError(PermissionGranterError):
    pass


class PermissionUpdateError(PermissionGranterError):
    """Reading or replacing requiredResourceAccess for one resource failed."""

    def __init__(self, resource_app_id: str, message: str):
        super().__init__(f"{resource_app_id}: {message}")
        self.resource_app_id = resource_app_id


class ConcurrentModificationError(PermissionUpdateError):
    """requiredResourceAccess changed between the read and the replace."""


class ConsentGrantError(PermissionGranterError):
    def __init__(self, permission_id: str, message: str):
        super().__init__(f"{permission_id}: {message}")
        self.permission_id = permission_id
