import re

from .errors import InvalidIdentifierError

_HEX = "[0-9a-fA-F]"
_DASHED = f"{_HEX}{{8}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{4}}-{_HEX}{{12}}"

# Accepted forms: 32 digits, dashed, {dashed}, (dashed)
GUID_PATTERN = re.compile(
    rf"^(?:{_HEX}{{32}}|{_DASHED}|\{{{_DASHED}\}}|\({_DASHED}\))$"
)


def is_valid_guid(candidate) -> bool:
    """True if ``candidate`` is GUID text. Surrounding whitespace is ignored."""
    if not isinstance(candidate, str):
        return False
    return GUID_PATTERN.match(candidate.strip()) is not None


def normalize_guid(candidate: str) -> str:
    """Return the lowercase 8-4-4-4-12 form of a valid GUID."""
    if not is_valid_guid(candidate):
        raise InvalidIdentifierError(f"'{candidate}' is not a valid GUID")
    digits = re.sub(r"[^0-9a-fA-F]", "", candidate).lower()
    return "-".join(
        (digits[:8], digits[8:12], digits[12:16], digits[16:20], digits[20:])
    )
