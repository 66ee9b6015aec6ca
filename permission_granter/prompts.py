from typing import Callable

from .validation import is_valid_guid, normalize_guid


def ask_app_id(input_fn: Callable[[str], str] = input, print_fn=print) -> str:
    """Prompt until the operator enters a valid application (client) id."""
    while True:
        candidate = input_fn("Application (client) ID: ").strip()
        if is_valid_guid(candidate):
            return normalize_guid(candidate)
        print_fn(f"'{candidate}' is not a valid GUID, try again.")


def confirm(message: str, input_fn: Callable[[str], str] = input) -> bool:
    """Y/N question. Anything but y/yes means no, so does end of input."""
    try:
        answer = input_fn(f"{message} [Y/N]: ").strip().lower()
    except EOFError:
        return False
    return answer in ("y", "yes")
