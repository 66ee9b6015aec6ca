import argparse
import logging
import os
import sys

from . import config
from .auth import acquire_token
from .catalog import PROFILES, get_profile, resource_name
from .directory import Directory
from .engine import PermissionEngine
from .errors import (
    AuthenticationError,
    ConfigurationError,
    UnknownProfileError,
)
from .graph_client import GraphClient
from .models import RunResult
from .validation import is_valid_guid

EXIT_OK = 0
EXIT_ABORTED = 1
EXIT_USAGE = 2


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Add API permissions to an Entra ID application and grant admin consent."
    )
    parser.add_argument(
        "--app-id",
        dest="app_id",
        default=os.getenv("TARGET_APP_ID"),
        help="Application (client) ID to update; prompted for if omitted (env: TARGET_APP_ID).",
    )
    parser.add_argument(
        "--profile",
        default=config.DEFAULT_PROFILE,
        help=f"Permission profile: {', '.join(PROFILES)} (env: PERMISSION_PROFILE).",
    )
    parser.add_argument(
        "--no-consent",
        dest="grant_consent",
        action="store_false",
        default=None,
        help="Only declare the permissions, do not grant admin consent.",
    )
    parser.add_argument(
        "-y",
        "--yes",
        action="store_true",
        help="Do not ask for confirmation before changing the application.",
    )
    parser.add_argument(
        "--list-profiles",
        action="store_true",
        help="Show the available permission profiles and exit.",
    )
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def print_profiles():
    for profile in PROFILES.values():
        print(f"{profile.name}: {profile.description}")
        for entry in profile.entries:
            print(
                f"    {resource_name(entry.resource_app_id)}  "
                f"{entry.display_name} ({entry.permission_type.value}) {entry.permission_id}"
            )


def print_summary(result: RunResult):
    if result.cancelled:
        print("No changes made.")
        return
    if result.aborted:
        print(f"Aborted: {result.error}")
        return

    print(f"Application: {result.display_name} ({result.app_id})")
    for resource_app_id in result.updated_resources:
        print(f"  updated    {resource_name(resource_app_id)}")
    for resource_app_id in result.unchanged_resources:
        print(f"  unchanged  {resource_name(resource_app_id)}")
    for resource_app_id, error in result.failed_resources.items():
        print(f"  FAILED     {resource_name(resource_app_id)}: {error}")
    if result.granted_roles or result.skipped_roles or result.failed_roles:
        print(
            f"Admin consent: {len(result.granted_roles)} granted, "
            f"{len(result.skipped_roles)} already present, "
            f"{len(result.failed_roles)} failed"
        )


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(message)s",
    )

    if args.list_profiles:
        print_profiles()
        return EXIT_OK

    try:
        profile = get_profile(args.profile)
    except UnknownProfileError as e:
        logging.error("%s", e)
        return EXIT_USAGE

    if args.app_id and not is_valid_guid(args.app_id):
        logging.error("'%s' is not a valid GUID", args.app_id)
        return EXIT_USAGE

    try:
        token = acquire_token()
    except ConfigurationError as e:
        logging.error("Configuration error: %s", e)
        return EXIT_USAGE
    except AuthenticationError as e:
        logging.error("Authentication failed: %s", e)
        return EXIT_ABORTED
    except KeyboardInterrupt:
        print("No changes made.")
        return EXIT_OK

    with GraphClient(token) as client:
        engine = PermissionEngine(
            Directory(client), profile, grant_consent=args.grant_consent
        )
        try:
            result = engine.run(app_id=args.app_id, assume_yes=args.yes)
        except KeyboardInterrupt:
            # prompts handle their own interrupts, so writes may have started
            print("Interrupted, the application may be partially updated.")
            return EXIT_ABORTED

    print_summary(result)
    return EXIT_OK if result.ok else EXIT_ABORTED


if __name__ == "__main__":
    sys.exit(main())
