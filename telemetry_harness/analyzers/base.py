"""
Predicate applied to every candidate item before any step verifier:
the item must come from the expected TestApp build and a Node.js SDK.
"""
from telemetry_harness import config
from telemetry_harness.models.telemetry import TelemetryItem


def base_validator(item: TelemetryItem,
                   expected_version: str = config.EXPECTED_APP_VERSION,
                   sdk_prefix: str = config.SDK_VERSION_PREFIX) -> bool:
    """ True when the item reports the expected app version and SDK prefix. """
    if item.application_version != expected_version:
        return False
    return isinstance(item.sdk_version, str) and item.sdk_version.startswith(sdk_prefix)
