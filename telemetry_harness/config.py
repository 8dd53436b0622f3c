"""
Runtime settings for the functional test harness.

Values that describe the application under test are fixed; values that
depend on where the harness runs can be overridden through the environment.
"""
import os

# CONFIG
APP_URL = os.environ.get("HARNESS_APP_URL", "http://localhost:9001")
HTTP_TIMEOUT = float(os.environ.get("HARNESS_HTTP_TIMEOUT", "10"))
SETTLE_SECONDS = float(os.environ.get("HARNESS_SETTLE_SECONDS", "5"))

LOG_LEVEL = os.environ.get("HARNESS_LOG_LEVEL", "INFO")
# empty string disables the file handler
LOG_FILE = os.environ.get("HARNESS_LOG_FILE", "telemetry_harness.log")

# Build of the TestApp every telemetry item must come from
EXPECTED_APP_VERSION = "1.0.0"
SDK_VERSION_PREFIX = "node:"

# One incidental child item is tolerated after all steps are matched
MAX_RESIDUAL_ITEMS = 1
