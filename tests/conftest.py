"""Global test fixtures."""

import os

# Tests run against the in-memory backend unless a test opts in.
# This must happen at module load time, before any test module imports Config.
os.environ.pop("AUTHLINK_BACKEND__API_KEY", None)
os.environ.pop("AUTHLINK_CONFIG_FILE", None)
os.environ.pop("AUTHLINK_LOG_FILE", None)
os.environ.setdefault("AUTHLINK_LOGGING__LEVEL", "WARNING")
