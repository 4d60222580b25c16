"""Root conftest: sets env vars BEFORE any tgpages module is imported.

The config.py module-level singleton reads TGPAGES_* at import time, so a
developer's shell (or a stray .env) must not change test behaviour.
"""

import os

# Force-set (not setdefault) to prevent real env vars from leaking into tests
os.environ["TGPAGES_LOG_LEVEL"] = "LEVEL_4"
os.environ["TGPAGES_UNMAPPED_POLICY"] = "strip"
os.environ["TGPAGES_EVENT_LOCKING"] = "true"
os.environ["TGPAGES_DELETE_ON_CANCEL"] = "false"
os.environ["TGPAGES_MISSING_ACTION"] = "ignore"
for _name in (
    "NEXT",
    "PREVIOUS",
    "ACCEPT",
    "CANCEL",
    "SKIP_FORWARD",
    "SKIP_BACKWARD",
    "GOTO_FIRST",
    "GOTO_LAST",
):
    os.environ.pop(f"TGPAGES_EMOJI_{_name}", None)
