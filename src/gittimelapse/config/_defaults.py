"""Default configuration values.

DEFAULT_CONFIG is a plain dict so it can be passed straight to deep_merge,
which copies it rather than mutating it.
"""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {  # pyright: ignore[reportExplicitAny]
    "logging": {
        "level": "warning",
        "format": "text",
        "file": "",
    },
    "history": {
        "revision": "HEAD",
        "first_parent": False,
        "follow_renames": False,
        "rename_threshold": 60,
    },
    "display": {
        "mode": "aligned",
        "context_lines": 3,
        "placeholder": " " * 15,
        "verify_aligned": False,
    },
}
