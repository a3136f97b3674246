"""Configuration constants for slurp."""

import os
from pathlib import Path

# Collection endpoint. Events are POSTed here as JSON text.
SERVER_URL: str = os.environ.get("SLURP_URL", "https://ub-www01.uio.no/slurp/")

# Seconds a request may take. The caller never waits for it.
REQUEST_TIMEOUT: float = 10.0

# A session expires after this many seconds of inactivity.
SESSION_TIMEOUT: int = 30 * 60

# Storage key of the session record inside a tab's storage area.
SESSION_STORAGE_KEY: str = "slurpSession"

# Query fields with this prefix are advanced-search facets, not boolean clauses.
FACET_FIELD_PREFIX: str = "facet_"

# Facet applied when the user expands a FRBR group.
GROUP_EXPANSION_FACET: str = "frbrgroupid"

# Boolean operators recognised as a trailing query token.
BOOLEAN_OPERATORS: frozenset[str] = frozenset({"AND", "OR", "NOT"})

# Directory for the session database. First directory which is found is used.
DATA_DIRECTORIES: list[Path] = [
    Path("~/.local/share/slurp").expanduser(),
    Path("~/.slurp").expanduser(),
    Path("/tmp/slurp"),
]


def resolve_data_directory() -> Path:
    """Return the first existing data directory, or the first candidate."""
    for candidate in DATA_DIRECTORIES:
        if candidate.is_dir():
            return candidate
    return DATA_DIRECTORIES[0]
