from __future__ import annotations

import re

_INVALID_CHARS = re.compile(r"[^a-z0-9_]")
_UNDERSCORE_RUNS = re.compile(r"_{2,}")


def sanitize_field_name(raw_name: str) -> str:
    """Turn an arbitrary key into a safe field name.

    Lower-cases, replaces anything outside ``[a-z0-9_]`` with ``_``, collapses
    runs of underscores and strips them from both ends. A name made only of
    invalid characters comes back as the empty string.
    """
    name = _INVALID_CHARS.sub("_", raw_name.lower())
    name = _UNDERSCORE_RUNS.sub("_", name)
    return name.strip("_")


def join_field_name(prefix: str, name: str) -> str:
    return "_".join(p for p in (prefix, name) if p)
