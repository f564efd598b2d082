from __future__ import annotations

KEY_SEPARATOR = ":"
ALL = "all"


def query_key(resource: str, *parts: str | int | None) -> str:
    """Build a cache key such as ``product:42`` or ``products:all:24:0``.

    Missing parts render as ``all`` so an unfiltered listing and an explicit
    "all" category share one entry.
    """
    rendered = [resource]
    for part in parts:
        rendered.append(ALL if part is None or part == "" else str(part))
    return KEY_SEPARATOR.join(rendered)


def is_valid_key(key: str | None) -> bool:
    """Keys built from not-yet-loaded data come through as None or blank."""
    return isinstance(key, str) and bool(key.strip())
