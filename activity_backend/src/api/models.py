from __future__ import annotations

from typing import TypedDict


class _ActivityFields(TypedDict):
    id: str
    title: str
    start: str
    end: str
    userId: str
    description: str
    type: str
    created: str


# PUBLIC_INTERFACE
class ActivityEntity(_ActivityFields, total=False):
    """
    An activity record exactly as persisted in the JSON document.

    Keys keep the camelCase spelling of the stored document.

    Fields:
    - id: Unique string identifier assigned on create
    - title: Non-empty title
    - start / end: Date-like strings; end falls back to start
    - userId: Partition key, 'default' when not supplied
    - description: Free text, '' by default
    - type: Category, 'default' by default
    - created: ISO8601 UTC creation timestamp
    - updated: ISO8601 UTC timestamp of the last update (absent until updated)
    """

    updated: str
