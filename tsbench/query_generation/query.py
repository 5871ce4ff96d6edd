from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, MutableMapping

TEXT_FIELDS = (
    "human_label",
    "human_description",
    "method",
    "path",
    "raw_query",
    "body",
)


@dataclass
class HTTPQuery:
    """
    A query that is sent to the target store as a single HTTP request.

    Every text field holds raw bytes; nothing is escaped or URL encoded. A
    freshly allocated query has every field empty.
    """

    human_label: bytes = b""
    human_description: bytes = b""
    method: bytes = b""
    path: bytes = b""
    raw_query: bytes = b""
    body: bytes = b""
    id: int = 0

    def reset(self) -> None:
        """Return the query to its empty state so it can be reused."""
        for field in TEXT_FIELDS:
            setattr(self, field, b"")
        self.id = 0

    def to_dict(self) -> MutableMapping[str, Any]:
        result: MutableMapping[str, Any] = {
            field: getattr(self, field).decode("utf-8") for field in TEXT_FIELDS
        }
        result["id"] = self.id
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> HTTPQuery:
        return cls(
            id=int(data.get("id", 0)),
            **{field: data.get(field, "").encode("utf-8") for field in TEXT_FIELDS},
        )

    def __str__(self) -> str:
        return (
            "HumanLabel: %s, HumanDescription: %s, Method: %s, Path: %s, Body: %s"
            % tuple(
                getattr(self, field).decode("utf-8")
                for field in ("human_label", "human_description", "method", "path", "body")
            )
        )
