"""Result models for the variables listing endpoint."""
from typing import Any, NamedTuple

from datamodel import BaseModel, Field


class Metadata(BaseModel):
    """Pagination metadata of a variables listing."""
    offset: int = Field(default=0)
    limit: int = Field(default=0)
    total: int = Field(default=0)

    @classmethod
    def from_response(cls, payload: dict) -> "Metadata":
        return cls(
            offset=int(payload.get('offset') or 0),
            limit=int(payload.get('limit') or 0),
            total=int(payload.get('total') or 0),
        )


class VariablesPage(NamedTuple):
    """One page of variable descriptors, rows kept as returned by the API."""
    data: list[dict[str, Any]]
    metadata: Metadata

    def by_name(self, name: str) -> dict[str, Any]:
        """Return the row whose ``name`` matches.

        Raises:
            KeyError: If no row carries that name.
        """
        for row in self.data:
            if row.get('name') == name:
                return row
        raise KeyError(name)
