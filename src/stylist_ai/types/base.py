"""
Base model for everything that crosses the HTTP boundary.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class WireModel(BaseModel):
    """Pydantic model serialised with camelCase keys.

    Fields are declared in snake_case and accept either spelling on input.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict[str, Any]:
        """Dump as JSON-compatible camelCase dict, omitting unset optionals."""
        return self.model_dump(by_alias=True, exclude_none=True, mode="json")
