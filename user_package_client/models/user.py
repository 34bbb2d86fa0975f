"""User and call result models."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class User(BaseModel):
    """User record as returned by the listing routine.

    The routine reports column names in upper case (``ID``, ``NAME``);
    any additional columns are kept as extra fields.
    """

    id: Optional[int] = Field(None, alias="ID")
    name: Optional[str] = Field(None, alias="NAME")

    model_config = ConfigDict(populate_by_name=True, extra="allow", frozen=True)


class CallResult(BaseModel):
    """Marshalled OUT parameters of one routine call."""

    out_binds: Dict[str, Any] = Field(default_factory=dict)

    def get(self, name: str) -> Any:
        """Return the marshalled value of an OUT parameter."""
        return self.out_binds[name]
