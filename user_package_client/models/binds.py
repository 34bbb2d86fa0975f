"""Bind parameter models for routine calls."""

from typing import Annotated, Any, Literal, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

# Large enough for any VARCHAR2 returned from PL/SQL with the default
# MAX_STRING_SIZE setting.
DEFAULT_TEXT_SIZE = 4000


class _Bind(BaseModel):
    model_config = ConfigDict(frozen=True)


class ScalarIn(_Bind):
    """Input value passed to the statement by value, without coercion."""

    kind: Literal["scalar_in"] = "scalar_in"
    value: Any = None


class ScalarOutNumeric(_Bind):
    """OUT parameter declared as NUMBER."""

    kind: Literal["out_number"] = "out_number"


class ScalarOutText(_Bind):
    """OUT parameter declared as VARCHAR2."""

    kind: Literal["out_text"] = "out_text"
    size: int = Field(DEFAULT_TEXT_SIZE, gt=0)


class StructuredOutJSON(_Bind):
    """OUT parameter declared as JSON; marshals to a list of records."""

    kind: Literal["out_json"] = "out_json"


Bind = Annotated[
    Union[ScalarIn, ScalarOutNumeric, ScalarOutText, StructuredOutJSON],
    Field(discriminator="kind"),
]

BindSpec = Mapping[str, Any]

_BIND_ADAPTER = TypeAdapter(Bind)


def normalize_binds(binds: BindSpec) -> dict[str, Bind]:
    """Wrap literal values as ``ScalarIn`` and validate parameter names.

    Names may be given with or without the leading colon used in the
    statement text; the colon is stripped. Bind descriptors are checked
    against the closed ``Bind`` union, so an unknown kind is rejected
    before any connection is borrowed.
    """
    normalized: dict[str, Bind] = {}
    for raw_name, bind in binds.items():
        name = raw_name[1:] if raw_name.startswith(":") else raw_name
        if not name:
            raise ValueError("Bind parameter name must not be empty")
        if name in normalized:
            raise ValueError(f"Duplicate bind parameter: {name}")
        if isinstance(bind, _Bind):
            bind = _BIND_ADAPTER.validate_python(bind)
        else:
            bind = ScalarIn(value=bind)
        normalized[name] = bind
    return normalized
