"""Wire-level building blocks shared by every SP-API resource family."""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel, to_pascal


def canonical_decimal_string(value: object) -> str | None:
    """Normalize a monetary amount sent as a JSON number or string.

    Response bodies are parsed with ``parse_float=Decimal`` so a JSON number
    such as ``12.34`` arrives here as ``Decimal("12.34")`` and never passes
    through a binary float. Blank strings and ``null`` become ``None``.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        raise ValueError("amount must be a number or a string, not a boolean")
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        return str(Decimal(repr(value)))
    if isinstance(value, str):
        trimmed = value.strip()
        if not trimmed:
            return None
        try:
            Decimal(trimmed)
        except InvalidOperation as exc:
            raise ValueError(f"amount {value!r} is not a decimal number") from exc
        return trimmed
    raise ValueError(f"amount must be a number or a string, got {type(value).__name__}")


DecimalString = Annotated[str | None, BeforeValidator(canonical_decimal_string)]


class WireModel(BaseModel):
    """Base for upstream objects.

    An explicit ``null`` on a field that has a non-null default decodes to
    that default, the same as an absent key.
    """

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        cleaned = dict(data)
        for name, info in cls.model_fields.items():
            if info.default_factory is None and info.default is None:
                continue
            if info.is_required():
                continue
            for key in {name, info.alias or name}:
                if key in cleaned and cleaned[key] is None:
                    del cleaned[key]
        return cleaned


class CamelModel(WireModel):
    """Upstream object with camelCase keys; unknown keys are kept verbatim."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")


class PascalModel(WireModel):
    """Upstream object with PascalCase keys (Orders and Product Pricing v0)."""

    model_config = ConfigDict(alias_generator=to_pascal, populate_by_name=True, extra="allow")


class Money(CamelModel):
    currency_code: str | None = None
    amount: DecimalString = None


class OrderMoney(PascalModel):
    currency_code: str | None = None
    amount: DecimalString = None

    def display(self) -> str:
        """Render as ``"<amount> <currency>"``; empty when either part is missing."""
        if self.amount is None or self.currency_code is None:
            return ""
        return f"{self.amount} {self.currency_code.strip()}".strip()


class UpstreamError(BaseModel):
    """One entry of an envelope's ``errors`` list."""

    model_config = ConfigDict(extra="ignore")

    code: str = ""
    message: str = ""
    details: str | None = Field(default=None)

    @field_validator("code", "message", mode="before")
    @classmethod
    def _scalar_as_text(cls, value: object) -> object:
        if value is None:
            return ""
        if isinstance(value, (int, float, Decimal)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("details", mode="before")
    @classmethod
    def _stringify_details(cls, value: object) -> object:
        if value is None or isinstance(value, str):
            return value
        return str(value)

    def render(self) -> str:
        text = self.message.strip()
        if self.code:
            text += f" ({self.code})"
        detail = (self.details or "").strip()
        if detail:
            text += f": {detail}"
        return text.strip()
