"""
Routing rules component models.

RoutingRule is the persisted record. Only ``name`` is interpreted by the
store; every other field is payload that must survive a read/write cycle.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class RoutingRule(BaseModel):
    """
    A named routing rule document.

    Validation is strict: a payload value of the wrong type is rejected rather
    than coerced, so rules are written back exactly as they were read.
    """

    model_config = ConfigDict(extra="allow", strict=True)

    name: str = Field(min_length=1)
    description: str | None = None
    priority: int = 0
    actions: list[str] = Field(default_factory=list)
    condition: str | None = None

    def to_document(self) -> dict[str, Any]:
        """Serialise to a plain mapping, keeping only the keys that were set."""
        return self.model_dump(exclude_unset=True)


# --- Component inputs / outputs ---


@dataclass(frozen=True)
class RoutingRulesErrorInfo:
    """Error reported by a component entry point."""

    code: str
    message: str
    path: str | None = None


@dataclass(frozen=True)
class ListRulesInput:
    """Input for listing rules (no parameters today)."""


@dataclass(frozen=True)
class ListRulesOutput:
    """Output from listing rules."""

    rules: list[RoutingRule] = field(default_factory=list)
    errors: list[RoutingRulesErrorInfo] = field(default_factory=list)
    success: bool = True


@dataclass(frozen=True)
class UpdateRuleInput:
    """Input for replacing a rule by name."""

    rule: RoutingRule | dict[str, Any]


@dataclass(frozen=True)
class UpdateRuleOutput:
    """Output from replacing a rule by name."""

    rules: list[RoutingRule] = field(default_factory=list)
    errors: list[RoutingRulesErrorInfo] = field(default_factory=list)
    success: bool = True
    matched: int = 0
