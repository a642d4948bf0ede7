"""
Routing rules component - List and update persisted routing rules.

Entry points return explicit result values. Store exceptions are caught here
and reported as RoutingRulesErrorInfo entries carrying the rules path, so
callers never receive a partial rule list.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from src.app_shell.config import RoutingRulesSettings, get_settings

from ._impl import RoutingRulesStore
from .errors import (
    RoutingRulesError,
    RulesIOError,
    RulesLockTimeoutError,
    RulesParseError,
)
from .models import (
    ListRulesInput,
    ListRulesOutput,
    RoutingRule,
    RoutingRulesErrorInfo,
    UpdateRuleInput,
    UpdateRuleOutput,
)

logger = logging.getLogger(__name__)


def create_store(settings: RoutingRulesSettings | None = None) -> RoutingRulesStore:
    """Build a store from configuration (environment if settings is None)."""
    if settings is None:
        settings = get_settings()
    return RoutingRulesStore(settings.rules_path, lock_timeout=settings.lock_timeout)


def _error_info(exc: RoutingRulesError) -> RoutingRulesErrorInfo:
    if isinstance(exc, RulesLockTimeoutError):
        code = "lock_timeout"
    elif isinstance(exc, RulesIOError):
        code = "io_error"
    elif isinstance(exc, RulesParseError):
        code = "parse_error"
    else:
        code = "error"
    return RoutingRulesErrorInfo(code=code, message=str(exc), path=exc.path)


def run_list(inp: ListRulesInput, *, store: RoutingRulesStore) -> ListRulesOutput:
    """
    List every routing rule in file order.

    Args:
        inp: List input (no parameters).
        store: Store bound to the rules file.

    Returns:
        ListRulesOutput with the rules, or errors and no rules.
    """
    try:
        rules = store.list_rules()
    except RoutingRulesError as e:
        logger.warning("Listing routing rules failed: %s", e)
        return ListRulesOutput(rules=[], errors=[_error_info(e)], success=False)

    return ListRulesOutput(rules=rules)


def run_update(inp: UpdateRuleInput, *, store: RoutingRulesStore) -> UpdateRuleOutput:
    """
    Replace the routing rule sharing the input rule's name.

    A plain mapping is validated into a RoutingRule first. A name that matches
    nothing succeeds with ``matched == 0`` and the rule set unchanged.

    Args:
        inp: Update input holding the new rule.
        store: Store bound to the rules file.

    Returns:
        UpdateRuleOutput with the written rules, or errors and no rules.
    """
    try:
        rule = (
            inp.rule
            if isinstance(inp.rule, RoutingRule)
            else RoutingRule.model_validate(inp.rule)
        )
    except ValidationError as e:
        return UpdateRuleOutput(
            errors=[RoutingRulesErrorInfo(code="invalid_input", message=str(e))],
            success=False,
        )

    try:
        rules, matched = store.apply_update(rule)
    except RoutingRulesError as e:
        logger.warning("Updating routing rule '%s' failed: %s", rule.name, e)
        return UpdateRuleOutput(errors=[_error_info(e)], success=False)
    except ValueError as e:
        return UpdateRuleOutput(
            errors=[RoutingRulesErrorInfo(code="invalid_input", message=str(e))],
            success=False,
        )

    return UpdateRuleOutput(rules=rules, matched=matched)
