"""
Routing rules component - Persist named routing rules in a YAML document stream.

The store lists the rules and atomically replaces a rule by name while the
backing file is shared by many threads and processes.
"""

from ._impl import RoutingRulesStore, replace_by_name
from .adapters import FcntlFileLock, YamlDocumentStreamCodec
from .component import (
    create_store,
    run_list,
    run_update,
)
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
from .ports import FileLockFactory, RuleCodecPort

__all__ = [
    # Component entry points
    "run_list",
    "run_update",
    "create_store",
    # Store
    "RoutingRulesStore",
    "replace_by_name",
    # Models
    "RoutingRule",
    "RoutingRulesErrorInfo",
    "ListRulesInput",
    "ListRulesOutput",
    "UpdateRuleInput",
    "UpdateRuleOutput",
    # Ports
    "RuleCodecPort",
    "FileLockFactory",
    # Adapters
    "FcntlFileLock",
    "YamlDocumentStreamCodec",
    # Exceptions
    "RoutingRulesError",
    "RulesIOError",
    "RulesParseError",
    "RulesLockTimeoutError",
]
