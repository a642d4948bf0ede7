from pathlib import Path

import pytest

from src.components.routing_rules import RoutingRulesStore

SAMPLE_RULES = """\
---
name: default
description: Route everything else to the adhoc group
priority: 0
condition: 'true'
actions:
  - result.put("routingGroup", "adhoc")
---
name: analytics
description: Dashboards go to the analytics cluster
priority: 1
condition: request.getHeader("X-Trino-Source") == "superset"
actions:
  - result.put("routingGroup", "analytics")
---
name: batch
description: Scheduled jobs
priority: 2
condition: request.getHeader("X-Trino-Source") == "airflow"
actions:
  - result.put("routingGroup", "etl")
routing_group_tags:
  team: data-platform
  tier: 3
"""


@pytest.fixture
def rules_file(tmp_path: Path) -> Path:
    """A rules file holding the default, analytics and batch rules."""
    path = tmp_path / "routing_rules.yaml"
    path.write_text(SAMPLE_RULES, encoding="utf-8")
    return path


@pytest.fixture
def store(rules_file: Path) -> RoutingRulesStore:
    return RoutingRulesStore(rules_file)
