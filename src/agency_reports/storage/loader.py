"""Load report input bundles exported from the backend."""

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Type, Union

from pydantic import BaseModel, ValidationError

from .models import ReportInput
from .schemas import (
    ActivityPayload,
    AgentCommissionPayload,
    AgentProfilePayload,
    MarketingPlanPayload,
    PropertyPayload,
)

logger = logging.getLogger(__name__)


def _parse_rows(
    rows: List[Dict[str, Any]],
    payload_cls: Type[BaseModel],
    convert: Callable[[Any], Any],
    kind: str,
) -> list:
    """Validate raw rows, skipping any that cannot be coerced."""
    records = []
    for index, row in enumerate(rows or []):
        try:
            records.append(convert(payload_cls.model_validate(row)))
        except ValidationError as e:
            logger.warning(f"Skipping {kind} row {index}: {e.error_count()} validation error(s)")
    return records


def parse_report_input(data: Dict[str, Any]) -> ReportInput:
    """Build a ReportInput from an already-decoded bundle."""
    report_input = ReportInput(
        properties=_parse_rows(
            data.get("properties", []), PropertyPayload, lambda p: p.to_record(), "property"
        ),
        activities=_parse_rows(
            data.get("activities", []), ActivityPayload, lambda p: p.to_record(), "activity"
        ),
        marketing_plans=_parse_rows(
            data.get("marketing_plans", []), MarketingPlanPayload, lambda p: p.to_record(), "marketing plan"
        ),
        agents=_parse_rows(
            data.get("agents", []), AgentProfilePayload, lambda p: p.to_record(), "agent"
        ),
        agent_commissions=_parse_rows(
            data.get("agent_commissions", []), AgentCommissionPayload, lambda p: p.to_record(), "agent commission"
        ),
    )
    logger.debug(
        f"Parsed bundle: {len(report_input.properties)} properties, "
        f"{len(report_input.activities)} activities, "
        f"{len(report_input.marketing_plans)} marketing plans"
    )
    return report_input


def load_report_input(path: Union[str, Path]) -> ReportInput:
    """Read a JSON bundle file into a ReportInput."""
    path = Path(path)
    if not path.exists():
        logger.error(f"Data file not found: {path}")
        raise FileNotFoundError(f"Data file not found: {path}")

    with open(path, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError("Report bundle must be a JSON object")

    return parse_report_input(data)
