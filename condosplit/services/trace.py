"""Structured audit trail of a calculation's intermediate values.

Every step recorded here is also logged at DEBUG level, so the trace and the
log tell the same story. Tests assert on the trace instead of parsing logs.
"""

import logging
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter

logger = logging.getLogger(__name__)

VALUES_ADAPTER = TypeAdapter(dict[str, Any])


class TraceStep(BaseModel):
    stage: str
    values: dict[str, Any]


class CalculationTrace(BaseModel):
    """Ordered list of named steps plus the non-fatal warnings raised along the way."""

    steps: list[TraceStep] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    def record(self, stage: str, **values: Any) -> None:
        self.steps.append(TraceStep(stage=stage, values=values))
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("%s: %s", stage, VALUES_ADAPTER.dump_python(values, mode="json"))

    def warn(self, message: str) -> None:
        self.warnings.append(message)
        logger.warning(message)

    def get(self, stage: str) -> dict[str, Any]:
        """Values of the last step recorded under stage.

        Raises:
            KeyError: If no such step was recorded
        """
        for step in reversed(self.steps):
            if step.stage == stage:
                return step.values
        raise KeyError(stage)

    def stages(self) -> list[str]:
        return [step.stage for step in self.steps]

    def to_dict(self) -> dict[str, Any]:
        """JSON-ready copy: decimals as strings, enums as values, keys as strings."""
        return self.model_dump(mode="json")
