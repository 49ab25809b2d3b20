from __future__ import annotations

from pathlib import Path

from adapters.filesystem.json_utils import write_json_atomic
from domain.models import DiagramPlan
from domain.ports.repositories import PlanRepository

PLAN_SUFFIX = ".layout.json"


class FileSystemPlanRepository(PlanRepository):
    """Writes the primitive sequence of a plan as JSON for external backends."""

    def save(self, plan: DiagramPlan, path: Path) -> None:
        write_json_atomic(path, plan.to_dict())
