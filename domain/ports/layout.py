from __future__ import annotations

from typing import Protocol

from domain.models import DiagramPlan, ProgramDescription


class LayoutEngine(Protocol):
    def build_plan(self, program: ProgramDescription) -> DiagramPlan:
        ...
