from __future__ import annotations

from pathlib import Path
from typing import Protocol

from domain.models import DiagramPlan, ExcalidrawDocument, ProgramDescription


class ProgramRepository(Protocol):
    def load_by_path(self, path: Path) -> ProgramDescription: ...


class DiagramRenderer(Protocol):
    def render(self, plan: DiagramPlan, path: Path) -> None: ...


class PlanRepository(Protocol):
    def save(self, plan: DiagramPlan, path: Path) -> None: ...


class ExcalidrawRepository(Protocol):
    def load_by_path(self, path: Path) -> ExcalidrawDocument: ...

    def save(self, document: ExcalidrawDocument, path: Path) -> None: ...
