from __future__ import annotations

from pathlib import Path
from typing import List

from adapters.filesystem.json_utils import load_json
from adapters.filesystem.plan_repository import PLAN_SUFFIX
from domain.models import ProgramDescription
from domain.ports.repositories import ProgramRepository


class FileSystemProgramRepository(ProgramRepository):
    def load_by_path(self, path: Path) -> ProgramDescription:
        if not path.is_file():
            msg = f"IDL file not found: {path}"
            raise FileNotFoundError(msg)
        return ProgramDescription.model_validate(load_json(path))

    def load_all_with_paths(self, directory: Path) -> List[tuple[Path, ProgramDescription]]:
        return [(path, self.load_by_path(path)) for path in self.list_paths(directory)]

    def list_paths(self, directory: Path) -> List[Path]:
        """IDL candidates in ``directory``; layout dumps written next to them are left out."""
        return sorted(
            path
            for path in directory.glob("*.json")
            if path.is_file() and not path.name.endswith(PLAN_SUFFIX)
        )
