from __future__ import annotations

import copy
from functools import cache, lru_cache
from pathlib import Path
from typing import Any

import orjson

from domain.models import ProgramDescription


@lru_cache(maxsize=1)
def repo_root() -> Path:
    for parent in Path(__file__).resolve().parents:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Repository root not found")


def idl_fixture_path(name: str) -> Path:
    return repo_root() / "examples" / "idl" / name


@cache
def _load_idl_payload_cached(name: str) -> dict[str, Any]:
    payload = orjson.loads(idl_fixture_path(name).read_bytes())
    if not isinstance(payload, dict):
        raise TypeError(f"Expected dict payload in {name}")
    return payload


def load_idl_payload(name: str) -> dict[str, Any]:
    return copy.deepcopy(_load_idl_payload_cached(name))


def load_idl_fixture(name: str) -> ProgramDescription:
    return ProgramDescription.model_validate(load_idl_payload(name))
