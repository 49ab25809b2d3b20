from __future__ import annotations

import os
from collections.abc import Callable, Generator

import pytest

from domain.models import Argument, GridSpec, Operation, ResourceGroup, ResourceLeaf


def _clear_anchorviz_env() -> None:
    for key in list(os.environ):
        if key.startswith("ANCHORVIZ_"):
            os.environ.pop(key, None)


_clear_anchorviz_env()


@pytest.fixture(autouse=True)
def clear_anchorviz_env() -> Generator[None, None, None]:
    _clear_anchorviz_env()
    yield
    _clear_anchorviz_env()


@pytest.fixture
def grid() -> GridSpec:
    return GridSpec()


@pytest.fixture
def leaf() -> Callable[..., ResourceLeaf]:
    def _factory(name: str, *, signer: bool = False, mutable: bool = False) -> ResourceLeaf:
        return ResourceLeaf(name=name, is_signer=signer, is_mutable=mutable)

    return _factory


@pytest.fixture
def group() -> Callable[..., ResourceGroup]:
    def _factory(name: str, *accounts: ResourceLeaf | ResourceGroup) -> ResourceGroup:
        return ResourceGroup(name=name, accounts=list(accounts))

    return _factory


@pytest.fixture
def operation_factory() -> Callable[..., Operation]:
    def _factory(
        name: str = "initialize",
        accounts: list[ResourceLeaf | ResourceGroup] | None = None,
        args: list[tuple[str, object]] | None = None,
    ) -> Operation:
        return Operation(
            name=name,
            accounts=accounts or [],
            args=[Argument(name=arg_name, ty=ty) for arg_name, ty in (args or [])],
        )

    return _factory

