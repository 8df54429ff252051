from __future__ import annotations

import pytest

from tests.fakes import make_world


@pytest.fixture()
def world():
    return make_world()


@pytest.fixture()
def engineering(world):
    return world.add_department("Engineering")


@pytest.fixture()
def admin(world):
    return world.add_admin()


@pytest.fixture()
def jane(world, engineering):
    """Jane Smith with a linked employee-role account."""

    return world.add_employee("Jane", "Smith", dept_id=engineering)


@pytest.fixture()
def bob(world, engineering):
    return world.add_employee("Bob", "Jones", dept_id=engineering)
