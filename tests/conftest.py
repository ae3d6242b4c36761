"""Shared test fixtures for grantlens."""

import pytest

from grantlens.calculator import AssignmentSpec, PrivilegeCalculatorFactory, Role
from grantlens.catalog import InMemoryPrivilegeCatalog
from grantlens.config.models import GrantlensConfig


# Feature "C" declares "read" first so ranking has to reorder it.
SAMPLE_DEFINITIONS = {
    "features": {
        "C": {
            "read": ["read"],
            "all": ["delete", "edit", "read"],
        },
        "D": {
            "all": ["d:write", "d:read"],
            "read": ["d:read"],
        },
    },
    "base": {
        "all": ["delete", "edit", "read", "d:write", "d:read"],
        "read": ["read", "d:read"],
    },
}


@pytest.fixture
def sample_definitions():
    return SAMPLE_DEFINITIONS


@pytest.fixture
def catalog():
    return InMemoryPrivilegeCatalog.from_mapping(SAMPLE_DEFINITIONS)


@pytest.fixture
def factory(catalog):
    return PrivilegeCalculatorFactory(catalog)


@pytest.fixture
def make_calculator(factory):
    """Build an EffectivePrivilegeCalculator from assignment specs."""

    def _make(*specs: AssignmentSpec):
        return factory.get_calculator(Role(name="test-role", privileges=list(specs)))

    return _make


@pytest.fixture
def sample_config():
    return GrantlensConfig()


@pytest.fixture
def definitions_file(tmp_path):
    """SAMPLE_DEFINITIONS written as YAML."""
    import yaml

    path = tmp_path / "privileges.yaml"
    path.write_text(yaml.dump(SAMPLE_DEFINITIONS, sort_keys=False))
    return path
