import pytest

from vf_config import load_config


@pytest.fixture
def cfg(tmp_path):
    """Defaults plus a JWT, isolated from any config.yaml or real env."""
    return load_config(tmp_path / "absent.yaml", environ={"PINATA_JWT": "test-jwt"})
