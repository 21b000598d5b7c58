import pytest

from models.rules import RulesConfig


@pytest.fixture()
def db_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'wtw-test.db'}"


@pytest.fixture()
def rules_config():
    return RulesConfig()
