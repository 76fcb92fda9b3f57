import pytest

from letsroll.core.config import Settings


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "config-test-secret")
    return monkeypatch


@pytest.mark.unit
@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("http://a,http://b", ["http://a", "http://b"]),
        ("https://mesa.example.com/", ["https://mesa.example.com"]),
        (" http://a , , http://b/ ", ["http://a", "http://b"]),
        ("", []),
    ],
)
def test_cors_origin_from_env(env, raw, expected):
    env.setenv("CORS_ORIGIN", raw)
    assert Settings(_env_file=None).CORS_ORIGIN == expected


@pytest.mark.unit
def test_cors_origin_default(env):
    env.delenv("CORS_ORIGIN", raising=False)
    assert Settings(_env_file=None).CORS_ORIGIN == ["http://localhost:5173"]


@pytest.mark.unit
def test_log_level_is_upper_cased(env):
    env.setenv("LOG_LEVEL", " debug ")
    assert Settings(_env_file=None).LOG_LEVEL == "DEBUG"
