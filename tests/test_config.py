import pytest

from aocbot.config import load_settings
from aocbot.errors import ConfigError

_ENV_NAMES = ("AOC_SESSION", "AOC_LEADERBOARD", "AOC_WEBHOOK", "AOC_YEAR", "AOC_SCHEDULE_MINUTE")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_read_settings_from_env_file(tmp_path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text(
        "AOC_SESSION=abc123\n"
        "AOC_LEADERBOARD=424242\n"
        "AOC_WEBHOOK=https://chat.example.com/hooks/xyz\n"
        "AOC_YEAR=2024\n",
        encoding="utf-8",
    )

    settings = load_settings(env_file=env_path)
    assert settings.session == "abc123"
    assert settings.leaderboard == "424242"
    assert settings.webhook == "https://chat.example.com/hooks/xyz"
    assert settings.year == "2024"
    assert settings.min_fetch_interval_minutes == 14
    assert settings.timezone == "America/Chicago"


def test_overrides_beat_environment(monkeypatch) -> None:
    monkeypatch.setenv("AOC_SESSION", "from-env")
    monkeypatch.setenv("AOC_LEADERBOARD", "1")
    monkeypatch.setenv("AOC_WEBHOOK", "https://example.com/hook")

    settings = load_settings(env_file=None, session="from-cli", year=None)
    assert settings.session == "from-cli"
    assert settings.leaderboard == "1"
    assert settings.year == "2023"


def test_missing_required_settings() -> None:
    with pytest.raises(ConfigError) as excinfo:
        load_settings(env_file=None)
    message = str(excinfo.value)
    assert "session" in message
    assert "leaderboard" in message
    assert "webhook" in message


def test_blank_session_rejected() -> None:
    with pytest.raises(ConfigError):
        load_settings(
            env_file=None,
            session="   ",
            leaderboard="1",
            webhook="https://example.com/hook",
        )


def test_invalid_webhook_rejected() -> None:
    with pytest.raises(ConfigError):
        load_settings(env_file=None, session="s", leaderboard="1", webhook="not a url")


def test_invalid_year_rejected() -> None:
    with pytest.raises(ConfigError):
        load_settings(
            env_file=None,
            session="s",
            leaderboard="1",
            webhook="https://example.com/hook",
            year="23",
        )


def test_invalid_schedule_rejected(monkeypatch) -> None:
    monkeypatch.setenv("AOC_SCHEDULE_MINUTE", "bogus")
    with pytest.raises(ConfigError) as excinfo:
        load_settings(
            env_file=None,
            session="s",
            leaderboard="1",
            webhook="https://example.com/hook",
        )
    assert "schedule_minute" in str(excinfo.value)


def test_custom_schedule_accepted(monkeypatch) -> None:
    monkeypatch.setenv("AOC_SCHEDULE_MINUTE", "5,20,35,50")
    settings = load_settings(
        env_file=None,
        session="s",
        leaderboard="1",
        webhook="https://example.com/hook",
    )
    assert settings.schedule_minute == "5,20,35,50"
