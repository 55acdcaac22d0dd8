import pytest
from pydantic import ValidationError

from page_factory.core.errors import ConfigurationError
from page_factory.core.settings import Settings
from page_factory.core.timeouts import TimeoutCategory, TimeoutPolicy

C = TimeoutCategory


@pytest.mark.parametrize(
    "category, seconds",
    [
        (C.CLICK, 5),
        (C.PRESENCE, 5),
        (C.VISIBILITY, 5),
        (C.SELECTION, 5),
        (C.PAGE_LOAD, 80),
        (C.PAGE_READY, 10),
        (C.PAGE_REFRESH, 5),
        (C.POLLING_WITH_REFRESH, 30),
        (C.SHORT, 1),
        (C.MEDIUM, 5),
        (C.LONG, 20),
        (C.ONE_SECOND, 1),
        (C.FIVE_SECONDS, 5),
    ],
)
def test_default_durations(category: TimeoutCategory, seconds: int) -> None:
    assert TimeoutPolicy().resolve(category) == seconds


def test_default_resolves_to_natural_category() -> None:
    policy = TimeoutPolicy(presence_timeout_seconds=7)
    assert policy.resolve(C.PRESENCE, C.DEFAULT) == 7
    assert policy.resolve(C.PRESENCE, C.LONG) == 20
    assert policy.resolve(C.CLICK, C.ONE_SECOND) == 1


def test_default_has_no_stored_duration() -> None:
    with pytest.raises(ValueError):
        TimeoutPolicy().seconds_for(C.DEFAULT)
    assert "DEFAULT" not in TimeoutPolicy().as_table()


def test_tuning_values_in_seconds() -> None:
    policy = TimeoutPolicy()
    assert policy.poll_interval == pytest.approx(0.1)
    assert policy.pause_between_keys == pytest.approx(0.05)
    assert policy.pause_between_tries == pytest.approx(0.2)
    assert policy.implicit_wait == pytest.approx(2.0)
    assert policy.pause_between_refresh_seconds == 5


@pytest.mark.parametrize(
    "values",
    [{"click_timeout_seconds": 0}, {"long_timeout_seconds": -3}, {"no_such_timeout": 4}],
)
def test_invalid_configuration_is_rejected(values: dict) -> None:
    with pytest.raises(ConfigurationError):
        TimeoutPolicy.build(**values)


def test_policy_is_immutable() -> None:
    policy = TimeoutPolicy()
    with pytest.raises(ValidationError):
        policy.click_timeout_seconds = 9  # type: ignore[misc]


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PF_CLICK_TIMEOUT_SECONDS", "7")
    monkeypatch.setenv("PF_BASE_URL", "http://intranet.test/app")
    monkeypatch.setenv("PF_PLATFORM", "android")
    s = Settings(_env_file=None)
    assert s.base_url == "http://intranet.test/app"
    assert s.platform == "android"
    assert s.timeout_policy().resolve(C.CLICK) == 7


def test_settings_with_bad_timeout_fail_on_policy(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PF_PRESENCE_TIMEOUT_SECONDS", "0")
    with pytest.raises(ConfigurationError):
        Settings(_env_file=None).timeout_policy()
