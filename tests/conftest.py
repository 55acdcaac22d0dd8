import pytest

from fakes import FakeClock, FakeDriver
from page_factory.browser.session import Session
from page_factory.core import wait
from page_factory.core.timeouts import TimeoutPolicy


@pytest.fixture(autouse=True)
def fake_clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """Every test runs on a fake clock: sleeps advance time instantly."""
    fc = FakeClock()
    monkeypatch.setattr(wait, "clock", fc.clock)
    monkeypatch.setattr(wait, "sleep", fc.sleep)
    return fc


@pytest.fixture
def driver() -> FakeDriver:
    return FakeDriver(url="http://app.test/")


@pytest.fixture
def session(driver: FakeDriver) -> Session:
    return Session(driver, base_url="http://app.test", timeouts=TimeoutPolicy())


@pytest.fixture
def actions(session: Session):
    return session.actions
