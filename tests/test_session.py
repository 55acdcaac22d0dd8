import logging
from typing import List

import pytest

from fakes import FakeDriver, FakeElement
from page_factory.actions.platforms import Platform
from page_factory.browser.session import PageState, Session
from page_factory.core.errors import InvalidPageUrlError, WaitTimeoutError
from page_factory.core.timeouts import TimeoutPolicy
from page_factory.pages.base import (
    Element,
    Elements,
    SubPage,
    SubPageField,
    TopLevelPage,
    web_page_path,
)
from page_factory.pages.utils import verify_path

BASE = "http://app.test"


class HeaderBar(SubPage):
    container = "#header"
    logout = Element("a.logout")


@web_page_path("/home")
class HomePage(TopLevelPage):
    page_identifier = "#welcome"
    header = SubPageField(HeaderBar)
    items = Elements("li.item")


@web_page_path("/login")
class LoginPage(TopLevelPage):
    page_identifier = "#login-form"
    username = Element("#username")
    password = Element("#password")
    submit = Element("#submit")

    def log_in(self, user: str, password: str) -> HomePage:
        self.a.input_text(self.username, user)
        self.a.input_text(self.password, password)
        return self.a.click_and_load_top_level_page(self.submit, HomePage)


class TrackingLoginPage(LoginPage):
    left: List[str] = []

    def leave_page_hook(self) -> None:
        TrackingLoginPage.left.append(type(self).__name__)


@web_page_path(r"/users/\d+", regex=True)
class UserPage(TopLevelPage):
    pass


@web_page_path("/elsewhere")
class ElsewherePage(TopLevelPage):
    pass


@pytest.fixture
def site() -> FakeDriver:
    driver = FakeDriver(url="about:blank")

    def login():
        submit = FakeElement("button", on_click=lambda: driver.navigate(f"{BASE}/home"))
        return {
            "#login-form": [FakeElement("form")],
            "#username": [FakeElement("input")],
            "#password": [FakeElement("input")],
            "#submit": [submit],
        }

    def home():
        logout = FakeElement("a", text="Log out")
        return {
            "#welcome": [FakeElement("h1", text="Welcome")],
            "#header": [FakeElement("div", children={"a.logout": [logout]})],
            "li.item": [FakeElement("li", text="one"), FakeElement("li", text="two")],
        }

    driver.pages.update({"/login": login, "/home": home, "/users/42": dict, "/users/abc": dict})
    return driver


@pytest.fixture
def web(site: FakeDriver) -> Session:
    return Session(site, base_url=BASE, timeouts=TimeoutPolicy())


def test_login_then_home(web: Session, site: FakeDriver) -> None:
    login = web.open_page_by_url("/login", LoginPage)
    assert web.state is PageState.LOADED
    assert web.cached_page is login

    home = login.log_in("ann", "secret")

    assert isinstance(home, HomePage)
    assert web.cached_page is home
    assert web.state is PageState.LOADED
    assert site.navigations == [f"{BASE}/login", f"{BASE}/home"]
    assert site.typed == ["ann", "secret"]
    assert [site.text(li) for li in home.items] == ["one", "two"]
    assert home.header.parent is home
    assert home.header.has_parent()
    assert site.text(home.header.logout) == "Log out"


def test_click_through_to_home_invalidates_login(web: Session, site: FakeDriver) -> None:
    login = web.open_page_by_url("/login", LoginPage)
    assert web.load_top_level_page(LoginPage) is login

    web.actions.click("#submit")
    assert web.state is PageState.STALE

    lookups = site.find_calls
    home = web.load_top_level_page(HomePage)
    assert isinstance(home, HomePage)
    assert site.find_calls > lookups
    assert web.cached_page is home


def test_cache_hit_skips_rebinding(web: Session, site: FakeDriver) -> None:
    login = web.open_page_by_url("/login", LoginPage)
    lookups = site.find_calls

    assert web.load_top_level_page(LoginPage) is login
    assert site.find_calls == lookups


@pytest.mark.parametrize("url", [f"{BASE}/login/", f"{BASE}/login?next=%2Fhome", f"{BASE}/login#top"])
def test_cache_ignores_trailing_slash_query_and_fragment(web: Session, site: FakeDriver, url: str) -> None:
    login = web.open_page_by_url("/login", LoginPage)
    site.url = url
    assert web.state is PageState.LOADED
    assert web.load_top_level_page(LoginPage) is login


def test_cache_hits_for_base_class_request(web: Session, site: FakeDriver) -> None:
    tracking = web.open_page_by_url("/login", TrackingLoginPage)
    lookups = site.find_calls
    assert web.load_top_level_page(LoginPage) is tracking
    assert site.find_calls == lookups


def test_cache_misses_on_other_host(web: Session, site: FakeDriver) -> None:
    login = web.open_page_by_url("/login", LoginPage)
    site.url = "http://other.test/login"

    assert web.state is PageState.STALE
    fresh = web.load_top_level_page(LoginPage)
    assert fresh is not login
    assert web.cached_page is fresh


def test_cache_misses_on_other_class(web: Session) -> None:
    login = web.open_page_by_url("/login", LoginPage)
    assert web.load_top_level_page(TrackingLoginPage) is not login


def test_cache_misses_without_current_url(web: Session, site: FakeDriver) -> None:
    login = web.open_page_by_url("/login", LoginPage)
    site.url = None

    assert web.state is PageState.STALE
    assert web.load_top_level_page(LoginPage) is not login


def test_cache_misses_on_unparsable_url(web: Session, site: FakeDriver) -> None:
    class LoginForm(TopLevelPage):
        page_identifier = "#login-form"

    form = web.open_page_by_url("/login", LoginForm)
    site.url = "http://[::1/login"

    assert web.state is PageState.STALE
    fresh = web.load_top_level_page(LoginForm)
    assert fresh is not form
    assert web.cached_page is fresh


def test_unparsable_url_fails_path_check(web: Session, site: FakeDriver) -> None:
    web.open_page_by_url("/login", LoginPage)
    site.url = "http://[::1/login"

    with pytest.raises(InvalidPageUrlError) as ei:
        web.load_top_level_page(LoginPage)
    assert isinstance(ei.value.cause, ValueError)
    assert web.state is PageState.EMPTY


def test_failed_path_check_leaves_cache_empty(web: Session, site: FakeDriver) -> None:
    web.open_page_by_url("/login", LoginPage)
    site.navigate(f"{BASE}/home")
    assert web.state is PageState.STALE

    with pytest.raises(InvalidPageUrlError):
        web.load_top_level_page(LoginPage)
    assert web.state is PageState.EMPTY
    assert web.cached_page is None


def test_missing_identifier_waits_for_page_load_timeout(web: Session, fake_clock) -> None:
    @web_page_path("/users/42")
    class ProfilePage(TopLevelPage):
        page_identifier = "#profile"

    with pytest.raises(WaitTimeoutError) as ei:
        web.open_page_by_url("/users/42", ProfilePage)
    assert ei.value.timeout == 80
    assert fake_clock.now == pytest.approx(80.0)
    assert web.state is PageState.EMPTY


def test_refresh_keeps_cached_page_identity(web: Session, site: FakeDriver) -> None:
    login = web.open_page_by_url("/login", LoginPage)
    old_username = login.username

    assert web.refresh_page() is None
    assert web.cached_page is login
    assert login.username is not old_username
    assert site.refreshes == 1


def test_refresh_with_class_builds_new_page(web: Session, site: FakeDriver) -> None:
    login = web.open_page_by_url("/login", LoginPage)
    fresh = web.refresh_page(LoginPage)
    assert fresh is not login
    assert web.cached_page is fresh


def test_reload_bypasses_cache(web: Session) -> None:
    login = web.open_page_by_url("/login", LoginPage)
    again = web.reload_top_level_page(LoginPage)
    assert again is not login
    assert web.cached_page is again


def test_page_refresh_rebinds_uncached_page(web: Session) -> None:
    login = web.open_page_by_url("/login", LoginPage)
    web.invalidate_cached_page()
    old_submit = login.submit

    login.refresh_page()
    assert login.submit is not old_submit
    assert web.cached_page is None


def test_leave_hook_runs_before_navigation(web: Session) -> None:
    TrackingLoginPage.left.clear()
    web.open_page_by_url("/login", TrackingLoginPage)
    web.open_page_by_url("/home", HomePage)
    web.refresh_page()
    assert TrackingLoginPage.left == ["TrackingLoginPage"]


def test_resolve_url() -> None:
    session = Session(FakeDriver(), base_url=f"{BASE}/app")
    assert session.resolve_url("/home") == f"{BASE}/app/home"
    assert session.resolve_url("home") == f"{BASE}/app/home"
    assert session.resolve_url("https://elsewhere.test/x") == "https://elsewhere.test/x"


def test_regex_page_path(web: Session) -> None:
    assert isinstance(web.open_page_by_url("/users/42", UserPage), UserPage)
    with pytest.raises(InvalidPageUrlError):
        web.open_page_by_url("/users/abc", UserPage)


@pytest.mark.parametrize(
    "url, expected, regex",
    [
        (f"{BASE}/login", "/login", False),
        (f"{BASE}/ctx/login/", "/login", False),
        (f"{BASE}/login", "/login/", False),
        (f"{BASE}/users/7", r"/users/\d+", True),
    ],
)
def test_verify_path_accepts(url: str, expected: str, regex: bool) -> None:
    verify_path(url, expected, regex=regex)


@pytest.mark.parametrize(
    "url, expected, regex",
    [
        (f"{BASE}/logout", "/login", False),
        (f"{BASE}/login/extra", "/login", False),
        (f"{BASE}/ctx/users/7", r"/users/\d+", True),
    ],
)
def test_verify_path_rejects(url: str, expected: str, regex: bool) -> None:
    with pytest.raises(InvalidPageUrlError):
        verify_path(url, expected, regex=regex)


def test_touch_platform_skips_path_check(site: FakeDriver) -> None:
    site.navigate(f"{BASE}/home")
    web = Session(site, base_url=BASE)
    with pytest.raises(InvalidPageUrlError):
        web.load_top_level_page(ElsewherePage)

    android = Session(site, base_url=BASE, platform=Platform.ANDROID)
    assert isinstance(android.load_top_level_page(ElsewherePage), ElsewherePage)


def test_sub_pages_are_not_cached(web: Session, site: FakeDriver) -> None:
    home = web.open_page_by_url("/home", HomePage)
    header = web.load_sub_page(HeaderBar)

    assert header.has_parent() is False
    assert site.text(header.logout) == "Log out"
    assert web.cached_page is home


def test_sub_page_field_with_wrong_class_is_skipped(web: Session, caplog) -> None:
    @web_page_path("/home")
    class OddPage(TopLevelPage):
        bogus = SubPageField(HomePage)  # type: ignore[type-var]

    with caplog.at_level(logging.WARNING, logger="page_factory"):
        page = web.open_page_by_url("/home", OddPage)
    assert page.bogus is None
    assert "is not a SubPage" in caplog.text


def test_session_utilities(web: Session, site: FakeDriver, tmp_path) -> None:
    web.open_page_by_url("/login", LoginPage)
    web.clean_session()
    shot = web.save_screenshot(tmp_path / "login.png")
    assert site.cookies_cleared is True
    assert site.screenshots == [str(shot)]
    assert web.current_url() == f"{BASE}/login"

    web.quit()
    assert site.quit_called is True
    assert web.state is PageState.EMPTY


def test_actions_page_helpers(web: Session, site: FakeDriver) -> None:
    page = web.actions.open_web_page(f"{BASE}/home")
    assert type(page) is TopLevelPage
    assert web.cached_page is page

    header = web.actions.click_and_load_sub_page("#welcome", HeaderBar)
    assert isinstance(header, HeaderBar)
    assert web.cached_page is page
