"""
Centralized settings (environment variables / .env) for sessions and the CLI.
Timeout values live here too; `timeout_policy()` freezes them into a TimeoutPolicy.
"""
# @file purpose: Centralized settings using Pydantic Settings.

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

from .timeouts import TimeoutPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="PF_", env_file=".env", extra="ignore")

    base_url: str = "http://localhost:8080"
    headless: bool = True
    browser: Literal["chromium", "firefox", "webkit"] = "chromium"
    platform: Literal["web", "chrome", "firefox", "ie", "safari", "android", "ios"] = "web"
    log_level: str = "INFO"

    click_timeout_seconds: int = 5
    presence_timeout_seconds: int = 5
    visibility_timeout_seconds: int = 5
    selection_timeout_seconds: int = 5
    page_load_timeout_seconds: int = 80
    page_ready_timeout_seconds: int = 10
    page_refresh_timeout_seconds: int = 5
    polling_with_refresh_timeout_seconds: int = 30
    short_timeout_seconds: int = 1
    medium_timeout_seconds: int = 5
    long_timeout_seconds: int = 20
    poll_interval_millis: int = 100
    pause_between_keys_millis: int = 50
    pause_between_tries_millis: int = 200
    pause_between_refresh_seconds: int = 5
    implicit_wait_millis: int = 2000

    def timeout_policy(self) -> TimeoutPolicy:
        fields = TimeoutPolicy.model_fields.keys()
        return TimeoutPolicy.build(**{name: getattr(self, name) for name in fields})


settings = Settings()
