"""Credential resolution for a single invocation.

Every field of :class:`EffectiveCredentials` is resolved independently with
the same precedence: explicit value for this invocation, then the environment,
then the selected profile. The profile itself is selected the same way:
explicit name, then ``BEGET_PROFILE``, then the store's active profile.
"""
from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

from .config import (
    BASE_URL_ENV_VAR,
    DEFAULT_BASE_URL,
    LOGIN_ENV_VAR,
    PROFILE_ENV_VAR,
    SECRET_ENV_VARS,
)
from .errors import AuthError
from .profiles import Profile, ProfileStore

MISSING_CREDENTIALS_MESSAGE = (
    "Missing Beget credentials. Use `beget auth add/use` or set "
    "BEGET_LOGIN + BEGET_API_PASSWORD."
)


@dataclass(frozen=True)
class EnvironmentCredentials:
    """Credential-related values read from the process environment."""

    login: str | None = None
    secret: str | None = None
    profile_name: str | None = None
    base_url: str | None = None

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> EnvironmentCredentials:
        """Collect credential overrides from *env* (defaults to ``os.environ``)."""
        source = os.environ if env is None else env
        return cls(
            login=env_or_none(source, LOGIN_ENV_VAR),
            secret=env_or_none(source, *SECRET_ENV_VARS),
            profile_name=env_or_none(source, PROFILE_ENV_VAR),
            base_url=env_or_none(source, BASE_URL_ENV_VAR),
        )


@dataclass(frozen=True)
class EffectiveCredentials:
    """Credentials used for one remote call. Never persisted."""

    login: str
    secret: str
    base_url: str
    source_profile: str | None = None
    sources: Mapping[str, str] = field(default_factory=dict)

    def to_public_dict(self) -> dict[str, object]:
        """Return a representation that is safe to print (secret masked)."""
        return {
            "login": self.login,
            "secret": mask_secret(self.secret),
            "baseUrl": self.base_url,
            "profile": self.source_profile,
            "sources": dict(self.sources),
        }


def env_or_none(env: Mapping[str, str], *names: str) -> str | None:
    """Return the first non-blank value among *names* in *env*, unmodified."""
    for name in names:
        value = env.get(name)
        if value and value.strip():
            return value
    return None


def mask_secret(secret: str) -> str:
    """Mask all but the last two characters of *secret*."""
    if len(secret) <= 2:
        return "*" * len(secret)
    return "*" * (len(secret) - 2) + secret[-2:]


def select_profile(
    store: ProfileStore,
    *,
    explicit_profile: str | None,
    env_profile: str | None,
) -> tuple[str | None, Profile | None]:
    """Return the selected profile name and profile.

    A name that is selected (by flag, environment, or as the active profile)
    but absent from the store raises :class:`~begetctl.errors.ConfigError`.
    """
    selected = _first_present((explicit_profile, "flag"), (env_profile, "env"))
    name = selected[0] if selected else store.active_profile
    if name is None:
        return None, None
    return name, store.require(name)


def resolve_credentials(
    store: ProfileStore,
    *,
    explicit_login: str | None = None,
    explicit_secret: str | None = None,
    explicit_base_url: str | None = None,
    explicit_profile: str | None = None,
    environment: EnvironmentCredentials | None = None,
    default_base_url: str = DEFAULT_BASE_URL,
) -> EffectiveCredentials:
    """Compute the effective credentials or raise :class:`AuthError`."""
    environment = environment or EnvironmentCredentials()
    profile_name, profile = select_profile(
        store,
        explicit_profile=explicit_profile,
        env_profile=environment.profile_name,
    )

    login = _first_present(
        (explicit_login, "flag"),
        (environment.login, "env"),
        (profile.login if profile else None, "profile"),
    )
    secret = _first_present(
        (explicit_secret, "flag"),
        (environment.secret, "env"),
        (profile.secret if profile else None, "profile"),
        strip=False,
    )
    base_url = _first_present(
        (explicit_base_url, "flag"),
        (environment.base_url, "env"),
        (profile.base_url if profile else None, "profile"),
    ) or (default_base_url, "default")

    if login is None or secret is None:
        raise AuthError(MISSING_CREDENTIALS_MESSAGE)

    return EffectiveCredentials(
        login=login[0],
        secret=secret[0],
        base_url=base_url[0],
        source_profile=profile_name,
        sources={"login": login[1], "secret": secret[1], "baseUrl": base_url[1]},
    )


def _first_present(
    *candidates: tuple[str | None, str],
    strip: bool = True,
) -> tuple[str, str] | None:
    """Return the first non-blank value and its source label; stripped unless *strip* is false."""
    for value, source in candidates:
        if value and value.strip():
            return (value.strip() if strip else value), source
    return None


__all__ = [
    "EffectiveCredentials",
    "EnvironmentCredentials",
    "MISSING_CREDENTIALS_MESSAGE",
    "env_or_none",
    "mask_secret",
    "resolve_credentials",
    "select_profile",
]
