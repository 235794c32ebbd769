"""Profile store: named Beget credentials persisted as a single JSON document.

The store lives at ``~/.config/beget-cli/config.json`` by default (see
:mod:`begetctl.config`). Reads and writes always operate on the whole
document; writes go through a temporary file in the same directory and an
atomic rename so the document is never observed half-written. The temporary
file is created with owner-only permissions, so the secrets it carries are
never readable by other users, not even briefly.

Concurrent invocations against the same store are not coordinated: two
simultaneous writers race and the last rename wins.
"""
from __future__ import annotations

import json
import os
import tempfile
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path

from .errors import ConfigError

STORE_VERSION = 1
DIR_MODE = 0o700
FILE_MODE = 0o600


@dataclass(frozen=True)
class Profile:
    """A named login/secret pair, optionally bound to a custom API endpoint."""

    login: str
    secret: str
    base_url: str | None = None

    def to_dict(self) -> dict[str, object]:
        """Return the on-disk representation."""
        payload: dict[str, object] = {"login": self.login, "secret": self.secret}
        if self.base_url:
            payload["baseUrl"] = self.base_url
        return payload


@dataclass(frozen=True)
class ProfileStore:
    """Immutable snapshot of the profile document.

    Mutators return a new store; nothing is persisted until :func:`save_store`
    is called, so a command either commits its full change or nothing.
    """

    version: int = STORE_VERSION
    active_profile: str | None = None
    profiles: Mapping[str, Profile] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Lookups
    # ------------------------------------------------------------------
    def __contains__(self, name: object) -> bool:
        return name in self.profiles

    def __iter__(self) -> Iterator[str]:
        return iter(self.profiles)

    def get(self, name: str) -> Profile | None:
        """Return the profile named *name* if present."""
        return self.profiles.get(name)

    def require(self, name: str) -> Profile:
        """Return the profile named *name* or raise :class:`ConfigError`."""
        profile = self.profiles.get(name)
        if profile is None:
            raise ConfigError(f"Profile '{name}' not found")
        return profile

    # ------------------------------------------------------------------
    # Mutators (copy-on-write)
    # ------------------------------------------------------------------
    def with_profile(self, name: str, profile: Profile) -> ProfileStore:
        """Add or replace *name*; the first profile ever added becomes active."""
        name = _normalise_name(name)
        profiles = dict(self.profiles)
        profiles[name] = profile
        active = self.active_profile if self.active_profile else name
        return replace(self, profiles=profiles, active_profile=active)

    def with_active(self, name: str) -> ProfileStore:
        """Mark an existing profile as active."""
        self.require(name)
        return replace(self, active_profile=name)

    def next_active_after_removal(self, name: str) -> str | None:
        """Return the active profile that would remain after removing *name*."""
        if self.active_profile != name:
            return self.active_profile
        return next((key for key in self.profiles if key != name), None)

    def without_profile(self, name: str) -> ProfileStore:
        """Remove *name*, reassigning the active profile when needed."""
        self.require(name)
        next_active = self.next_active_after_removal(name)
        profiles = {key: value for key, value in self.profiles.items() if key != name}
        return replace(self, profiles=profiles, active_profile=next_active)

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_dict(self) -> dict[str, object]:
        """Return the JSON document written to disk."""
        return {
            "version": self.version,
            "activeProfile": self.active_profile,
            "profiles": {name: profile.to_dict() for name, profile in self.profiles.items()},
        }

    @classmethod
    def from_dict(cls, raw: object, *, source: str = "config") -> ProfileStore:
        """Build a store from a decoded JSON document, validating its shape."""
        if not isinstance(raw, Mapping):
            raise ConfigError(f"Config file {source} must contain a JSON object at the top level.")

        version = raw.get("version", STORE_VERSION)
        if isinstance(version, bool) or not isinstance(version, int):
            raise ConfigError(f"Config file {source}: 'version' must be an integer.")

        active = raw.get("activeProfile")
        if active is not None and not isinstance(active, str):
            raise ConfigError(f"Config file {source}: 'activeProfile' must be a string or null.")

        raw_profiles = raw.get("profiles", {})
        if raw_profiles is None:
            raw_profiles = {}
        if not isinstance(raw_profiles, Mapping):
            raise ConfigError(f"Config file {source}: 'profiles' must be an object.")

        profiles: dict[str, Profile] = {}
        for name, entry in raw_profiles.items():
            profiles[str(name)] = _profile_from_entry(entry, name=str(name), source=source)

        return cls(version=version, active_profile=active or None, profiles=profiles)


def _profile_from_entry(entry: object, *, name: str, source: str) -> Profile:
    if not isinstance(entry, Mapping):
        raise ConfigError(f"Config file {source}: profile '{name}' must be an object.")
    login = entry.get("login")
    # Stores written by older releases keep the secret under ``apiKey``.
    secret = entry.get("secret", entry.get("apiKey"))
    base_url = entry.get("baseUrl")
    for label, value in (("login", login), ("secret", secret), ("baseUrl", base_url)):
        if value is not None and not isinstance(value, str):
            raise ConfigError(
                f"Config file {source}: profile '{name}' field '{label}' must be a string."
            )
    return Profile(login=login or "", secret=secret or "", base_url=base_url or None)


def _normalise_name(name: str) -> str:
    normalised = name.strip()
    if not normalised:
        raise ConfigError("Profile name must be a non-empty string.")
    return normalised


def load_store(path: Path) -> ProfileStore:
    """Read the store at *path*; a missing file yields an empty store."""
    path = Path(path).expanduser()
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return ProfileStore()
    except UnicodeDecodeError as exc:
        raise ConfigError(
            f"Failed to read config: {path} is not valid UTF-8 ({exc.reason})"
        ) from exc
    except OSError as exc:
        raise ConfigError(f"Failed to read config: {exc}") from exc

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Failed to read config: {path} is not valid JSON ({exc})") from exc
    return ProfileStore.from_dict(raw, source=str(path))


def save_store(path: Path, store: ProfileStore) -> None:
    """Atomically replace the document at *path* with *store*."""
    path = Path(path).expanduser()
    parent = path.parent
    try:
        _ensure_private_dir(parent)
        tmp_fd, tmp_name = tempfile.mkstemp(dir=str(parent), prefix=f".{path.name}.")
    except OSError as exc:
        raise ConfigError(f"Failed to write config: {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        # mkstemp creates the file as 0600, so the secrets are private from
        # the first byte written.
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
            json.dump(store.to_dict(), handle, indent=2)
            handle.write("\n")
            handle.flush()
            os.fsync(handle.fileno())
        os.chmod(tmp_path, FILE_MODE)
        os.replace(tmp_path, path)
    except OSError as exc:
        raise ConfigError(f"Failed to write config: {exc}") from exc
    finally:
        tmp_path.unlink(missing_ok=True)


def _ensure_private_dir(directory: Path) -> None:
    if directory.exists():
        return
    directory.mkdir(parents=True, mode=DIR_MODE, exist_ok=True)
    # mkdir honours the umask; pin the leaf directory to owner-only.
    os.chmod(directory, DIR_MODE)


__all__ = [
    "DIR_MODE",
    "FILE_MODE",
    "Profile",
    "ProfileStore",
    "STORE_VERSION",
    "load_store",
    "save_store",
]
