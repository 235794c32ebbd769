"""Profile store tests."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from begetctl.errors import ConfigError
from begetctl.profiles import Profile, ProfileStore, load_store, save_store


def test_load_missing_file_returns_empty_store(tmp_path: Path) -> None:
    """A missing store is not an error."""
    store = load_store(tmp_path / "absent" / "config.json")

    assert store.active_profile is None
    assert dict(store.profiles) == {}


def test_save_and_load_roundtrip_with_private_permissions(tmp_path: Path) -> None:
    """A written store reloads identically and is readable by the owner only."""
    path = tmp_path / "beget-cli" / "config.json"
    store = ProfileStore().with_profile("main", Profile(login="u", secret="s"))

    save_store(path, store)

    assert load_store(path) == store
    assert (path.stat().st_mode & 0o777) == 0o600
    assert (path.parent.stat().st_mode & 0o777) == 0o700
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "version": 1,
        "activeProfile": "main",
        "profiles": {"main": {"login": "u", "secret": "s"}},
    }


def test_save_leaves_no_temporary_files(tmp_path: Path) -> None:
    """Only the final document remains after a write."""
    path = tmp_path / "config.json"

    save_store(path, ProfileStore().with_profile("main", Profile("u", "s")))
    save_store(path, ProfileStore().with_profile("other", Profile("v", "t")))

    assert [entry.name for entry in tmp_path.iterdir()] == ["config.json"]
    assert "other" in load_store(path)


def test_first_profile_becomes_active_and_later_ones_do_not(tmp_path: Path) -> None:
    """Adding profiles keeps the first one active."""
    store = ProfileStore().with_profile("main", Profile("u", "s"))
    store = store.with_profile("backup", Profile("v", "t"))

    assert store.active_profile == "main"
    assert list(store) == ["main", "backup"]


def test_removing_active_profile_reassigns_active() -> None:
    """Removing the active profile activates one of the remaining ones."""
    store = (
        ProfileStore()
        .with_profile("main", Profile("u", "s"))
        .with_profile("backup", Profile("v", "t"))
    )

    updated = store.without_profile("main")

    assert updated.active_profile == "backup"
    assert "main" not in updated


def test_removing_last_profile_clears_active() -> None:
    """Removing the only profile leaves no active profile."""
    store = ProfileStore().with_profile("main", Profile("u", "s"))

    updated = store.without_profile("main")

    assert updated.active_profile is None
    assert list(updated) == []


def test_removing_inactive_profile_keeps_active() -> None:
    """Removing another profile does not touch the active one."""
    store = (
        ProfileStore()
        .with_profile("main", Profile("u", "s"))
        .with_profile("backup", Profile("v", "t"))
    )

    assert store.without_profile("backup").active_profile == "main"


def test_unknown_profile_lookups_raise_config_error() -> None:
    """Referencing an absent profile is a configuration error."""
    store = ProfileStore()

    with pytest.raises(ConfigError, match="Profile 'ghost' not found"):
        store.with_active("ghost")
    with pytest.raises(ConfigError):
        store.without_profile("ghost")


def test_blank_profile_name_rejected() -> None:
    """Profile names must not be blank."""
    with pytest.raises(ConfigError):
        ProfileStore().with_profile("   ", Profile("u", "s"))


def test_malformed_json_raises_config_error(tmp_path: Path) -> None:
    """Invalid JSON surfaces as ConfigError."""
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to read config"):
        load_store(path)


@pytest.mark.parametrize("profiles", [[], "", 0, False])
def test_wrong_shape_raises_config_error(tmp_path: Path, profiles: object) -> None:
    """Structurally invalid documents are rejected, falsy ones included."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"activeProfile": None, "profiles": profiles}), encoding="utf-8")

    with pytest.raises(ConfigError, match="'profiles' must be an object"):
        load_store(path)


def test_legacy_api_key_field_is_read(tmp_path: Path) -> None:
    """Stores that keep the secret under ``apiKey`` still load."""
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "version": 1,
                "activeProfile": "main",
                "profiles": {"main": {"login": "u", "apiKey": "legacy"}},
            }
        ),
        encoding="utf-8",
    )

    store = load_store(path)

    assert store.require("main") == Profile(login="u", secret="legacy")


def test_profile_base_url_is_persisted(tmp_path: Path) -> None:
    """A custom endpoint is stored only when present."""
    path = tmp_path / "config.json"
    store = ProfileStore().with_profile(
        "main",
        Profile("u", "s", base_url="https://api.example.test/api"),
    )

    save_store(path, store)

    raw = json.loads(path.read_text(encoding="utf-8"))
    assert raw["profiles"]["main"]["baseUrl"] == "https://api.example.test/api"
    assert load_store(path).require("main").base_url == "https://api.example.test/api"


def test_write_failure_raises_config_error(tmp_path: Path) -> None:
    """A store whose parent is not a directory cannot be written."""
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to write config"):
        save_store(blocker / "config.json", ProfileStore())


def test_null_profiles_reads_as_empty(tmp_path: Path) -> None:
    """An explicit null profiles map is an empty store."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"activeProfile": None, "profiles": None}), encoding="utf-8")

    assert list(load_store(path)) == []


def test_invalid_utf8_raises_config_error(tmp_path: Path) -> None:
    """Undecodable bytes are malformed content, not an unexpected failure."""
    path = tmp_path / "config.json"
    path.write_bytes(b'{"profiles": {"\xff": {}}}')

    with pytest.raises(ConfigError, match="not valid UTF-8"):
        load_store(path)
