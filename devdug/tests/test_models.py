"""Tests for devdug models (host tokens, record invariants, snapshot schema)."""

import json
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from devdug.models import CacheSnapshot, Ecosystem, HostKind, ProjectRecord, VcsHost


def _record(**overrides) -> ProjectRecord:
    fields = dict(
        path="/home/u/Projects/app",
        name="app",
        ecosystems=(Ecosystem.NPM,),
        size_bytes=1024,
        last_modified=datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
    )
    fields.update(overrides)
    return ProjectRecord(**fields)


class TestVcsHostToken:
    def test_well_known(self):
        assert VcsHost.well_known(HostKind.GITHUB).token == "github"

    def test_unknown(self):
        assert VcsHost.unknown().token == "unknown"

    def test_custom_carries_hostname(self):
        assert VcsHost.custom("git.internal.example").token == "custom:git.internal.example"

    def test_parse_custom(self):
        host = VcsHost.from_token("custom:git.internal.example")
        assert host.kind == HostKind.CUSTOM
        assert host.hostname == "git.internal.example"

    def test_parse_well_known(self):
        assert VcsHost.from_token("gitlab") == VcsHost.well_known(HostKind.GITLAB)

    def test_parse_garbage_raises(self):
        with pytest.raises(ValueError, match="unrecognized"):
            VcsHost.from_token("sourceforge")

    def test_bare_custom_raises(self):
        with pytest.raises(ValueError):
            VcsHost.from_token("custom")

    def test_custom_without_hostname_rejected(self):
        with pytest.raises(ValidationError):
            VcsHost(kind=HostKind.CUSTOM)

    def test_well_known_with_hostname_rejected(self):
        with pytest.raises(ValidationError):
            VcsHost(kind=HostKind.GITHUB, hostname="github.com")


class TestProjectRecord:
    def test_defaults_not_version_controlled(self):
        r = _record()
        assert r.is_version_controlled is False
        assert r.vcs_host.is_unknown
        assert r.origin_url is None

    def test_primary_ecosystem_is_first(self):
        r = _record(ecosystems=(Ecosystem.TAURI, Ecosystem.CARGO))
        assert r.primary_ecosystem == Ecosystem.TAURI

    def test_empty_ecosystems_rejected(self):
        with pytest.raises(ValidationError):
            _record(ecosystems=())

    def test_negative_size_rejected(self):
        with pytest.raises(ValidationError):
            _record(size_bytes=-1)

    def test_host_without_origin_rejected(self):
        with pytest.raises(ValidationError, match="unknown"):
            _record(is_version_controlled=True, vcs_host=VcsHost.well_known(HostKind.GITHUB))

    def test_origin_without_vcs_rejected(self):
        with pytest.raises(ValidationError):
            _record(origin_url="https://github.com/o/r", vcs_host=VcsHost.well_known(HostKind.GITHUB))

    def test_url_with_unknown_host_allowed(self):
        r = _record(is_version_controlled=True, origin_url="file-share/repo.git")
        assert r.vcs_host.is_unknown

    def test_frozen(self):
        r = _record()
        with pytest.raises(ValidationError):
            r.name = "other"

    def test_host_serialized_as_token(self):
        r = _record(
            is_version_controlled=True,
            vcs_host=VcsHost.custom("git.example.org"),
            origin_url="https://git.example.org/o/r.git",
        )
        data = json.loads(r.model_dump_json())
        assert data["vcs_host"] == "custom:git.example.org"
        assert data["ecosystems"] == ["npm"]

    def test_host_parsed_from_token(self):
        r = ProjectRecord.model_validate({
            "path": "/p/x",
            "name": "x",
            "ecosystems": ["cargo", "git-repo"],
            "size_bytes": 0,
            "last_modified": "2026-01-01T00:00:00Z",
            "is_version_controlled": True,
            "vcs_host": "github",
            "origin_url": "git@github.com:o/x.git",
        })
        assert r.vcs_host == VcsHost.well_known(HostKind.GITHUB)
        assert r.ecosystems == (Ecosystem.CARGO, Ecosystem.GIT_REPO)


class TestCacheSnapshot:
    def test_json_preserves_every_field(self):
        original = CacheSnapshot(projects=[
            _record(),
            _record(
                path="/p/svc",
                name="svc",
                ecosystems=(Ecosystem.GO, Ecosystem.MAKE, Ecosystem.GIT_REPO),
                is_version_controlled=True,
                vcs_host=VcsHost.custom("git.internal.example"),
                origin_url="https://git.internal.example/org/svc",
            ),
        ])
        restored = CacheSnapshot.model_validate_json(original.model_dump_json())
        assert restored == original

    def test_wrong_version_rejected(self):
        with pytest.raises(ValidationError):
            CacheSnapshot.model_validate_json('{"version": 2, "projects": []}')

    def test_one_bad_record_rejects_all(self):
        good = json.loads(_record().model_dump_json())
        bad = dict(good, ecosystems=[])
        payload = json.dumps({"version": 1, "projects": [good, bad]})
        with pytest.raises(ValidationError):
            CacheSnapshot.model_validate_json(payload)
