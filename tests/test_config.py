"""Tests for settings loading and injection parameters."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from vmput.config import InjectParams, Settings, load, load_settings
from vmput.errors import UsageError


def test_defaults_when_no_config() -> None:
    settings, path = load_settings(None)
    assert path is None
    assert settings == Settings()
    assert settings.staging_dir() == Path(tempfile.gettempdir())


def test_load_known_keys_and_ignore_unknown(tmp_path: Path) -> None:
    cfg_path = tmp_path / 'vmput.toml'
    cfg_path.write_text(
        '[vmput]\n'
        'libvirt_uri = "qemu:///system"\n'
        'sudo = false\n'
        'verbosity = 2\n'
        f'tmp_dir = "{tmp_path}"\n'
        'bogus = 1\n',
        encoding='utf-8',
    )
    settings = load(cfg_path)
    assert settings.libvirt_uri == 'qemu:///system'
    assert settings.sudo is False
    assert settings.verbosity == 2
    assert settings.staging_dir() == tmp_path
    assert not hasattr(settings, 'bogus')


def test_explicit_config_must_exist(tmp_path: Path) -> None:
    with pytest.raises(UsageError, match='Config not found'):
        load_settings(str(tmp_path / 'missing.toml'))


def test_invalid_toml_is_usage_error(tmp_path: Path) -> None:
    cfg_path = tmp_path / 'bad.toml'
    cfg_path.write_text('[vmput\n', encoding='utf-8')
    with pytest.raises(UsageError, match='Invalid config file'):
        load_settings(str(cfg_path))


def test_user_config_is_used_when_present(monkeypatch, tmp_path: Path) -> None:
    cfg_path = tmp_path / 'config.toml'
    cfg_path.write_text('[vmput]\nverbosity = 0\n', encoding='utf-8')
    monkeypatch.setattr('vmput.config.default_settings_path', lambda: cfg_path)
    settings, path = load_settings(None)
    assert path == cfg_path
    assert settings.verbosity == 0


def test_tmp_dir_expands_user(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv('HOME', str(tmp_path))
    settings = Settings(tmp_dir='~/staging')
    assert settings.staging_dir() == tmp_path / 'staging'


def test_inject_params_source_selection() -> None:
    p = InjectParams('vm', 'a/b/hello.txt', '/home/user')
    assert p.reads_stdin is True
    assert p.staged_name == 'hello.txt'
    p2 = InjectParams('vm', 'hello.txt', '/etc', source_path='/tmp/a.txt')
    assert p2.reads_stdin is False
    with pytest.raises(AttributeError):
        p2.vm_name = 'other'


@pytest.mark.parametrize(
    'line, message',
    [
        ('verbosity = "high"', 'vmput.verbosity must be int'),
        ('sudo = "false"', 'vmput.sudo must be bool'),
        ('verbosity = true', 'vmput.verbosity must be int'),
        ('libvirt_uri = 5', 'vmput.libvirt_uri must be str'),
    ],
)
def test_wrong_value_types_are_rejected(tmp_path: Path, line, message) -> None:
    cfg_path = tmp_path / 'vmput.toml'
    cfg_path.write_text(f'[vmput]\n{line}\n', encoding='utf-8')
    with pytest.raises(UsageError, match=message):
        load(cfg_path)
