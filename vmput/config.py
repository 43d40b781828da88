"""Runtime settings and the validated parameters of a single injection."""

from __future__ import annotations

import tempfile
import tomllib
from dataclasses import dataclass, fields
from pathlib import Path

import ubelt as ub

from .errors import UsageError
from .util import expand

SECTION = 'vmput'


@dataclass
class Settings:
    libvirt_uri: str = ''
    sudo: bool = True
    verbosity: int = 1
    tmp_dir: str = ''
    virsh: str = 'virsh'
    copy_in: str = 'virt-copy-in'

    def staging_dir(self) -> Path:
        if self.tmp_dir:
            return Path(expand(self.tmp_dir))
        return Path(tempfile.gettempdir())


@dataclass(frozen=True)
class InjectParams:
    """What to copy, from where, and into which VM."""

    vm_name: str
    target_file: str
    target_dir: str
    source_path: str | None = None
    use_stdin: bool = False

    @property
    def reads_stdin(self) -> bool:
        return not self.source_path

    @property
    def staged_name(self) -> str:
        return Path(self.target_file).name


def default_settings_path() -> Path:
    return Path(ub.Path.appdir('vmput', type='config')) / 'config.toml'


def load(path: Path) -> Settings:
    try:
        raw = tomllib.loads(path.read_text(encoding='utf-8'))
    except tomllib.TOMLDecodeError as ex:
        raise UsageError(f'Invalid config file {path}: {ex}') from ex
    settings = Settings()
    sec = raw.get(SECTION, {})
    if isinstance(sec, dict):
        expected = {f.name: type(f.default) for f in fields(Settings)}
        for k, v in sec.items():
            if k not in expected:
                continue
            # Exact type match: TOML booleans must not pass as integers.
            if type(v) is not expected[k]:
                raise UsageError(
                    f'Invalid config file {path}: {SECTION}.{k} must be '
                    f'{expected[k].__name__}, got {v!r}'
                )
            setattr(settings, k, v)
    return settings


def load_settings(config_path: str | None = None) -> tuple[Settings, Path | None]:
    """
    Resolve settings from an explicit path, else the per-user config file.

    Returns the settings and the file they came from (None for defaults).
    """
    if config_path:
        path = Path(expand(config_path))
        if not path.exists():
            raise UsageError(f'Config not found: {path}')
        return load(path), path
    path = default_settings_path()
    if path.exists():
        return load(path), path
    return Settings(), None
