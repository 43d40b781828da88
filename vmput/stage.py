"""Stage injection input into a temporary file that virt-copy-in can read by path."""

from __future__ import annotations

import shutil
import sys
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, Iterator

from loguru import logger

from .config import InjectParams, Settings
from .errors import StagingError

log = logger


def staged_path(params: InjectParams, settings: Settings) -> Path:
    return settings.staging_dir() / params.staged_name


def _copy_source(params: InjectParams, dst: BinaryIO, stdin: BinaryIO) -> None:
    if params.source_path:
        log.info('Reading data from file: {}', params.source_path)
        try:
            src = open(params.source_path, 'rb')
        except OSError as ex:
            raise StagingError(f'Error: Failed to open source file: {ex}') from ex
        with src:
            try:
                shutil.copyfileobj(src, dst)
            except OSError as ex:
                raise StagingError(
                    f'Error: Failed to copy data from source file: {ex}'
                ) from ex
    else:
        log.info('Reading data from standard input...')
        try:
            shutil.copyfileobj(stdin, dst)
        except OSError as ex:
            raise StagingError(
                f'Error: Failed to read data from standard input: {ex}'
            ) from ex


@contextmanager
def staged_input(
    params: InjectParams,
    settings: Settings,
    *,
    stdin: BinaryIO | None = None,
) -> Iterator[Path]:
    """
    Materialize the chosen input source as a closed temporary file.

    The file is named after the base name of ``params.target_file`` inside
    the staging directory and is removed when the context exits, whether
    the body succeeds or raises.
    """
    if stdin is None:
        stdin = sys.stdin.buffer
    path = staged_path(params, settings)
    try:
        fp = open(path, 'wb')
    except OSError as ex:
        raise StagingError(f'Error: Failed to create temporary file: {ex}') from ex
    try:
        try:
            _copy_source(params, fp, stdin)
        finally:
            if not fp.closed:
                try:
                    fp.close()
                except OSError as ex:
                    raise StagingError(
                        f'Error: Failed to close temporary file: {ex}'
                    ) from ex
        log.debug('Staged {} bytes at {}', path.stat().st_size, path)
        yield path
    finally:
        path.unlink(missing_ok=True)
        log.debug('Removed staged file {}', path)
