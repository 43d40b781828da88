"""Command line entry point, argv normalization, and logging setup."""

from __future__ import annotations

import os
import sys
import textwrap
from typing import BinaryIO

import scriptconfig as scfg
from loguru import logger

from .config import InjectParams, load_settings
from .errors import UsageError, VMPutError
from .host import check_commands
from .inject import place_file

log = logger

PROG = 'vmput'

# (flag, metavar, help) in the order they are listed in the usage text.
OPTIONS = [
    ('dir', 'string', 'Target directory path on the VM (required)'),
    ('file', 'string', 'Path to the file to be placed on the VM (required)'),
    ('source', 'string', 'Path to local source file to read data from'),
    (
        'stdin',
        '',
        'Read data from standard input (default if neither -stdin nor -source specified)',
    ),
]
_HELP = {name: text for name, _, text in OPTIONS}

VALUE_OPTIONS = {'file', 'dir', 'source', 'config', 'vm'}
FLAG_OPTIONS = {'stdin', 'dry_run'}


class InjectCLI(scfg.DataConfig):
    """Place data as a file in a shut off KVM virtual machine."""

    file = scfg.Value('', type=str, help=_HELP['file'])
    dir = scfg.Value('', type=str, help=_HELP['dir'])
    source = scfg.Value('', type=str, help=_HELP['source'])
    stdin = scfg.Value(False, isflag=True, help=_HELP['stdin'])
    vm = scfg.Value(
        '',
        type=str,
        position=1,
        help='Name of the shut off VM (positional).',
    )
    config = scfg.Value(
        None, help='Path to settings TOML (default: user config dir).'
    )
    verbose = scfg.Value(
        0,
        short_alias=['v'],
        isflag='counter',
        help='Increase verbosity (-v, -vv).',
    )
    dry_run = scfg.Value(
        False, isflag=True, help='Print actions without running.'
    )

    @classmethod
    def main(cls, argv=True, input_stream: BinaryIO | None = None, **kwargs):
        extra: list[str] = []
        if argv is True:
            argv = sys.argv[1:]
        if argv:
            argv, extra = _normalize_argv(list(argv))
        else:
            argv = False
        # The `config` field replaces scriptconfig's own --config option.
        args = cls.cli(
            argv=argv, data=kwargs, strict=True, special_options=False
        )
        params = build_params(args, extra_positionals=extra)
        settings, settings_path = load_settings(args.config)
        log.debug('Settings loaded from {}', settings_path or '(defaults)')
        missing = check_commands(settings)
        if missing:
            log.warning('Missing host commands: {}', ', '.join(missing))
        print(
            place_file(
                params, settings, dry_run=bool(args.dry_run), stdin=input_stream
            )
        )
        return 0


def build_params(args, *, extra_positionals=()) -> InjectParams:
    """Validate parsed options in order and freeze them."""
    target_file = str(args.file or '')
    target_dir = str(args.dir or '')
    source = str(args.source or '')
    if not target_file or not target_dir:
        raise UsageError('Error: -file and -dir options are required')
    if bool(args.stdin) and source:
        raise UsageError('Error: -stdin and -source cannot be used together')
    vm_name = str(args.vm or '')
    if not vm_name or len(extra_positionals) > 0:
        raise UsageError('Error: VM name must be specified')
    return InjectParams(
        vm_name=vm_name,
        target_file=target_file,
        target_dir=target_dir,
        source_path=source or None,
        use_stdin=bool(args.stdin) or not source,
    )


def usage_text(prog: str = PROG) -> str:
    lines = []
    for name, metavar, text in OPTIONS:
        lines.append(f'  -{name} {metavar}'.rstrip())
        lines.append(f'        {text}')
    options = '\n'.join(lines)
    return textwrap.dedent(f"""
    Usage: {prog} [options] VM_NAME

    Place data as a file in a KVM virtual machine.
    Note: For safety, files can only be placed on VMs that are in shutoff state.

    Options:
    {{options}}
      -v, --verbose
            Increase verbosity (-v, -vv)
      --config string
            Path to settings TOML
      --dry_run
            Print actions without running

    Examples:
      # Copy from standard input
      echo "Hello" | {prog} -file hello.txt -dir /home/user vm-name

      # Copy from local file
      {prog} -source /path/to/local/file.txt -file file.txt -dir /home/user vm-name
    """).strip().format(options=options)


def run(
    argv: list[str] | None = None, *, input_stream: BinaryIO | None = None
) -> int:
    """Run one injection and return the process exit code."""
    if argv is None:
        argv = sys.argv[1:]
    argv = list(argv)
    verbosity = 1
    try:
        verbosity = load_settings(_config_value(argv))[0].verbosity
    except (VMPutError, OSError):
        verbosity = 1
    _setup_logging(_count_verbose(argv), verbosity)

    try:
        return InjectCLI.main(argv=argv, input_stream=input_stream)
    except UsageError as ex:
        print(ex, file=sys.stderr)
        print(usage_text(), file=sys.stderr)
        return 1
    except VMPutError as ex:
        print(ex, file=sys.stderr)
        log.debug('{} failed: {}', type(ex).__name__, ex)
        return 1
    except SystemExit as ex:
        # argparse exits on -h/--help and on arguments it cannot parse.
        if ex.code in (0, None):
            return 0
        print(usage_text(), file=sys.stderr)
        return 1


def main(argv: list[str] | None = None) -> None:
    sys.exit(run(argv))


def _setup_logging(args_verbose: int, cfg_verbosity: int) -> None:
    logger.remove()
    effective_verbosity = args_verbose if args_verbose > 0 else cfg_verbosity
    level = 'WARNING'
    if effective_verbosity == 1:
        level = 'INFO'
    elif effective_verbosity >= 2:
        level = 'DEBUG'
    colorize = sys.stderr.isatty() and os.getenv('NO_COLOR') is None
    fmt = '<level>{message}</level>'
    if effective_verbosity >= 2:
        fmt = '<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>'
    logger.add(sys.stderr, level=level, colorize=colorize, format=fmt)
    log.debug(
        'Logging configured at {} (effective_verbosity={}, colorize={})',
        level,
        effective_verbosity,
        colorize,
    )


def _config_value(argv: list[str]) -> str | None:
    for idx, item in enumerate(argv):
        if item in ('--config', '-config'):
            try:
                return argv[idx + 1]
            except IndexError:
                return None
        for prefix in ('--config=', '-config='):
            if item.startswith(prefix):
                return item[len(prefix):]
    return None


def _normalize_argv(argv: list[str]) -> tuple[list[str], list[str]]:
    """
    Rewrite single-dash long flags to scriptconfig spellings.

    ``-file x`` becomes ``--file=x`` and bare boolean flags get an explicit
    ``=True`` so they never swallow the VM name that follows them. Verbosity
    flags collapse into one ``--verbose=N``. Positionals past the first are
    split off and returned separately.
    """
    out: list[str] = []
    positionals: list[str] = []
    verbose = 0
    idx = 0
    while idx < len(argv):
        item = argv[idx]
        idx += 1
        if item == '--':
            positionals.extend(argv[idx:])
            break
        if item == '--verbose':
            verbose += 1
            continue
        if _is_short_verbose(item):
            verbose += len(item) - 1
            continue
        if not item.startswith('-') or item == '-':
            positionals.append(item)
            continue
        name, sep, value = item.lstrip('-').partition('=')
        name = name.replace('-', '_')
        if name in VALUE_OPTIONS or name in FLAG_OPTIONS:
            item = f'--{name}{sep}{value}'
            has_value = bool(sep)
            if name in FLAG_OPTIONS and not has_value:
                item = f'{item}=True'
            elif name in VALUE_OPTIONS and not has_value and idx < len(argv):
                # Joined so a value starting with - is not read as an option.
                out.append(f'{item}={argv[idx]}')
                idx += 1
                continue
        out.append(item)
    if verbose:
        out.append(f'--verbose={verbose}')
    if positionals and positionals[0].startswith('-'):
        # Keep the separator so a VM name starting with - stays positional.
        out.append('--')
    out.extend(positionals[:1])
    return out, positionals[1:]


def _is_short_verbose(item: str) -> bool:
    if item.startswith('-') and not item.startswith('--'):
        short = item[1:]
        return bool(short) and set(short) <= {'v'}
    return False


def _count_verbose(argv: list[str]) -> int:
    """Count -v flags, skipping tokens consumed as option values."""
    count = 0
    idx = 0
    while idx < len(argv):
        item = argv[idx]
        idx += 1
        if item == '--':
            break
        if item == '--verbose':
            count += 1
        elif _is_short_verbose(item):
            count += len(item) - 1
        elif item.startswith('-') and item != '-':
            name, sep, _ = item.lstrip('-').partition('=')
            if name.replace('-', '_') in VALUE_OPTIONS and not sep:
                idx += 1
    return count
