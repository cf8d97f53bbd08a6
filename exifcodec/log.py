"""CLI output -- styled terminal messages and the --log file mirror.

Messages are styled with click.style.  click.echo strips the codes itself
when stdout is not a terminal or the context turns colour off (--no-color),
so nothing here needs to know about TTYs.
"""

from datetime import datetime

import click

# Message kind -> click.style arguments
_STYLES = {
    'header': {'fg': 'cyan', 'bold': True},
    'success': {'fg': 'green'},
    'warning': {'fg': 'yellow'},
    'error': {'fg': 'red', 'bold': True},
    'info': {'fg': 'cyan'},
    'dim': {'dim': True},
}


def styled(kind: str, text: str) -> str:
    return click.style(text, **_STYLES[kind])


def cli_header(text: str) -> str:
    """Per-file heading of the dump command."""
    return styled('header', text)


def cli_success(text: str) -> str:
    return styled('success', text)


def cli_warning(text: str) -> str:
    return styled('warning', text)


def cli_error(text: str) -> str:
    return styled('error', text)


def cli_info(text: str) -> str:
    return styled('info', text)


def cli_dim(text: str) -> str:
    return styled('dim', text)


def format_log_line(level: str, msg: str) -> str:
    """Plain, timestamped line for a --log file."""
    stamp = datetime.now().strftime('%Y-%m-%d %H:%M:%S')
    return f'[{stamp}] [{level}] {msg.strip()}'


class LogFile:
    """Echo progress to the terminal and mirror it into an optional log file.

    Use as a context manager; the file is closed on exit.
    """

    def __init__(self, path=None):
        self._file = open(path, 'w') if path else None

    def info(self, msg: str):
        self._emit('INFO', msg, msg)

    def warn(self, msg: str):
        self._emit('WARN', msg, cli_warning(msg))

    def _emit(self, level: str, msg: str, display: str):
        click.echo(display)
        if self._file:
            self._file.write(format_log_line(level, msg) + '\n')

    def close(self):
        if self._file:
            self._file.close()
            self._file = None

    def __enter__(self) -> 'LogFile':
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
