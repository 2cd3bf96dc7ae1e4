# SPDX-License-Identifier: LGPL-2.1-or-later

import contextlib
import logging
import os
import shlex
import shutil
import signal
import subprocess
import sys
from collections.abc import Iterator, Sequence
from types import TracebackType
from typing import TYPE_CHECKING, Callable, NoReturn, Optional

from sigen.errors import SigenError, ToolInvocationFailedError, ToolUnavailableError, signal_name
from sigen.log import ARG_DEBUG, die
from sigen.util import _FILE, PathString

# These types are only generic during type checking and not at runtime, leading
# to a TypeError during compilation.
# Let's be as strict as we can with the description for the usage we have.
if TYPE_CHECKING:
    CompletedProcess = subprocess.CompletedProcess[str]
    Popen = subprocess.Popen[str]
else:
    CompletedProcess = subprocess.CompletedProcess
    Popen = subprocess.Popen


def ensure_exc_info() -> tuple[type[BaseException], BaseException, TracebackType]:
    exctype, exc, tb = sys.exc_info()
    assert exctype
    assert exc
    assert tb
    return (exctype, exc, tb)


@contextlib.contextmanager
def uncaught_exception_handler(exit: Callable[[int], NoReturn] = sys.exit) -> Iterator[None]:
    rc = 0
    try:
        yield
    except SystemExit as e:
        rc = e.code if isinstance(e.code, int) else 1

        if ARG_DEBUG.get():
            sys.excepthook(*ensure_exc_info())
    except KeyboardInterrupt:
        rc = 1

        if ARG_DEBUG.get():
            sys.excepthook(*ensure_exc_info())
        else:
            logging.error("Interrupted")
    except SigenError as e:
        # Tool failures keep the tool's exit code so wrappers can tell them apart.
        rc = e.returncode if isinstance(e, ToolInvocationFailedError) else 1

        logging.error(f"{e}")
        if e.hint:
            logging.info(f"({e.hint})")

        if ARG_DEBUG.get():
            sys.excepthook(*ensure_exc_info())
    except BaseException:
        sys.excepthook(*ensure_exc_info())
        rc = 1
    finally:
        sys.stdout.flush()
        sys.stderr.flush()
        exit(rc)


def log_process_failure(cmdline: Sequence[str], returncode: int) -> None:
    if -returncode in (signal.SIGINT, signal.SIGTERM):
        logging.error(f"Interrupted by {signal_name(-returncode)} signal")
    elif returncode < 0:
        logging.error(f'"{shlex.join(cmdline)}" was killed by {signal_name(-returncode)} signal.')
    elif returncode == 127:
        logging.error(f"{cmdline[0]} not found.")
    else:
        logging.error(f'"{shlex.join(cmdline)}" returned non-zero exit code {returncode}.')


def run(
    cmdline: Sequence[PathString],
    stdout: _FILE = None,
    stderr: _FILE = None,
) -> CompletedProcess:
    """Run a command to completion. The caller decides what a non-zero exit status means."""
    with spawn(cmdline, stdout=stdout, stderr=stderr) as process:
        out, err = process.communicate()

    return CompletedProcess(cmdline, process.returncode, out, err)


@contextlib.contextmanager
def spawn(
    cmdline: Sequence[PathString],
    stdout: _FILE = None,
    stderr: _FILE = None,
) -> Iterator[Popen]:
    cmd = [os.fspath(x) for x in cmdline]

    if ARG_DEBUG.get():
        logging.info(f"+ {shlex.join(cmd)}")

    if not stdout and not stderr:
        # Unless explicit redirection is done, print all subprocess output on stderr, since we do so as well
        # for sigen's own output.
        stdout = sys.stderr

    env = {
        "PATH": os.environ["PATH"],
        "TERM": os.getenv("TERM", "vt220"),
        "LANG": "C.UTF-8",
    }

    if "TMPDIR" in os.environ:
        env["TMPDIR"] = os.environ["TMPDIR"]

    try:
        proc = subprocess.Popen(
            cmd,
            stdin=subprocess.DEVNULL,
            stdout=stdout,
            stderr=stderr,
            text=True,
            env=env,
        )
    except FileNotFoundError as e:
        die(f"{e.filename} not found.")

    try:
        yield proc
        proc.wait()
    except KeyboardInterrupt:
        proc.send_signal(signal.SIGINT)
        raise
    except BaseException:
        proc.terminate()
        raise
    finally:
        proc.wait()


def find_binary(*names: PathString, path: Optional[str] = None) -> Optional[PathString]:
    for name in names:
        if binary := shutil.which(name, path=path):
            return binary

    return None


def probe_tool(tool: str, *args: str, hint: Optional[str] = None) -> PathString:
    """
    Make sure the given tool can be found in $PATH and runs successfully with the given arguments
    (--version by default). Output of the probe is discarded.
    """
    binary = find_binary(tool)
    if not binary:
        raise ToolUnavailableError(f"Could not find '{tool}'", tool=tool, hint=hint)

    result = run(
        [binary, *(args or ("--version",))],
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )
    if result.returncode != 0:
        raise ToolUnavailableError(
            f"'{tool}' cannot be invoked (exit status {result.returncode})",
            tool=tool,
            hint=hint,
        )

    logging.debug(f"Found {tool} at {binary}")
    return binary
