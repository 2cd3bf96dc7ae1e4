# SPDX-License-Identifier: LGPL-2.1-or-later

import signal
from pathlib import Path
from typing import Optional


class SigenError(Exception):
    """Base class for every error that aborts a build."""

    def __init__(self, message: str, *, hint: Optional[str] = None) -> None:
        super().__init__(message)
        self.hint = hint


class MissingInputError(SigenError):
    def __init__(self, message: str, *, path: Path, hint: Optional[str] = None) -> None:
        super().__init__(message, hint=hint)
        self.path = path


class AlreadyExistsError(SigenError):
    def __init__(self, message: str, *, path: Path, hint: Optional[str] = None) -> None:
        super().__init__(message, hint=hint)
        self.path = path


class IOFailureError(SigenError):
    def __init__(self, message: str, *, path: Path, hint: Optional[str] = None) -> None:
        super().__init__(message, hint=hint)
        self.path = path


class ToolUnavailableError(SigenError):
    """The environment lacks a working external tool. Nothing about the inputs is wrong."""

    def __init__(self, message: str, *, tool: str, hint: Optional[str] = None) -> None:
        super().__init__(message, hint=hint)
        self.tool = tool


class ToolFailureError(SigenError):
    def __init__(self, message: str, *, tool: str) -> None:
        super().__init__(message)
        self.tool = tool

    @staticmethod
    def from_returncode(tool: str, returncode: int) -> "ToolFailureError":
        # subprocess reports death by signal N as returncode -N.
        if returncode < 0:
            return ToolTerminatedBySignalError(tool, -returncode)

        return ToolInvocationFailedError(tool, returncode)


class ToolInvocationFailedError(ToolFailureError):
    def __init__(self, tool: str, returncode: int) -> None:
        super().__init__(f"{tool} terminated with code {returncode}", tool=tool)
        self.returncode = returncode


class ToolTerminatedBySignalError(ToolFailureError):
    def __init__(self, tool: str, signum: int) -> None:
        super().__init__(f"{tool} terminated by signal {signal_name(signum)}", tool=tool)
        self.signum = signum


def signal_name(signum: int) -> str:
    try:
        return signal.Signals(signum).name
    except ValueError:
        return str(signum)
