# SPDX-License-Identifier: LGPL-2.1-or-later

import os
from pathlib import Path
from typing import Protocol

from sigen.errors import ToolFailureError
from sigen.run import log_process_failure, probe_tool, run
from sigen.util import PathString


class Signer(Protocol):
    tool: str

    def probe(self) -> None: ...

    def sign(self, key: Path, certificate: Path, input: Path, output: Path) -> None: ...


class Sbsign:
    def __init__(self, tool: str = "sbsign") -> None:
        self.tool = tool

    def probe(self) -> None:
        probe_tool(self.tool, hint="sbsign is part of sbsigntools")

    def cmdline(self, key: Path, certificate: Path, input: Path, output: Path) -> list[PathString]:
        return [
            self.tool,
            "--key", key,
            "--cert", certificate,
            "--output", output,
            input,
        ]  # fmt: skip

    def sign(self, key: Path, certificate: Path, input: Path, output: Path) -> None:
        # sbsign reads the whole input before writing the output so input and output may be the same file.
        cmd = self.cmdline(key, certificate, input, output)
        result = run(cmd)
        if result.returncode != 0:
            log_process_failure([os.fspath(a) for a in cmd], result.returncode)
            raise ToolFailureError.from_returncode(self.tool, result.returncode)
