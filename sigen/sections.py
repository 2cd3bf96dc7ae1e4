# SPDX-License-Identifier: LGPL-2.1-or-later

import dataclasses
import os
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from sigen.config import BuildRequest
from sigen.errors import ToolFailureError
from sigen.run import log_process_failure, probe_tool, run
from sigen.util import PathString

# systemd-stub finds its payload by section name. The addresses leave room for each section to grow up to
# the next one, nothing checks that it actually fits.
OSREL_VMA   = 0x20000
CMDLINE_VMA = 0x30000
SPLASH_VMA  = 0x40000
LINUX_VMA   = 0x2000000
INITRD_VMA  = 0x3000000


@dataclasses.dataclass(frozen=True)
class Section:
    name: str
    source: Path
    vma: int


def uki_sections(request: BuildRequest, initrd: Path) -> list[Section]:
    return [
        Section(".osrel",   request.os_release, OSREL_VMA),
        Section(".cmdline", request.cmdline,    CMDLINE_VMA),
        Section(".splash",  Path("/dev/null"),  SPLASH_VMA),
        Section(".linux",   request.kernel,     LINUX_VMA),
        Section(".initrd",  initrd,             INITRD_VMA),
    ]  # fmt: skip


class SectionEmbedder(Protocol):
    tool: str

    def probe(self) -> None: ...

    def embed(self, stub: Path, sections: Sequence[Section], output: Path) -> None: ...


class Objcopy:
    """Adds all sections to a copy of the stub with a single objcopy invocation."""

    def __init__(self, tool: str = "objcopy") -> None:
        self.tool = tool

    def probe(self) -> None:
        probe_tool(self.tool, hint="objcopy is part of binutils")

    def cmdline(self, stub: Path, sections: Sequence[Section], output: Path) -> list[PathString]:
        cmd: list[PathString] = [self.tool]

        for section in sections:
            cmd += [
                "--add-section", f"{section.name}={section.source}",
                "--change-section-vma", f"{section.name}={section.vma:#x}",
            ]  # fmt: skip

        return [*cmd, stub, output]

    def embed(self, stub: Path, sections: Sequence[Section], output: Path) -> None:
        cmd = self.cmdline(stub, sections, output)
        result = run(cmd)
        if result.returncode != 0:
            log_process_failure([os.fspath(a) for a in cmd], result.returncode)
            raise ToolFailureError.from_returncode(self.tool, result.returncode)
