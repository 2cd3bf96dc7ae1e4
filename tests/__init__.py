# SPDX-License-Identifier: LGPL-2.1-or-later

import dataclasses
from collections.abc import Sequence
from pathlib import Path

from sigen.errors import ToolFailureError, ToolUnavailableError
from sigen.sections import Section


@dataclasses.dataclass
class EmbedCall:
    stub: Path
    sections: list[Section]
    output: Path
    # Contents of each section source at the time of the call, the merged initrd is gone afterwards.
    contents: dict[str, bytes]


class FakeEmbedder:
    """Writes the stub followed by every section's contents to the output instead of running objcopy."""

    tool = "fake-objcopy"

    def __init__(self, returncode: int = 0, available: bool = True) -> None:
        self.returncode = returncode
        self.available = available
        self.calls: list[EmbedCall] = []

    def probe(self) -> None:
        if not self.available:
            raise ToolUnavailableError(f"Could not find '{self.tool}'", tool=self.tool)

    def embed(self, stub: Path, sections: Sequence[Section], output: Path) -> None:
        contents = {s.name: s.source.read_bytes() for s in sections}
        self.calls.append(EmbedCall(stub, list(sections), output, contents))

        if self.returncode != 0:
            raise ToolFailureError.from_returncode(self.tool, self.returncode)

        output.write_bytes(stub.read_bytes() + b"".join(contents.values()))


@dataclasses.dataclass
class SignCall:
    key: Path
    certificate: Path
    input: Path
    output: Path


class FakeSigner:
    tool = "fake-sbsign"

    def __init__(self, returncode: int = 0, available: bool = True) -> None:
        self.returncode = returncode
        self.available = available
        self.calls: list[SignCall] = []

    def probe(self) -> None:
        if not self.available:
            raise ToolUnavailableError(f"Could not find '{self.tool}'", tool=self.tool)

    def sign(self, key: Path, certificate: Path, input: Path, output: Path) -> None:
        self.calls.append(SignCall(key, certificate, input, output))

        if self.returncode != 0:
            raise ToolFailureError.from_returncode(self.tool, self.returncode)

        output.write_bytes(b"SIGNED" + input.read_bytes())


def write_script(path: Path, body: str) -> Path:
    path.write_text(f"#!/bin/sh\n{body}\n")
    path.chmod(0o755)
    return path


def leftover_initrds(directory: Path) -> list[Path]:
    return sorted(directory.glob("sigen-initrd.*"))

