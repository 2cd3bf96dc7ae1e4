# SPDX-License-Identifier: LGPL-2.1-or-later

import tempfile
from collections.abc import Iterator
from pathlib import Path
from typing import Any, Callable

import pytest

from sigen.config import BuildRequest
from sigen.log import ARG_DEBUG


@pytest.fixture
def tmpdir_for_initrds(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point tempfile at a private directory so leftover merged initrds can be detected."""
    d = tmp_path / "tmp"
    d.mkdir()
    monkeypatch.setattr(tempfile, "tempdir", str(d))
    return d


@pytest.fixture
def inputs(tmp_path: Path) -> dict[str, Path]:
    d = tmp_path / "inputs"
    d.mkdir()

    inputs = {
        "stub": d / "linuxx64.efi.stub",
        "kernel": d / "vmlinuz",
        "cmdline": d / "cmdline",
        "os_release": d / "os-release",
        "initrd0": d / "microcode.img",
        "initrd1": d / "initrd.img",
        "key": d / "db.key",
        "certificate": d / "db.crt",
    }

    inputs["stub"].write_bytes(b"MZ-stub")
    inputs["kernel"].write_bytes(b"bzImage")
    inputs["cmdline"].write_bytes(b"console=ttyS0 quiet")
    inputs["os_release"].write_bytes(b"ID=test\n")
    inputs["initrd0"].write_bytes(b"ucode")
    inputs["initrd1"].write_bytes(b"070701-cpio")
    inputs["key"].write_bytes(b"KEY")
    inputs["certificate"].write_bytes(b"CERT")

    return inputs


@pytest.fixture
def build_request(tmp_path: Path, inputs: dict[str, Path]) -> Callable[..., BuildRequest]:
    def make(**kwargs: Any) -> BuildRequest:
        defaults: dict[str, Any] = dict(
            kernel=inputs["kernel"],
            cmdline=inputs["cmdline"],
            stub=inputs["stub"],
            output=tmp_path / "linux.efi",
            initrds=(inputs["initrd0"], inputs["initrd1"]),
            os_release=inputs["os_release"],
        )
        return BuildRequest(**(defaults | kwargs))

    return make


@pytest.fixture(autouse=True)
def reset_debug() -> Iterator[None]:
    token = ARG_DEBUG.set(False)
    yield
    ARG_DEBUG.reset(token)
