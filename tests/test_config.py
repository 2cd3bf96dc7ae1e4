# SPDX-License-Identifier: LGPL-2.1-or-later

import os
import platform
from pathlib import Path

import pytest

from sigen.architecture import DEFAULT_STUB_DIR, Architecture, default_stub_path
from sigen.config import OS_RELEASE_PATHS, SigningPair, parse_config
from sigen.log import ARG_DEBUG

REQUIRED = ["--kernel", "/boot/vmlinuz", "--cmdline", "/etc/kernel/cmdline", "--output", "linux.efi"]


def test_parse_config_minimal() -> None:
    args, request = parse_config([*REQUIRED, "--stub", "/stub"], environ={})

    assert not args.debug
    assert request.kernel == Path("/boot/vmlinuz")
    assert request.cmdline == Path("/etc/kernel/cmdline")
    assert request.output == Path("linux.efi")
    assert request.stub == Path("/stub")
    assert request.initrds == ()
    assert request.backup is None
    assert request.sign is None
    assert not request.force
    assert request.os_release in OS_RELEASE_PATHS


def test_parse_config_full() -> None:
    args, request = parse_config(
        [
            *REQUIRED,
            "--stub", "/stub",
            "-i", "/boot/amd-ucode.img",
            "--initrd", "/boot/intel-ucode.img",
            "-i", "/boot/initramfs-linux.img",
            "--backup", "linux.efi.bak",
            "--sign", "db.key", "db.crt",
            "--os-release", "/usr/lib/os-release",
            "--force",
            "--debug",
        ],
        environ={},
    )  # fmt: skip

    assert args.debug
    assert ARG_DEBUG.get()
    assert request.initrds == (
        Path("/boot/amd-ucode.img"),
        Path("/boot/intel-ucode.img"),
        Path("/boot/initramfs-linux.img"),
    )
    assert request.backup == Path("linux.efi.bak")
    assert request.sign == SigningPair(Path("db.key"), Path("db.crt"))
    assert request.os_release == Path("/usr/lib/os-release")
    assert request.force


def test_parse_config_missing_required() -> None:
    with pytest.raises(SystemExit):
        parse_config(["--kernel", "/boot/vmlinuz"], environ={})


def test_parse_config_sign_needs_pair() -> None:
    with pytest.raises(SystemExit):
        parse_config([*REQUIRED, "--stub", "/stub", "--sign", "db.key"], environ={})


def test_parse_config_default_stub(tmp_path: Path) -> None:
    _, request = parse_config([*REQUIRED, "--architecture", "x86-64"], environ={})
    assert request.stub == DEFAULT_STUB_DIR / "linuxx64.efi.stub"

    _, request = parse_config(
        [*REQUIRED, "--architecture", "arm64"],
        environ={"SIGEN_STUB_DIR": os.fspath(tmp_path)},
    )
    assert request.stub == tmp_path / "linuxaa64.efi.stub"


def test_parse_config_explicit_architecture_on_unknown_host(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(platform, "machine", lambda: "pdp11")

    _, request = parse_config([*REQUIRED, "--architecture", "x86-64"], environ={})
    assert request.stub == DEFAULT_STUB_DIR / "linuxx64.efi.stub"

    with pytest.raises(SystemExit):
        parse_config(REQUIRED, environ={})


def test_parse_config_unknown_architecture() -> None:
    with pytest.raises(SystemExit):
        parse_config([*REQUIRED, "--architecture", "pdp11"], environ={})


def test_parse_config_stub_and_architecture() -> None:
    with pytest.raises(SystemExit):
        parse_config([*REQUIRED, "--stub", "/stub", "--architecture", "x86"], environ={})


def test_parse_config_backup_is_output() -> None:
    with pytest.raises(SystemExit):
        parse_config([*REQUIRED, "--stub", "/stub", "--backup", "linux.efi"], environ={})


@pytest.mark.parametrize(
    "arch,name",
    [
        (Architecture.x86_64, "linuxx64.efi.stub"),
        (Architecture.x86, "linuxia32.efi.stub"),
        (Architecture.arm64, "linuxaa64.efi.stub"),
        (Architecture.arm, "linuxarm.efi.stub"),
        (Architecture.riscv64, "linuxriscv64.efi.stub"),
        (Architecture.loongarch64, "linuxloongarch64.efi.stub"),
    ],
)
def test_default_stub_path(arch: Architecture, name: str) -> None:
    assert default_stub_path(arch) == Path("/usr/lib/systemd/boot/efi") / name
    assert default_stub_path(arch, Path("/sysroot/efi")) == Path("/sysroot/efi") / name


def test_default_stub_path_no_uefi() -> None:
    with pytest.raises(SystemExit):
        default_stub_path(Architecture.s390x)


def test_architecture_from_uname() -> None:
    assert Architecture.from_uname("x86_64") == Architecture.x86_64
    assert Architecture.from_uname("i686") == Architecture.x86
    assert Architecture.from_uname("aarch64") == Architecture.arm64
    assert str(Architecture.x86_64) == "x86-64"

    with pytest.raises(SystemExit):
        Architecture.from_uname("pdp11")
