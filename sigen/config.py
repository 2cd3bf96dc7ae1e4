# SPDX-License-Identifier: LGPL-2.1-or-later

import argparse
import dataclasses
import os
import textwrap
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Optional

from sigen._version import __version__
from sigen.architecture import DEFAULT_STUB_DIR, Architecture, default_stub_path
from sigen.log import ARG_DEBUG, Style, die

OS_RELEASE_PATHS = (Path("/etc/os-release"), Path("/usr/lib/os-release"))


@dataclasses.dataclass(frozen=True)
class SigningPair:
    key: Path
    certificate: Path


@dataclasses.dataclass(frozen=True)
class BuildRequest:
    kernel: Path
    cmdline: Path
    stub: Path
    output: Path
    initrds: tuple[Path, ...] = ()
    backup: Optional[Path] = None
    sign: Optional[SigningPair] = None
    force: bool = False
    os_release: Path = OS_RELEASE_PATHS[0]


@dataclasses.dataclass(frozen=True)
class Args:
    debug: bool


def parse_path(value: str) -> Path:
    if not value:
        raise argparse.ArgumentTypeError("Path cannot be empty")

    return Path(value).expanduser()


def parse_architecture(value: str) -> Architecture:
    try:
        return Architecture(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            f"Unknown architecture {value!r}, expected one of {', '.join(Architecture.values())}"
        )


def finalize_os_release() -> Path:
    for p in OS_RELEASE_PATHS:
        if p.exists():
            return p

    return OS_RELEASE_PATHS[0]


def finalize_stub(
    stub: Optional[Path],
    architecture: Optional[Architecture],
    environ: Mapping[str, str],
) -> Path:
    if stub:
        return stub

    arch = architecture or Architecture.native()
    directory = Path(d) if (d := environ.get("SIGEN_STUB_DIR")) else DEFAULT_STUB_DIR
    return default_stub_path(arch, directory)


def create_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="sigen",
        description="Create a standalone UEFI executable from a kernel, initrds and a command line",
        usage="\n  "
        + textwrap.dedent("""\
              sigen [options…] {b}--kernel{e} PATH {b}--cmdline{e} PATH {b}--output{e} PATH
                sigen -h | --help
                sigen --version
        """).format(b=Style.bold, e=Style.reset),
        allow_abbrev=False,
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s " + __version__,
    )
    parser.add_argument(
        "-k",
        "--kernel",
        required=True,
        type=parse_path,
        help="Path to the kernel image",
        metavar="PATH",
    )
    parser.add_argument(
        "-c",
        "--cmdline",
        required=True,
        type=parse_path,
        help="Path to file containing the default command line arguments",
        metavar="PATH",
    )
    parser.add_argument(
        "-o",
        "--output",
        required=True,
        type=parse_path,
        help="Path to the output file",
        metavar="PATH",
    )
    parser.add_argument(
        "-i",
        "--initrd",
        action="append",
        dest="initrds",
        default=[],
        type=parse_path,
        help="Path to an initramfs file to include (may be repeated, order is preserved)",
        metavar="PATH",
    )
    parser.add_argument(
        "--stub",
        type=parse_path,
        help="Path to the EFI stub (defaults to the systemd stub for the target architecture)",
        metavar="PATH",
    )
    parser.add_argument(
        "--architecture",
        type=parse_architecture,
        help="Architecture used to look up the default stub",
        metavar="ARCH",
    )
    parser.add_argument(
        "--os-release",
        type=parse_path,
        help="Path to the os-release file to embed (defaults to the host's os-release)",
        metavar="PATH",
    )
    parser.add_argument(
        "-b",
        "--backup",
        type=parse_path,
        help="Copy an existing output file here before replacing it",
        metavar="PATH",
    )
    parser.add_argument(
        "--sign",
        nargs=2,
        type=parse_path,
        help="Sign the executable for Secure Boot with the given key and certificate",
        metavar=("KEY", "CERT"),
    )
    parser.add_argument(
        "-f",
        "--force",
        action="store_true",
        default=False,
        help="Overwrite output (and backup) file if it already exists",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Turn on debugging output",
    )

    return parser


def parse_config(
    argv: Sequence[str] = (),
    *,
    environ: Mapping[str, str] = os.environ,
) -> tuple[Args, BuildRequest]:
    ns = create_argument_parser().parse_args(list(argv))

    args = Args(debug=ns.debug)
    if args.debug:
        ARG_DEBUG.set(args.debug)

    if ns.stub and ns.architecture:
        die("--stub= and --architecture= cannot be used together")

    request = BuildRequest(
        kernel=ns.kernel,
        cmdline=ns.cmdline,
        stub=finalize_stub(ns.stub, ns.architecture, environ),
        output=ns.output,
        initrds=tuple(ns.initrds),
        backup=ns.backup,
        sign=SigningPair(*ns.sign) if ns.sign else None,
        force=ns.force,
        os_release=ns.os_release or finalize_os_release(),
    )

    if request.backup and request.backup.absolute() == request.output.absolute():
        die("--backup= must not point to the output file")

    return args, request
