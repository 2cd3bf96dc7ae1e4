# SPDX-License-Identifier: LGPL-2.1-or-later

import logging
from typing import Optional

from sigen.config import BuildRequest
from sigen.errors import MissingInputError
from sigen.initrd import merge_initrds
from sigen.log import complete_step
from sigen.output import prepare_output
from sigen.sections import Objcopy, SectionEmbedder, uki_sections
from sigen.sign import Sbsign, Signer


def check_inputs(request: BuildRequest) -> None:
    """
    Make sure all the inputs exist before we touch anything on disk. The order matters, the first
    missing input is the one that gets reported.
    """
    inputs = [("stub", request.stub)]

    if request.sign:
        inputs += [
            ("secure boot key", request.sign.key),
            ("secure boot certificate", request.sign.certificate),
        ]

    inputs += [
        ("kernel image", request.kernel),
        ("command line file", request.cmdline),
        ("os-release file", request.os_release),
    ]

    for what, path in inputs:
        if not path.exists():
            raise MissingInputError(f"Failed to find {what} {path}", path=path)
        if not path.is_file():
            raise MissingInputError(f"{what.capitalize()} {path} is not a file", path=path)


def check_tools(embedder: SectionEmbedder, signer: Optional[Signer] = None) -> None:
    embedder.probe()
    if signer:
        signer.probe()


def build_uki(
    request: BuildRequest,
    *,
    embedder: Optional[SectionEmbedder] = None,
    signer: Optional[Signer] = None,
) -> None:
    embedder = embedder or Objcopy()
    signer = (signer or Sbsign()) if request.sign else None

    check_inputs(request)
    check_tools(embedder, signer)

    with merge_initrds(request.initrds) as initrd:
        prepare_output(request.output, force=request.force, backup=request.backup)

        with complete_step("Creating standalone executable…", "Executable creation successful."):
            embedder.embed(request.stub, uki_sections(request, initrd), request.output)

        if request.sign:
            assert signer
            with complete_step(f"Signing {request.output}…"):
                signer.sign(request.sign.key, request.sign.certificate, request.output, request.output)
        else:
            logging.debug("No secure boot key configured, leaving executable unsigned")
