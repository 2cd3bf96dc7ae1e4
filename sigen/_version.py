# SPDX-License-Identifier: LGPL-2.1-or-later
# The version is obtained from the environment variable SIGEN_VERSION if set, otherwise from the metadata of
# the installed distribution, as long as that metadata pertains to this very file. If neither works the
# version is set to "0".

import importlib.metadata
import logging
import os
from importlib.metadata import PackageNotFoundError
from pathlib import Path
from typing import Optional


def version_from_metadata() -> Optional[str]:
    try:
        dist = importlib.metadata.distribution("sigen")

        this_file = dist.locate_file("sigen/_version.py")
        # If the file importlib.metadata thinks we are talking about is not this one, let's pretend we didn't
        # find anything at all and fall back
        if this_file != Path(__file__):
            return None

        return importlib.metadata.version("sigen")
    except PackageNotFoundError:
        return None


def version_fallback() -> str:
    logging.debug("Unable to determine sigen version")
    return "0"


__version__ = os.getenv("SIGEN_VERSION") or version_from_metadata() or version_fallback()
