# SPDX-License-Identifier: LGPL-2.1-or-later

import faulthandler
import signal
import sys
from types import FrameType
from typing import Optional

from sigen import build_uki
from sigen._version import __version__
from sigen.config import parse_config
from sigen.log import log_notice, log_setup
from sigen.run import uncaught_exception_handler


def onsigterm(signal: int, frame: Optional[FrameType]) -> None:
    raise KeyboardInterrupt()


@uncaught_exception_handler()
def main() -> None:
    signal.signal(signal.SIGTERM, onsigterm)

    log_setup()
    args, request = parse_config(sys.argv[1:])

    if args.debug:
        faulthandler.enable()

    log_notice(f"sigen {__version__}")
    build_uki(request)


if __name__ == "__main__":
    main()
