# SPDX-License-Identifier: LGPL-2.1-or-later

import contextlib
import logging
import os
import shutil
import tempfile
from collections.abc import Iterator, Sequence
from pathlib import Path
from typing import BinaryIO, Optional

from sigen.errors import IOFailureError, MissingInputError
from sigen.log import complete_step


def concatenate(initrds: Sequence[Path], output: BinaryIO) -> int:
    """
    Append the full contents of each initrd to output, in order, without any framing. The kernel
    unpacks concatenated cpio archives one after the other, so this is all that is needed to combine them.
    Returns the number of bytes written.
    """
    written = 0

    for initrd in initrds:
        try:
            f = open(initrd, "rb")
        except OSError as e:
            raise MissingInputError(f"Failed to find initramfs image {initrd}", path=initrd) from e

        with f:
            try:
                shutil.copyfileobj(f, output)
            except OSError as e:
                raise IOFailureError(
                    f"Failed to append initramfs image {initrd}: {e.strerror}", path=initrd
                ) from e

            size = f.tell()

        logging.debug(f"Appended {initrd} ({size} bytes)")
        written += size

    return written


def remove_merged_initrd(path: Path, *, failing: bool = False) -> None:
    try:
        path.unlink(missing_ok=True)
    except OSError as e:
        if failing:
            # Don't mask the error that got us here.
            logging.warning(f"Failed to remove merged initramfs {path}: {e.strerror}")
            return

        raise IOFailureError(f"Failed to remove merged initramfs {path}: {e.strerror}", path=path) from e


@contextlib.contextmanager
def merge_initrds(initrds: Sequence[Path], directory: Optional[Path] = None) -> Iterator[Path]:
    """
    Concatenate the given initrds into a single temporary file and yield its path. The file is synced
    to disk before it is handed out and is removed again when the context exits, whether or not the build
    succeeded.
    """
    fd, name = tempfile.mkstemp(prefix="sigen-initrd.", dir=directory)
    path = Path(name)

    try:
        with complete_step("Creating combined initramfs…", "Combined initramfs is {0} bytes") as step:
            with os.fdopen(fd, "wb") as f:
                step += [concatenate(initrds, f)]
                try:
                    f.flush()
                    os.fsync(f.fileno())
                except OSError as e:
                    raise IOFailureError(f"Failed to sync {path}: {e.strerror}", path=path) from e

        yield path
    except BaseException:
        remove_merged_initrd(path, failing=True)
        raise

    remove_merged_initrd(path)
