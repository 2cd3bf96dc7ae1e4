# SPDX-License-Identifier: LGPL-2.1-or-later

import dataclasses
import enum
import logging
import shutil
from pathlib import Path
from typing import Optional

from sigen.errors import AlreadyExistsError, IOFailureError
from sigen.log import complete_step
from sigen.util import StrEnum, lexists


class OutputState(StrEnum):
    absent  = enum.auto()
    present = enum.auto()


@dataclasses.dataclass(frozen=True)
class OutputSlot:
    path: Path
    state: OutputState

    @classmethod
    def of(cls, path: Path) -> "OutputSlot":
        return cls(path, OutputState.present if lexists(path) else OutputState.absent)


def backup_output(output: Path, backup: Path) -> None:
    with complete_step(f"Backing up {output} to {backup}…"):
        try:
            shutil.copyfile(output, backup)
            shutil.copystat(output, backup)
        except OSError as e:
            raise IOFailureError(f"Failed to back up {output} to {backup}: {e.strerror}", path=backup) from e


def prepare_output(output: Path, *, force: bool = False, backup: Optional[Path] = None) -> OutputSlot:
    """
    Make room for a new output file. Nothing is touched if the output doesn't exist yet. An existing
    output is only removed if --force was passed or if it was backed up first. There's no locking here,
    we assume nobody else is writing to these paths while we're running.
    """
    slot = OutputSlot.of(output)
    if slot.state == OutputState.absent:
        return slot

    if backup:
        if lexists(backup) and not force:
            raise AlreadyExistsError(
                f"Backup file {backup} already exists",
                path=backup,
                hint="Pass --force to overwrite it",
            )

        backup_output(output, backup)
    elif not force:
        raise AlreadyExistsError(
            f"Output file {output} already exists",
            path=output,
            hint="Pass --force to overwrite it or --backup= to move it out of the way",
        )

    logging.info(f"Removing existing output {output}")
    try:
        output.unlink()
    except OSError as e:
        raise IOFailureError(f"Failed to remove {output}: {e.strerror}", path=output) from e

    return slot
