"""단일 슬롯 스냅샷 저장소입니다. / Single-slot snapshot store."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from .models import Snapshot

LOGGER = logging.getLogger("radiosonde.store")


class SnapshotStore:
    """마지막 스냅샷을 보관합니다. / Keeps the last known snapshot.

    ``save`` writes a sibling temp file and renames it over the target, so a
    reader never sees a partially written record. Concurrent writers are not
    arbitrated.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def save(self, snapshot: Snapshot) -> None:
        """스냅샷을 원자적으로 저장합니다. / Atomically persist the snapshot."""

        self.path.parent.mkdir(parents=True, exist_ok=True)
        content = json.dumps(snapshot.model_dump_jsonable(), indent=2)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        tmp_path = Path(tmp_name)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(content)
            os.replace(tmp_path, self.path)
        finally:
            if tmp_path.exists():
                tmp_path.unlink()
        LOGGER.debug("snapshot_saved", extra={"path": str(self.path)})

    def load(self) -> Optional[Snapshot]:
        """마지막 스냅샷을 읽습니다. / Load the last snapshot, if any."""

        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as exc:
            LOGGER.warning(
                "snapshot_corrupt",
                extra={"path": str(self.path), "error": str(exc)},
            )
            return None
        try:
            return Snapshot.model_validate(json.loads(raw.decode("utf-8")))
        except (ValueError, ValidationError) as exc:
            LOGGER.warning(
                "snapshot_corrupt",
                extra={"path": str(self.path), "error": str(exc)},
            )
            return None
