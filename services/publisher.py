"""Atomic publishing of the now-playing image."""
from __future__ import annotations

import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

from core.errors import PublishError
from utils.logger import get_logger

logger = get_logger(__name__)


class ArtworkPublisher:
    """
    Owns the single published file. Each publish writes a uniquely named
    temp file next to the target and renames it into place, so readers see
    either the old or the new image and never a partial one.
    """

    def __init__(self, output_path: Path | str) -> None:
        self.output_path = Path(output_path)
        self._lock = threading.Lock()
        self._last_sequence: Optional[int] = None

    @property
    def last_sequence(self) -> Optional[int]:
        return self._last_sequence

    def ensure_directory(self) -> None:
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise PublishError(f"Failed to create output directory {self.output_path.parent}: {exc}") from exc

    def publish(self, data: bytes, sequence: Optional[int] = None) -> bool:
        """
        Replace the published file with ``data``.

        Returns False when ``sequence`` is older than the last published one
        and the render was dropped. Raises PublishError on I/O failure; the
        previous file is left as it was.
        """
        tmp_path = self._write_temp(data)
        try:
            with self._lock:
                if self._is_stale(sequence):
                    logger.info(
                        f"Discarding stale render #{sequence} (already published #{self._last_sequence})"
                    )
                    self._remove(tmp_path)
                    return False
                os.replace(tmp_path, self.output_path)
                if sequence is not None:
                    self._last_sequence = sequence
        except OSError as exc:
            self._remove(tmp_path)
            raise PublishError(f"Failed to replace {self.output_path}: {exc}") from exc

        logger.debug(f"Published {len(data)} bytes → {self.output_path}")
        return True

    def _is_stale(self, sequence: Optional[int]) -> bool:
        if sequence is None or self._last_sequence is None:
            return False
        return sequence < self._last_sequence

    def _write_temp(self, data: bytes) -> Path:
        tmp_name: Optional[str] = None
        try:
            with tempfile.NamedTemporaryFile(
                mode="wb",
                dir=self.output_path.parent,
                prefix=f".{self.output_path.name}.",
                suffix=".tmp",
                delete=False,
            ) as fh:
                tmp_name = fh.name
                fh.write(data)
                fh.flush()
                os.fsync(fh.fileno())
            # Temp files are created 0600; the static server may run as another user.
            os.chmod(tmp_name, 0o644)
        except OSError as exc:
            if tmp_name:
                self._remove(Path(tmp_name))
            raise PublishError(f"Failed to write temp file for {self.output_path}: {exc}") from exc
        return Path(tmp_name)

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as exc:
            logger.warning(f"Could not remove temp file {path}: {exc}")
