"""Filesystem storage for rendered notes."""

import logging
from pathlib import Path

from hnscribe.core.exceptions import NoteStorageError

logger = logging.getLogger("hnscribe")


class NoteStore:
    """Writes notes into a single directory without ever overwriting.

    A name that is already taken gets " (1)", " (2)", ... inserted before
    its extension.
    """

    MAX_ATTEMPTS = 1000

    def __init__(self, output_dir: Path):
        self._output_dir = Path(output_dir)

    @property
    def output_dir(self) -> Path:
        return self._output_dir

    def save(self, filename: str, content: str) -> Path:
        """Create a new note file and return its path.

        Raises:
            NoteStorageError: directory not writable or no free name left
        """
        try:
            self._output_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise NoteStorageError(f"Cannot create output directory {self._output_dir}: {e}")

        for candidate in self._candidates(filename):
            path = self._output_dir / candidate
            try:
                with open(path, 'x', encoding='utf-8') as f:
                    f.write(content)
            except FileExistsError:
                continue
            except OSError as e:
                raise NoteStorageError(f"Failed to write note {path}: {e}")
            logger.info(f"Saved note: {path}")
            return path

        raise NoteStorageError(f"No free filename for {filename}")

    def _candidates(self, filename: str):
        yield filename
        stem, dot, extension = filename.rpartition('.')
        if not dot:
            stem, extension = filename, ''
        suffix = f".{extension}" if extension else ''
        for counter in range(1, self.MAX_ATTEMPTS):
            yield f"{stem} ({counter}){suffix}"
