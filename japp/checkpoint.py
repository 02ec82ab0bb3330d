"""Checkpoint of an in-progress batch run: where it writes and what failed."""

import fcntl
import json
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from japp.models import CheckpointData


class CheckpointManager:
    """
    Persists the output file of a batch run and the topics that failed.

    Finished topics are read back from the output file itself, so the
    checkpoint only has to remember which file that is.
    """

    def __init__(self, checkpoint_path: Path):
        self.checkpoint_path = checkpoint_path
        self._lock_path = checkpoint_path.with_suffix(".lock")
        self._data: Optional[CheckpointData] = None

    @contextmanager
    def _file_lock(self):
        """Context manager for file locking using fcntl."""
        self._lock_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self._lock_path, "w") as lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def _write(self) -> None:
        self.checkpoint_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.checkpoint_path, "w", encoding="utf-8") as f:
            json.dump(self._data.model_dump(), f, ensure_ascii=False, indent=2)

    def load(self) -> CheckpointData:
        """Load checkpoint data from file, or create new if not exists."""
        if self._data is not None:
            return self._data

        with self._file_lock():
            if self.checkpoint_path.exists():
                with open(self.checkpoint_path, "r", encoding="utf-8") as f:
                    self._data = CheckpointData(**json.load(f))
            else:
                self._data = CheckpointData()

        return self._data

    def save(self) -> None:
        """Save current checkpoint data to file."""
        if self._data is None:
            return

        with self._file_lock():
            self._write()

    def start(self, output_path: Path) -> None:
        """
        Begin a fresh run that writes to output_path.

        Any earlier checkpoint state is discarded.
        """
        with self._file_lock():
            self._data = CheckpointData(output_path=str(output_path))
            self._write()

    @property
    def output_path(self) -> Optional[Path]:
        """Output file of the checkpointed run, if one was started."""
        stored = self.load().output_path
        return Path(stored) if stored else None

    def mark_failed(self, topic: str) -> None:
        """Mark a topic as failed."""
        data = self.load()
        if topic not in data.failed_topics:
            data.failed_topics.append(topic)
        self.save()

    def clear_failed(self, topic: str) -> None:
        """Forget an earlier failure of a topic that has now succeeded."""
        data = self.load()
        if topic in data.failed_topics:
            data.failed_topics.remove(topic)
            self.save()

    def get_failed_topics(self) -> list[str]:
        """Get list of topics that failed generation."""
        return self.load().failed_topics.copy()

    def reset(self) -> None:
        """Reset checkpoint to initial state."""
        with self._file_lock():
            self._data = CheckpointData()
            if self.checkpoint_path.exists():
                self.checkpoint_path.unlink()

    @property
    def failed_count(self) -> int:
        return len(self.load().failed_topics)
