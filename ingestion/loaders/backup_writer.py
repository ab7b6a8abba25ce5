"""
Persist fetched collections as a raw JSON artifact and a TSV artifact
"""

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging

from core.exceptions import PersistenceError
from schemas.table import Table

logger = logging.getLogger(__name__)

FIELD_DELIMITER = "\t"
RUN_TIMESTAMP_FORMAT = "%Y%m%dT%H%M%SZ"


def run_timestamp(now: Optional[datetime] = None) -> str:
    """UTC ISO-8601 basic-format stamp, safe to use in file names"""
    return (now or datetime.now(timezone.utc)).strftime(RUN_TIMESTAMP_FORMAT)


class BackupWriter:
    """
    Write backup artifacts for one run.

    Every artifact name starts with the run stamp, and files are created in
    exclusive mode, so artifacts of different runs never overwrite each other.
    """

    def __init__(
        self,
        data_dir: Union[str, Path],
        timestamp: Optional[str] = None,
        logs_dir: Optional[Union[str, Path]] = None
    ):
        self.data_dir = Path(data_dir)
        self.logs_dir = Path(logs_dir) if logs_dir is not None else None
        self.timestamp = timestamp or run_timestamp()

    def prepare_directories(self) -> List[Path]:
        """Create the data (and log) directories if they do not exist"""
        paths = [self.data_dir] + ([self.logs_dir] if self.logs_dir else [])
        for path in paths:
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise PersistenceError(
                    "Failed to create directory",
                    context={"path": str(path)},
                    original_exception=e
                )
        return paths

    def artifact_path(self, name: str, ext: str) -> Path:
        return self.data_dir / f"{self.timestamp}-{name}.{ext}"

    def log_path(self) -> Path:
        return (self.logs_dir or self.data_dir) / f"{self.timestamp}.log"

    def write_raw(self, name: str, records: List[Dict[str, Any]]) -> Path:
        """
        Write the records exactly as fetched.

        Returns:
            Path of the JSON artifact

        Raises:
            PersistenceError: If the file exists already or cannot be written
        """
        path = self.artifact_path(name, "json")
        self._write(path, json.dumps(records, indent=1, ensure_ascii=False), name)
        logger.info(f"Wrote {len(records)} raw records to {path}")
        return path

    def write_table(self, name: str, table: Table) -> Path:
        """
        Write the header and rows as tab-separated lines.

        Returns:
            Path of the TSV artifact

        Raises:
            PersistenceError: If the file exists already or cannot be written
        """
        path = self.artifact_path(name, "tsv")
        self._write(path, self.render_table(table), name)
        logger.info(f"Wrote {len(table)} rows to {path}")
        return path

    @staticmethod
    def render_table(table: Table) -> str:
        lines = [FIELD_DELIMITER.join(table.header)]
        lines.extend(FIELD_DELIMITER.join(row) for row in table.rows)
        return "\n".join(lines) + "\n"

    @staticmethod
    def read_raw(path: Union[str, Path]) -> List[Dict[str, Any]]:
        """
        Re-read a raw artifact.

        Raises:
            PersistenceError: If the file is unreadable or not a JSON list
        """
        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(
                "Failed to read raw artifact",
                context={"path": str(path)},
                original_exception=e
            )

        if not isinstance(data, list):
            raise PersistenceError(
                "Raw artifact does not contain a list of records",
                context={"path": str(path), "found": type(data).__name__}
            )
        return data

    @staticmethod
    def _write(path: Path, content: str, name: str):
        try:
            with path.open("x", encoding="utf-8", newline="\n") as f:
                f.write(content)
        except OSError as e:
            raise PersistenceError(
                "Failed to write artifact",
                context={"path": str(path), "collection": name},
                original_exception=e
            )
