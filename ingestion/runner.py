"""
Backup Runner - fetches, projects and persists collections one at a time.

A failure aborts only the collection it happened in: the error is written
to the operational log and the runner moves on to the next collection.
Collections are processed strictly sequentially so a single pager instance
accounts for the remote request rate.
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import logging

from core.exceptions import BackupException
from core.logging import log_error
from ingestion.extractors.notion_pager import NotionPager
from ingestion.loaders.backup_writer import BackupWriter
from ingestion.transformers.projector import TableProjector

logger = logging.getLogger(__name__)


class BackupRunner:
    """
    Backup orchestrator

    Responsibilities:
    - Fetch each collection in full (all-or-nothing)
    - Write the raw artifact, then the tabular artifact
    - Keep going after a collection fails and report which ones did
    """

    def __init__(
        self,
        pager: NotionPager,
        writer: BackupWriter,
        projector: Optional[TableProjector] = None
    ):
        self.pager = pager
        self.writer = writer
        self.projector = projector or TableProjector()

    async def run(self, collections: Sequence[Tuple[str, str]]) -> Dict[str, Any]:
        """
        Back up every collection in order.

        Args:
            collections: (name, collection id) pairs

        Returns:
            Dictionary with run statistics:
            - status: "success", "partial_success" or "failed"
            - succeeded: Names of collections fully backed up
            - failed: Name -> error message for collections that failed
            - artifacts: Name -> written artifact paths
            - log_path: Path of the run log
        """
        succeeded: List[str] = []
        failed: Dict[str, str] = {}
        artifacts: Dict[str, List[str]] = {}

        for name, collection_id in collections:
            logger.info(f"Download data {name}")
            try:
                artifacts[name] = [str(p) for p in await self.backup_collection(name, collection_id)]
                succeeded.append(name)
            except BackupException as e:
                e.context.setdefault("collection", name)
                failed[name] = e.message
                log_error(e, header=f"Backup {name}")
            except Exception as e:
                logger.exception(f"Unexpected error while backing up {name}")
                wrapped = BackupException(
                    "Unexpected error during backup",
                    context={"collection": name, "collection_id": collection_id},
                    original_exception=e
                )
                failed[name] = wrapped.message
                log_error(wrapped, header=f"Backup {name}")

        if not failed:
            status = "success"
        elif succeeded:
            status = "partial_success"
        else:
            status = "failed"

        result = {
            "status": status,
            "succeeded": succeeded,
            "failed": failed,
            "artifacts": artifacts,
            "log_path": str(self.writer.log_path())
        }

        logger.info(
            f"Backup run completed: {status} - "
            f"Succeeded: {len(succeeded)}, Failed: {len(failed)}"
        )
        return result

    async def backup_collection(self, name: str, collection_id: str) -> List[Path]:
        """Fetch one collection and write its artifacts"""
        records = await self.pager.fetch_all(collection_id)
        logger.info(f"Write raw data {name} ({len(records)} records)")
        paths = [self.writer.write_raw(name, records)]

        if not records:
            logger.warning(f"Collection {name} is empty; skipping tabular backup")
            return paths

        logger.info(f"Create tsv-backup {name}")
        table = self.projector.project(records)
        paths.append(self.writer.write_table(name, table))
        return paths

    def rebuild_table(self, name: str, raw_path: Union[str, Path]) -> Path:
        """
        Re-project an existing raw artifact into a new TSV artifact.

        Raises:
            PersistenceError: If the raw artifact cannot be read or the TSV written
            TransformationError: If the records cannot be projected
        """
        records = self.writer.read_raw(raw_path)
        logger.info(f"Rebuilding tsv-backup {name} from {raw_path} ({len(records)} records)")
        table = self.projector.project(records)
        return self.writer.write_table(name, table)
