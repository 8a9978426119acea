"""
Migration run report: per-table row counts and role/mapping totals.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List, Optional

logger = logging.getLogger(__name__)


@dataclass
class TableStats:
    """Row counts for one copied table"""
    source_table: str
    destination_table: str
    rows_read: int = 0
    rows_inserted: int = 0


@dataclass
class MigrationReport:
    """Migration progress and results"""
    start_time: datetime = field(default_factory=datetime.now)
    end_time: Optional[datetime] = None

    tables: Dict[str, TableStats] = field(default_factory=dict)
    completed_stages: List[str] = field(default_factory=list)
    failed_stage: Optional[str] = None
    error: Optional[str] = None

    roles_inserted: int = 0
    role_mappings_cleared: int = 0
    mapping_tuples_read: int = 0
    mappings_inserted: int = 0
    mappings_skipped: int = 0

    def table(self, source_table: str, destination_table: str) -> TableStats:
        """Get or create the stats entry for a table"""
        if source_table not in self.tables:
            self.tables[source_table] = TableStats(source_table, destination_table)
        return self.tables[source_table]

    def finish(self):
        self.end_time = datetime.now()

    @property
    def success(self) -> bool:
        return self.failed_stage is None and self.end_time is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration": (self.end_time - self.start_time).total_seconds() if self.end_time else None,
            "tables": {
                name: {
                    "destination": stats.destination_table,
                    "rows_read": stats.rows_read,
                    "rows_inserted": stats.rows_inserted
                }
                for name, stats in self.tables.items()
            },
            "completed_stages": list(self.completed_stages),
            "failed_stage": self.failed_stage,
            "error": self.error,
            "roles_inserted": self.roles_inserted,
            "role_mappings_cleared": self.role_mappings_cleared,
            "mapping_tuples_read": self.mapping_tuples_read,
            "mappings_inserted": self.mappings_inserted,
            "mappings_skipped": self.mappings_skipped,
            "success": self.success
        }

    def write_json(self, path: str):
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        with open(target, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)
        logger.info(f"Run report written to {target}")

    def log_summary(self):
        logger.info("=" * 60)
        logger.info("MIGRATION SUMMARY")
        for stats in self.tables.values():
            logger.info(
                f"  {stats.source_table} -> {stats.destination_table}: "
                f"read {stats.rows_read}, inserted {stats.rows_inserted}"
            )
        logger.info(f"  Roles inserted: {self.roles_inserted}")
        logger.info(
            f"  Role mappings: {self.mappings_inserted} inserted, "
            f"{self.mappings_skipped} skipped of {self.mapping_tuples_read} source tuples"
        )
        if self.failed_stage:
            logger.info(f"  FAILED at stage {self.failed_stage}: {self.error}")
        logger.info("=" * 60)
