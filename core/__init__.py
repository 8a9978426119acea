"""
Platform Migrator core: catalog introspection, DDL synthesis, table copy,
role seeding and role-mapping reconciliation.
"""

from core.errors import MigrationError, ErrorCode
from core.pipeline import MigrationPipeline, Stage, build_default_pipeline
from core.report import MigrationReport

__all__ = [
    'MigrationError',
    'ErrorCode',
    'MigrationPipeline',
    'Stage',
    'build_default_pipeline',
    'MigrationReport',
]
