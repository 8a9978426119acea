"""
Table Copier

Creates one destination table from source catalog metadata, then streams
the source projection into it row by row.
"""

import logging
from typing import Optional

from core.catalog import CatalogIntrospector
from core.ddl_builder import SchemaSynthesizer, quote_ident
from core.errors import CopyError, QueryError, SchemaError
from core.report import MigrationReport, TableStats
from core.schema_ir import TableIR
from core.table_config import TableDescriptor

logger = logging.getLogger(__name__)


def build_insert_sql(table_name: str, columns) -> str:
    """INSERT INTO `t` (`a`, `b`) VALUES (%s, %s)"""
    column_list = ", ".join(quote_ident(c) for c in columns)
    placeholders = ", ".join(["%s"] * len(columns))
    return f"INSERT INTO {quote_ident(table_name)} ({column_list}) VALUES ({placeholders})"


class TableCopier:
    """Copies tables from a source adapter to a destination adapter"""

    def __init__(self, source, destination, report: Optional[MigrationReport] = None,
                 introspector: Optional[CatalogIntrospector] = None,
                 synthesizer: Optional[SchemaSynthesizer] = None):
        self.source = source
        self.destination = destination
        self.report = report or MigrationReport()
        self.introspector = introspector or CatalogIntrospector(source)
        self.synthesizer = synthesizer or SchemaSynthesizer()

    def create_table(self, descriptor: TableDescriptor) -> str:
        """Create the destination table if absent. Returns the DDL executed."""
        if descriptor.replacement is not None:
            table = TableIR(name=descriptor.name)
        else:
            table = self.introspector.introspect(descriptor.name)

        create_sql = self.synthesizer.build_create_statement(descriptor, table)
        logger.debug(f"DDL for {descriptor.target}: {create_sql}")
        try:
            self.destination.execute(create_sql)
        except QueryError as e:
            raise SchemaError(
                f"error creating table {descriptor.name} in destination database: {e}",
                table=descriptor.name
            ) from e
        logger.info(f"Table {descriptor.target} created successfully in destination database.")
        return create_sql

    def copy_rows(self, descriptor: TableDescriptor) -> TableStats:
        """Stream the source projection into the destination table"""
        stats = self.report.table(descriptor.name, descriptor.target)
        logger.info(f"Migrating data for table: {descriptor.name}")

        try:
            with self.source.stream(descriptor.source_query) as (columns, rows):
                insert_sql = build_insert_sql(descriptor.target, descriptor.destination_columns(columns))
                for row in rows:
                    stats.rows_read += 1
                    self.destination.execute(insert_sql, tuple(row))
                    stats.rows_inserted += 1
        except QueryError as e:
            raise CopyError(
                f"error copying row {stats.rows_read} of table {descriptor.name} "
                f"into {descriptor.target}: {e}",
                table=descriptor.name,
                details={'rows_read': stats.rows_read, 'rows_inserted': stats.rows_inserted}
            ) from e

        logger.info(f"Migrated {stats.rows_read} records from source table {descriptor.name}.")
        logger.info(f"Inserted {stats.rows_inserted} records into destination table {descriptor.target}.")
        return stats

    def copy_table(self, descriptor: TableDescriptor) -> TableStats:
        """Create, then copy. Any failure aborts the table and propagates."""
        logger.info(f"Starting migration for table: {descriptor.name}")
        self.create_table(descriptor)
        stats = self.copy_rows(descriptor)
        logger.info(f"Successfully migrated table: {descriptor.name}")
        return stats
