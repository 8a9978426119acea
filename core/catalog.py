"""
Catalog Introspector

Reads a table's live catalog metadata through the adapter and returns it as
a structured TableIR. Rendering to DDL lives in core.ddl_builder.
"""

import logging

from core.schema_ir import ColumnIR, KeyIR, ForeignKeyIR, TableIR

logger = logging.getLogger(__name__)


class CatalogIntrospector:
    """Builds TableIR descriptors from a source adapter's INFORMATION_SCHEMA"""

    def __init__(self, adapter):
        self.adapter = adapter

    def introspect(self, table_name: str) -> TableIR:
        """
        Introspect columns, primary key, unique keys, indexes and foreign keys.

        Any metadata failure propagates as MetadataError; no partial
        descriptor is ever returned.
        """
        logger.info(f"Retrieving schema for table: {table_name}")

        columns = [
            ColumnIR(
                name=row['column_name'],
                type=row['column_type'],
                nullable=row['is_nullable'] != 'NO',
                default_value=row['column_default'],
                extra=row['extra'] or ""
            )
            for row in self.adapter.get_columns(table_name)
        ]

        unique_keys = [
            KeyIR(name=uk['constraint_name'], columns=uk['columns'], unique=True)
            for uk in self.adapter.get_unique_constraints(table_name)
        ]
        indexes = [
            KeyIR(name=idx['name'], columns=idx['columns'])
            for idx in self.adapter.get_indexes(table_name)
        ]
        foreign_keys = [
            ForeignKeyIR(
                name=fk['constraint_name'],
                column=fk['column'],
                ref_table=fk['ref_table'],
                ref_column=fk['ref_column']
            )
            for fk in self.adapter.get_foreign_keys(table_name)
        ]

        table = TableIR(
            name=table_name,
            columns=columns,
            primary_key=self.adapter.get_primary_keys(table_name),
            unique_keys=unique_keys,
            indexes=indexes,
            foreign_keys=foreign_keys
        )
        logger.debug(
            f"{table_name}: {len(columns)} columns, pk={table.primary_key}, "
            f"{len(unique_keys)} unique, {len(indexes)} indexes, {len(foreign_keys)} fks"
        )
        return table
