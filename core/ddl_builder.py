"""
Schema Synthesizer

Composes an introspected TableIR and a TableDescriptor's structural
overrides into MySQL ``CREATE TABLE IF NOT EXISTS`` DDL.
"""

import logging
import re
from dataclasses import replace
from typing import List

from core.schema_ir import ColumnIR, KeyIR, ForeignKeyIR, TableIR
from core.table_config import TableDescriptor

logger = logging.getLogger(__name__)

_CURRENT_TIMESTAMP = re.compile(r'^CURRENT_TIMESTAMP(\(\d*\))?$', re.IGNORECASE)


def quote_ident(identifier: str) -> str:
    return f"`{identifier}`"


def _is_uuid_key(col: ColumnIR) -> bool:
    # Generated by the application, never by a column default
    return col.name == 'id' and col.type.lower() == 'char(36)'


def _render_default(value: str) -> str:
    if value.endswith('()') or _CURRENT_TIMESTAMP.match(value):
        return value
    return "'" + value.replace("'", "''") + "'"


def render_column(col: ColumnIR) -> str:
    """`name` type [NOT NULL] [DEFAULT default] [extra]"""
    parts = [quote_ident(col.name), col.type]
    if not col.nullable:
        parts.append("NOT NULL")
    if col.default_value is not None and not _is_uuid_key(col):
        parts.append(f"DEFAULT {_render_default(col.default_value)}")
    if col.extra and 'GENERATED' not in col.extra.upper():
        parts.append(col.extra)
    return " ".join(parts)


def render_primary_key(columns: List[str]) -> str:
    return f"PRIMARY KEY ({', '.join(quote_ident(c) for c in columns)})"


def render_key(key: KeyIR) -> str:
    kind = "UNIQUE KEY" if key.unique else "KEY"
    return f"{kind} {quote_ident(key.name)} ({','.join(quote_ident(c) for c in key.columns)})"


def render_foreign_key(fk: ForeignKeyIR) -> str:
    return (
        f"CONSTRAINT {quote_ident(fk.name)} FOREIGN KEY ({quote_ident(fk.column)}) "
        f"REFERENCES {quote_ident(fk.ref_table)} ({quote_ident(fk.ref_column)})"
    )


class SchemaSynthesizer:
    """Applies per-table overrides and renders destination DDL"""

    def apply_overrides(self, descriptor: TableDescriptor, table: TableIR) -> TableIR:
        """Return the destination shape of a table; the input is not modified."""
        if descriptor.replacement is not None:
            logger.debug(f"{descriptor.name}: introspected schema replaced by fixed definition")
            return replace(
                descriptor.replacement,
                name=descriptor.target,
                columns=list(descriptor.replacement.columns),
                primary_key=list(descriptor.replacement.primary_key),
                unique_keys=list(descriptor.replacement.unique_keys),
                indexes=list(descriptor.replacement.indexes),
                foreign_keys=list(descriptor.replacement.foreign_keys)
            )

        renames = descriptor.column_renames
        columns = list(table.columns)
        for old_name, new_name in renames.items():
            for i, col in enumerate(columns):
                if col.name == old_name:
                    columns[i] = replace(col, name=new_name)
                    break

        def renamed(names: List[str]) -> List[str]:
            return [renames.get(name, name) for name in names]

        return TableIR(
            name=descriptor.target,
            columns=columns + list(descriptor.extra_columns),
            primary_key=renamed(table.primary_key),
            unique_keys=[replace(key, columns=renamed(key.columns)) for key in table.unique_keys],
            indexes=[replace(idx, columns=renamed(idx.columns)) for idx in table.indexes],
            foreign_keys=[replace(fk, column=renames.get(fk.column, fk.column)) for fk in table.foreign_keys]
            + list(descriptor.extra_foreign_keys)
        )

    def render_body(self, table: TableIR) -> str:
        """Comma-joined column list, primary key, unique keys, indexes, foreign keys"""
        parts = [render_column(col) for col in table.columns]
        if table.primary_key:
            parts.append(render_primary_key(table.primary_key))
        parts.extend(render_key(key) for key in table.unique_keys)
        parts.extend(render_key(idx) for idx in table.indexes)
        parts.extend(render_foreign_key(fk) for fk in table.foreign_keys)
        return ", ".join(parts)

    def build_create_statement(self, descriptor: TableDescriptor, table: TableIR) -> str:
        destination = self.apply_overrides(descriptor, table)
        return f"CREATE TABLE IF NOT EXISTS {quote_ident(destination.name)} ({self.render_body(destination)})"
