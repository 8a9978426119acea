"""
Declarative per-table migration configuration.

Every table that is copied differently from a plain ``SELECT *`` into a
same-named table is described here, so the copy and DDL code stay generic.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from core.errors import SchemaError
from core.schema_ir import ColumnIR, ForeignKeyIR, TableIR


@dataclass
class TableDescriptor:
    """How one source table is created and copied on the destination"""
    name: str
    destination_name: Optional[str] = None
    projection: Optional[str] = None  # None means SELECT *
    column_renames: Dict[str, str] = field(default_factory=dict)
    extra_columns: List[ColumnIR] = field(default_factory=list)
    extra_foreign_keys: List[ForeignKeyIR] = field(default_factory=list)
    replacement: Optional[TableIR] = None  # discards introspection entirely
    depends_on: List[str] = field(default_factory=list)

    def __post_init__(self):
        if self.replacement is not None and (self.extra_columns or self.extra_foreign_keys or self.column_renames):
            raise SchemaError(
                f"Table {self.name} declares both a replacement schema and structural overrides",
                table=self.name
            )

    @property
    def target(self) -> str:
        return self.destination_name or self.name

    @property
    def source_query(self) -> str:
        return self.projection or f"SELECT * FROM `{self.name}`"

    def destination_columns(self, source_columns: List[str]) -> List[str]:
        """Map result-set column names to destination column names"""
        return [self.column_renames.get(col, col) for col in source_columns]


AUDIT_COLUMNS = [
    ColumnIR('id', 'bigint', nullable=False, extra='AUTO_INCREMENT'),
    ColumnIR('entity_id', 'varchar(255)', nullable=False),
    ColumnIR('modified_date', 'datetime(6)', nullable=False),
    ColumnIR('new_value', 'longtext'),
    ColumnIR('old_value', 'longtext'),
    ColumnIR('actor', 'varchar(255)', nullable=False),
    ColumnIR('actor_type', 'varchar(255)', nullable=False),
    ColumnIR('entity_info', 'varchar(255)'),
    ColumnIR('entity_type', 'varchar(255)', nullable=False),
    ColumnIR('operation', "enum('ADD','DELETE','UPDATE')", nullable=False),
]


def _audit_columns() -> List[ColumnIR]:
    return [ColumnIR(c.name, c.type, c.nullable, c.default_value, c.extra) for c in AUDIT_COLUMNS]


def _authorship_columns() -> List[ColumnIR]:
    return [ColumnIR('created_by', 'varchar(255)'), ColumnIR('updated_by', 'varchar(255)')]


def _team_fk(table: str) -> ForeignKeyIR:
    return ForeignKeyIR(name=f'fk_{table}_team_id', column='team_id', ref_table='team', ref_column='id')


def build_table_descriptors() -> List[TableDescriptor]:
    """The fixed, ordered list of tables copied by a run"""
    return [
        TableDescriptor('timezones'),
        TableDescriptor('admins'),
        TableDescriptor('billing_account'),
        TableDescriptor('team', depends_on=['billing_account']),
        TableDescriptor('users', depends_on=['billing_account']),
        TableDescriptor(
            'roles',
            extra_columns=_authorship_columns() + [
                ColumnIR('type', "enum('BILLING', 'STANDARD', 'CUSTOM')", nullable=False, default_value='STANDARD'),
                ColumnIR('team_id', 'char(36)'),
                ColumnIR('billing_id', 'char(36)'),
            ],
            extra_foreign_keys=[_team_fk('roles')],
            depends_on=['team']
        ),
        TableDescriptor('master_encryption_keys'),
        TableDescriptor('license_table'),
        TableDescriptor('tenant_encryption_keys'),
        TableDescriptor('master_plan_table'),
        TableDescriptor('tenant_plan_table'),
        TableDescriptor('license_store_table'),
        TableDescriptor(
            'app_groups',
            projection=(
                "SELECT ag.id, ag.name, ag.user_id, ag.created_at, ag.updated_at, utm.team_id "
                "FROM app_groups ag LEFT JOIN user_team_mapping utm ON ag.user_id = utm.user_id"
            ),
            extra_columns=_authorship_columns() + [ColumnIR('team_id', 'CHAR(36)')],
            extra_foreign_keys=[_team_fk('app_groups')],
            depends_on=['team', 'users']
        ),
        TableDescriptor(
            'apps',
            projection=(
                "SELECT id, `key` AS key_value, label AS label_value, group_id, created_at, updated_at "
                "FROM apps"
            ),
            column_renames={'key': 'key_value', 'label': 'label_value'},
            extra_columns=_authorship_columns(),
            depends_on=['app_groups']
        ),
        TableDescriptor(
            'audit_logs',
            destination_name='audit_log',
            projection=(
                "SELECT a.email_id AS actor, al.action AS operation, al.target AS entity_type, "
                "'ADMIN' AS actor_type, al.target_id AS entity_id, al.created_at AS modified_date, "
                "al.target_info AS entity_info "
                "FROM audit_logs al LEFT JOIN admins a ON a.id = al.admin_id"
            ),
            replacement=TableIR(name='audit_log', columns=_audit_columns(), primary_key=['id']),
            depends_on=['admins']
        ),
    ]
