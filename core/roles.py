"""
Role seeding and user-to-role mapping reconciliation.

Roles are regenerated on the destination for every team; user role
assignments are then re-derived from the source relations and resolved
against the freshly generated role ids.
"""

import logging
from typing import Callable, Optional, Tuple

from core.errors import QueryError, ReconcileError, RoleNotFoundError, RoleSeedError, SchemaError
from core.report import MigrationReport
from utils.helpers import generate_identifier

logger = logging.getLogger(__name__)

ROLES_TABLE = 'roles'
TEAM_TABLE = 'team'
MAPPING_TABLE = 'user_roles_mapping'

BILLING_ADMIN_ROLE = 'BI_ADMIN'

# (name, type, scoped to team)
ROLE_TEMPLATES = (
    (BILLING_ADMIN_ROLE, 'BILLING', False),
    ('PLATFORM_ADMIN', 'STANDARD', True),
    ('PLATFORM_READ_ONLY', 'STANDARD', True),
)

ROLE_NAME_TRANSLATIONS = {
    'USER': 'PLATFORM_READ_ONLY',
    'TEAM_ADMIN': 'PLATFORM_ADMIN',
}

INSERT_ROLE_SQL = (
    "INSERT INTO roles (id, name, type, team_id, billing_id) VALUES (%s, %s, %s, %s, %s)"
)

CREATE_MAPPING_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS user_roles_mapping (
        user_id CHAR(36) NOT NULL,
        role_id CHAR(36) NOT NULL,
        PRIMARY KEY (user_id, role_id),
        FOREIGN KEY (user_id) REFERENCES users(id),
        FOREIGN KEY (role_id) REFERENCES roles(id)
    ) ENGINE=InnoDB DEFAULT CHARSET=utf8mb4
"""

INSERT_MAPPING_SQL = "INSERT IGNORE INTO user_roles_mapping (user_id, role_id) VALUES (%s, %s)"

SOURCE_USER_ROLES_SQL = """
    SELECT u.id AS user_id, ba.id AS billing_id, utm.team_id, r.name AS role_name
    FROM users u
    JOIN billing_account ba ON u.billing_id = ba.id
    JOIN users_role ur ON u.id = ur.user_id
    JOIN roles r ON ur.role_id = r.id
    JOIN user_team_mapping utm ON u.id = utm.user_id
"""


def transform_role_name(source_role_name: str) -> str:
    """Translate a source role name into the destination role vocabulary"""
    return ROLE_NAME_TRANSLATIONS.get(source_role_name, source_role_name)


class RoleSeeder:
    """Regenerates three role rows per destination team"""

    def __init__(self, destination, report: Optional[MigrationReport] = None,
                 id_generator: Callable[[], str] = generate_identifier,
                 reset_role_mappings: bool = True):
        self.destination = destination
        self.report = report or MigrationReport()
        self.id_generator = id_generator
        self.reset_role_mappings = reset_role_mappings

    def clear_roles(self):
        # Existing mappings point at role ids that are about to be deleted
        if self.reset_role_mappings and self.destination.table_exists(MAPPING_TABLE):
            cleared = self.destination.execute(f"DELETE FROM {MAPPING_TABLE}")
            self.report.role_mappings_cleared = cleared
            if cleared:
                logger.warning(
                    f"Cleared {cleared} rows from {MAPPING_TABLE}; they are rebuilt after role seeding"
                )
        self.destination.execute(f"DELETE FROM {ROLES_TABLE}")

    def insert_role(self, name: str, role_type: str, team_id: Optional[str], billing_id: str) -> str:
        role_id = self.id_generator()
        affected = self.destination.execute(INSERT_ROLE_SQL, (role_id, name, role_type, team_id, billing_id))
        logger.debug(
            f"Inserted role: {name}, Type: {role_type}, Team ID: {team_id or '<nil>'}, Rows affected: {affected}"
        )
        return role_id

    def seed(self) -> int:
        """Delete all roles, then insert BI_ADMIN, PLATFORM_ADMIN, PLATFORM_READ_ONLY per team."""
        count = 0
        try:
            self.clear_roles()

            logger.info("Fetching all team IDs from the team table...")
            teams = self.destination.fetch_all(f"SELECT id, billing_id FROM {TEAM_TABLE}")

            for team in teams:
                team_id, billing_id = team.get('id'), team.get('billing_id')
                if team_id is None or billing_id is None:
                    raise RoleSeedError(
                        f"team row without id or billing_id: {team}",
                        {'team_id': team_id, 'billing_id': billing_id}
                    )

                logger.info(f"Inserting roles for team ID: {team_id}")
                for name, role_type, team_scoped in ROLE_TEMPLATES:
                    self.insert_role(name, role_type, team_id if team_scoped else None, billing_id)
                    count += 1
                    self.report.roles_inserted = count
        except QueryError as e:
            raise RoleSeedError(f"error inserting roles for teams: {e}", {'roles_inserted': count}) from e

        logger.info(f"Inserted a total of {count} roles for all teams.")
        return count


class RoleMappingReconciler:
    """Rebuilds user_roles_mapping from source user/billing/role/team relations"""

    def __init__(self, source, destination, report: Optional[MigrationReport] = None):
        self.source = source
        self.destination = destination
        self.report = report or MigrationReport()

    def ensure_mapping_table(self):
        try:
            self.destination.execute(CREATE_MAPPING_TABLE_SQL)
        except QueryError as e:
            raise SchemaError(f"error creating {MAPPING_TABLE} table: {e}", table=MAPPING_TABLE) from e
        logger.info(f"Ensured {MAPPING_TABLE} table exists.")

    def resolve_role_id(self, role_name: str, billing_id: str, team_id: Optional[str]) -> str:
        """Find the destination role for a translated name; billing roles ignore the team."""
        if role_name == BILLING_ADMIN_ROLE:
            row = self.destination.fetch_one(
                "SELECT id FROM roles WHERE name = %s AND billing_id = %s LIMIT 1",
                (role_name, billing_id)
            )
        else:
            row = self.destination.fetch_one(
                "SELECT id FROM roles WHERE name = %s AND billing_id = %s AND team_id = %s LIMIT 1",
                (role_name, billing_id, team_id)
            )
        if not row:
            raise RoleNotFoundError(role_name, billing_id, team_id)
        return row['id']

    @staticmethod
    def _unpack(row) -> Tuple[str, str, str, str]:
        if row is None or len(row) != 4 or any(value is None for value in row):
            raise ReconcileError(f"malformed user role row from source: {row!r}")
        user_id, billing_id, team_id, role_name = row
        return user_id, billing_id, team_id, role_name

    def reconcile(self) -> int:
        """Insert one (user_id, role_id) pair per resolvable source tuple. Returns rows inserted."""
        logger.info("Fetching user roles information from source database...")
        try:
            with self.source.stream(SOURCE_USER_ROLES_SQL) as (_columns, rows):
                for row in rows:
                    self.report.mapping_tuples_read += 1
                    user_id, billing_id, team_id, source_role = self._unpack(row)
                    role_name = transform_role_name(source_role)

                    try:
                        role_id = self.resolve_role_id(role_name, billing_id, team_id)
                    except RoleNotFoundError as e:
                        logger.warning(f"{e.message}. Skipping insertion.")
                        self.report.mappings_skipped += 1
                        continue

                    logger.debug(f"Inserting into {MAPPING_TABLE}: UserID: {user_id}, RoleID: {role_id}")
                    self.report.mappings_inserted += self.destination.execute(INSERT_MAPPING_SQL, (user_id, role_id))
        except QueryError as e:
            raise ReconcileError(f"error fetching and inserting user roles: {e}") from e

        logger.info(
            f"Successfully fetched and inserted user roles information "
            f"({self.report.mappings_inserted} inserted, {self.report.mappings_skipped} skipped)."
        )
        return self.report.mappings_inserted
