#!/usr/bin/env python3
"""
Platform Migrator Test Configuration - PyTest Configuration and Fixtures

Shared fixtures and fakes. No live database is needed: adapters are
MagicMocks, and FakeDestination keeps just enough state to exercise role
seeding and mapping reconciliation.
"""

import os
import sys
from contextlib import contextmanager
from unittest.mock import MagicMock

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


@contextmanager
def _stream(columns, rows):
    yield list(columns), iter(rows)


def make_source(columns=(), rows=()):
    """MagicMock source adapter whose stream() yields the given result set"""
    source = MagicMock()
    source.stream.side_effect = lambda sql, params=None: _stream(columns, rows)
    return source


class FakeDestination:
    """
    In-memory stand-in for the destination adapter.

    Understands the statements issued by RoleSeeder and RoleMappingReconciler:
    role inserts/deletes, role lookups, team listing and INSERT IGNORE into
    user_roles_mapping.
    """

    def __init__(self, teams=None, mapping_table_exists=False):
        self.teams = list(teams or [])
        self.roles = []
        self.mappings = []
        self.mapping_table_exists = mapping_table_exists
        self.statements = []

    def table_exists(self, table_name):
        return table_name == 'user_roles_mapping' and self.mapping_table_exists

    def execute(self, sql, params=None):
        self.statements.append((sql, params))
        normalized = " ".join(sql.split())
        if normalized.startswith("DELETE FROM roles"):
            count = len(self.roles)
            self.roles = []
            return count
        if normalized.startswith("DELETE FROM user_roles_mapping"):
            count = len(self.mappings)
            self.mappings = []
            return count
        if normalized.startswith("INSERT INTO roles"):
            role_id, name, role_type, team_id, billing_id = params
            self.roles.append({'id': role_id, 'name': name, 'type': role_type,
                               'team_id': team_id, 'billing_id': billing_id})
            return 1
        if normalized.startswith("INSERT IGNORE INTO user_roles_mapping"):
            if tuple(params) in self.mappings:
                return 0
            self.mappings.append(tuple(params))
            return 1
        if normalized.startswith("CREATE TABLE IF NOT EXISTS user_roles_mapping"):
            self.mapping_table_exists = True
            return 0
        return 0

    def fetch_all(self, sql, params=None):
        self.statements.append((sql, params))
        if "FROM team" in sql:
            return [dict(team) for team in self.teams]
        return []

    def fetch_one(self, sql, params=None):
        self.statements.append((sql, params))
        name, billing_id = params[0], params[1]
        team_id = params[2] if len(params) > 2 else None
        for role in self.roles:
            if role['name'] != name or role['billing_id'] != billing_id:
                continue
            if len(params) > 2 and role['team_id'] != team_id:
                continue
            return {'id': role['id']}
        return None


@pytest.fixture
def fake_destination():
    return FakeDestination(teams=[{'id': 'T1', 'billing_id': 'B1'}])


@pytest.fixture
def sequential_ids():
    """Deterministic identifier generator: role-1, role-2, ..."""
    counter = {'n': 0}

    def generate():
        counter['n'] += 1
        return f"role-{counter['n']}"

    return generate
