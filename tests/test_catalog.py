#!/usr/bin/env python3
"""Catalog introspection tests against a mocked adapter."""

import unittest
from unittest.mock import MagicMock

from core.catalog import CatalogIntrospector
from core.errors import MetadataError
from core.schema_ir import ForeignKeyIR, KeyIR


def users_adapter():
    adapter = MagicMock()
    adapter.get_columns.return_value = [
        {'column_name': 'id', 'column_type': 'char(36)', 'is_nullable': 'NO',
         'column_default': None, 'extra': ''},
        {'column_name': 'email', 'column_type': 'varchar(255)', 'is_nullable': 'YES',
         'column_default': None, 'extra': None},
        {'column_name': 'created_at', 'column_type': 'timestamp', 'is_nullable': 'NO',
         'column_default': 'CURRENT_TIMESTAMP', 'extra': 'DEFAULT_GENERATED'},
    ]
    adapter.get_primary_keys.return_value = ['id']
    adapter.get_unique_constraints.return_value = [{'constraint_name': 'uq_email', 'columns': ['email']}]
    adapter.get_indexes.return_value = [{'name': 'idx_billing', 'columns': ['billing_id']}]
    adapter.get_foreign_keys.return_value = [
        {'constraint_name': 'fk_billing', 'column': 'billing_id', 'ref_table': 'billing_account', 'ref_column': 'id'}
    ]
    return adapter


class TestCatalogIntrospector(unittest.TestCase):

    def test_introspect_builds_table_ir(self):
        table = CatalogIntrospector(users_adapter()).introspect('users')

        self.assertEqual(table.name, 'users')
        self.assertEqual(table.column_names(), ['id', 'email', 'created_at'])
        self.assertFalse(table.get_column('id').nullable)
        self.assertTrue(table.get_column('email').nullable)
        self.assertEqual(table.get_column('email').extra, "")
        self.assertEqual(table.get_column('created_at').default_value, 'CURRENT_TIMESTAMP')
        self.assertEqual(table.primary_key, ['id'])
        self.assertEqual(table.unique_keys, [KeyIR('uq_email', ['email'], unique=True)])
        self.assertEqual(table.indexes, [KeyIR('idx_billing', ['billing_id'])])
        self.assertEqual(table.foreign_keys, [ForeignKeyIR('fk_billing', 'billing_id', 'billing_account', 'id')])

    def test_metadata_failure_propagates(self):
        adapter = users_adapter()
        adapter.get_indexes.side_effect = MetadataError("Failed to get indexes for users: boom", table='users')

        with self.assertRaises(MetadataError) as ctx:
            CatalogIntrospector(adapter).introspect('users')
        self.assertEqual(ctx.exception.details['table'], 'users')

    def test_every_catalog_query_uses_table_name(self):
        adapter = users_adapter()
        CatalogIntrospector(adapter).introspect('users')
        for method in (adapter.get_columns, adapter.get_primary_keys, adapter.get_unique_constraints,
                       adapter.get_indexes, adapter.get_foreign_keys):
            method.assert_called_once_with('users')


if __name__ == '__main__':
    unittest.main()
