#!/usr/bin/env python3
"""
Pipeline ordering and failure propagation tests.
"""

import unittest
from unittest.mock import MagicMock

from core.errors import CopyError, PipelineError
from core.pipeline import MigrationPipeline, Stage, build_default_pipeline, copy_stage_name
from core.report import MigrationReport


class TestMigrationPipeline(unittest.TestCase):

    def test_runs_stages_in_order(self):
        calls = []
        pipeline = MigrationPipeline([
            Stage('a', lambda: calls.append('a')),
            Stage('b', lambda: calls.append('b'), requires=['a']),
        ])
        report = pipeline.run()

        self.assertEqual(calls, ['a', 'b'])
        self.assertEqual(report.completed_stages, ['a', 'b'])
        self.assertTrue(report.success)

    def test_stage_timing_logged(self):
        pipeline = MigrationPipeline([Stage('copy:timezones', MagicMock())])
        with self.assertLogs('core.pipeline', level='INFO') as logs:
            pipeline.run()
        self.assertTrue(any("Stage copy:timezones completed in " in line and line.endswith("ms")
                            for line in logs.output))

    def test_failed_stage_not_reported_completed(self):
        pipeline = MigrationPipeline([Stage('boom', MagicMock(side_effect=RuntimeError("boom")))])
        with self.assertLogs('core.pipeline', level='INFO') as logs:
            with self.assertRaises(RuntimeError):
                pipeline.run()
        self.assertFalse(any("completed in" in line for line in logs.output))

    def test_prerequisite_scheduled_later_rejected(self):
        action = MagicMock()
        pipeline = MigrationPipeline([
            Stage('seed_roles', action, requires=['copy:team']),
            Stage('copy:team', action),
        ])
        with self.assertRaises(PipelineError):
            pipeline.run()
        action.assert_not_called()

    def test_unknown_prerequisite_rejected(self):
        with self.assertRaises(PipelineError):
            MigrationPipeline([Stage('b', MagicMock(), requires=['missing'])]).validate()

    def test_duplicate_stage_rejected(self):
        with self.assertRaises(PipelineError):
            MigrationPipeline([Stage('a', MagicMock()), Stage('a', MagicMock())]).validate()

    def test_stops_at_first_failure(self):
        later = MagicMock()
        failing = MagicMock(side_effect=CopyError("error copying row 3 of table users", table='users'))
        report = MigrationReport()
        pipeline = MigrationPipeline([
            Stage('copy:team', MagicMock()),
            Stage('copy:users', failing),
            Stage('seed_roles', later),
        ], report)

        with self.assertRaises(CopyError):
            pipeline.run()

        later.assert_not_called()
        self.assertEqual(report.completed_stages, ['copy:team'])
        self.assertEqual(report.failed_stage, 'copy:users')
        self.assertEqual(report.error, "error copying row 3 of table users")
        self.assertFalse(report.success)

    def test_unexpected_exception_recorded(self):
        report = MigrationReport()
        pipeline = MigrationPipeline([Stage('boom', MagicMock(side_effect=RuntimeError("boom")))], report)
        with self.assertRaises(RuntimeError):
            pipeline.run()
        self.assertEqual(report.error, "boom")


class TestDefaultPipeline(unittest.TestCase):

    def setUp(self):
        self.copier = MagicMock()
        self.seeder = MagicMock()
        self.reconciler = MagicMock()
        self.pipeline = build_default_pipeline(
            MagicMock(), MagicMock(),
            copier=self.copier, seeder=self.seeder, reconciler=self.reconciler
        )

    def test_stage_order(self):
        names = [stage.name for stage in self.pipeline.stages]
        self.assertEqual(names[0], copy_stage_name('timezones'))
        self.assertEqual(names[14], copy_stage_name('audit_logs'))
        self.assertEqual(names[15:], ['seed_roles', 'ensure_role_mapping_table', 'reconcile_role_mappings'])

    def test_default_pipeline_validates(self):
        self.pipeline.validate()

    def test_run_invokes_collaborators(self):
        report = self.pipeline.run()

        copied = [c[0][0].name for c in self.copier.copy_table.call_args_list]
        self.assertEqual(copied[:3], ['timezones', 'admins', 'billing_account'])
        self.assertEqual(copied[-1], 'audit_logs')
        self.assertEqual(len(copied), 15)
        self.seeder.seed.assert_called_once()
        self.reconciler.ensure_mapping_table.assert_called_once()
        self.reconciler.reconcile.assert_called_once()
        self.assertEqual(len(report.completed_stages), 18)

    def test_seed_failure_skips_reconciliation(self):
        self.seeder.seed.side_effect = PipelineError("stop")
        with self.assertRaises(PipelineError):
            self.pipeline.run()
        self.reconciler.ensure_mapping_table.assert_not_called()
        self.assertEqual(self.pipeline.report.failed_stage, 'seed_roles')


if __name__ == '__main__':
    unittest.main()
