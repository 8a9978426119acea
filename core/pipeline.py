"""
Migration Runner
================

Ordered pipeline of named stages. Each stage declares the stages it
depends on; the pipeline refuses to run if a prerequisite is missing or
scheduled later. Execution is sequential and stops at the first failure.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from core.copier import TableCopier
from core.errors import MigrationError, PipelineError
from core.report import MigrationReport
from core.roles import RoleMappingReconciler, RoleSeeder
from core.table_config import TableDescriptor, build_table_descriptors
from utils.helpers import format_execution_time, measure_time

logger = logging.getLogger(__name__)


def copy_stage_name(table_name: str) -> str:
    return f"copy:{table_name}"


@dataclass
class Stage:
    """A named unit of work with declared prerequisites"""
    name: str
    action: Callable[[], object]
    requires: List[str] = field(default_factory=list)


class MigrationPipeline:
    def __init__(self, stages: List[Stage], report: Optional[MigrationReport] = None):
        self.stages = list(stages)
        self.report = report or MigrationReport()

    def validate(self):
        """Every prerequisite must name a stage scheduled earlier."""
        seen = set()
        for stage in self.stages:
            if stage.name in seen:
                raise PipelineError(f"Duplicate stage name: {stage.name}", {'stage': stage.name})
            for required in stage.requires:
                if required not in seen:
                    raise PipelineError(
                        f"Stage {stage.name} requires {required}, which is not scheduled before it",
                        {'stage': stage.name, 'requires': required}
                    )
            seen.add(stage.name)

    def run(self) -> MigrationReport:
        self.validate()
        for stage in self.stages:
            logger.info(f"Running stage: {stage.name}")
            try:
                with measure_time(stage.name) as timing:
                    stage.action()
            except Exception as e:
                self.report.failed_stage = stage.name
                self.report.error = e.message if isinstance(e, MigrationError) else str(e)
                raise
            logger.info(f"Stage {stage.name} completed in {format_execution_time(timing['execution_time'])}")
            self.report.completed_stages.append(stage.name)
        self.report.finish()
        return self.report


def build_default_pipeline(source, destination, report: Optional[MigrationReport] = None,
                           descriptors: Optional[List[TableDescriptor]] = None,
                           reset_role_mappings: bool = True,
                           copier: Optional[TableCopier] = None,
                           seeder: Optional[RoleSeeder] = None,
                           reconciler: Optional[RoleMappingReconciler] = None) -> MigrationPipeline:
    """Tables in fixed order, then role seeding, mapping table, mapping reconciliation."""
    report = report or MigrationReport()
    descriptors = descriptors if descriptors is not None else build_table_descriptors()
    copier = copier or TableCopier(source, destination, report)
    seeder = seeder or RoleSeeder(destination, report, reset_role_mappings=reset_role_mappings)
    reconciler = reconciler or RoleMappingReconciler(source, destination, report)

    stages = []
    for descriptor in descriptors:
        stages.append(Stage(
            name=copy_stage_name(descriptor.name),
            action=lambda d=descriptor: copier.copy_table(d),
            requires=[copy_stage_name(dep) for dep in descriptor.depends_on]
        ))

    stages.append(Stage('seed_roles', seeder.seed,
                        requires=[copy_stage_name('team'), copy_stage_name('roles')]))
    stages.append(Stage('ensure_role_mapping_table', reconciler.ensure_mapping_table,
                        requires=[copy_stage_name('users'), 'seed_roles']))
    stages.append(Stage('reconcile_role_mappings', reconciler.reconcile,
                        requires=['ensure_role_mapping_table']))

    return MigrationPipeline(stages, report)
