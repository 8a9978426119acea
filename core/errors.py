#!/usr/bin/env python3
"""
Platform Migrator Error Hierarchy
Canonical exception classes for the migration engine.
"""

from enum import Enum

class ErrorCode(Enum):
    UNKNOWN = "UNKNOWN_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"
    CONNECTION_ERROR = "CONNECTION_ERROR"
    QUERY_ERROR = "QUERY_ERROR"
    METADATA_ERROR = "METADATA_ERROR"
    DDL_ERROR = "DDL_ERROR"
    COPY_ERROR = "COPY_ERROR"
    SEED_ERROR = "SEED_ERROR"
    RECONCILE_ERROR = "RECONCILE_ERROR"
    PIPELINE_ERROR = "PIPELINE_ERROR"
    NOT_FOUND = "NOT_FOUND"

class MigrationError(Exception):
    """Base class for all migrator exceptions"""
    def __init__(self, message: str, code: ErrorCode = ErrorCode.UNKNOWN, details: dict = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

class ConfigError(MigrationError):
    """Raised when a required setting is missing or cannot be parsed"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, ErrorCode.CONFIG_ERROR, details)

class DatabaseConnectionError(MigrationError):
    """Raised when a database cannot be opened"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, ErrorCode.CONNECTION_ERROR, details)

class QueryError(MigrationError):
    """Raised when a statement fails at the driver level"""
    def __init__(self, message: str, sql: str = None, details: dict = None):
        details = dict(details or {})
        if sql is not None:
            details['sql'] = sql
        super().__init__(message, ErrorCode.QUERY_ERROR, details)

class MetadataError(MigrationError):
    """Raised when catalog introspection fails"""
    def __init__(self, message: str, table: str = None, details: dict = None):
        details = dict(details or {})
        details['table'] = table
        super().__init__(message, ErrorCode.METADATA_ERROR, details)

class SchemaError(MigrationError):
    """Raised when a destination table cannot be created"""
    def __init__(self, message: str, table: str = None, details: dict = None):
        details = dict(details or {})
        details['table'] = table
        super().__init__(message, ErrorCode.DDL_ERROR, details)

class CopyError(MigrationError):
    """Raised when a row cannot be read from source or written to destination"""
    def __init__(self, message: str, table: str = None, details: dict = None):
        details = dict(details or {})
        details['table'] = table
        super().__init__(message, ErrorCode.COPY_ERROR, details)

class RoleSeedError(MigrationError):
    """Raised when per-team role rows cannot be generated"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, ErrorCode.SEED_ERROR, details)

class ReconcileError(MigrationError):
    """Raised when user-to-role mappings cannot be rebuilt"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, ErrorCode.RECONCILE_ERROR, details)

class PipelineError(MigrationError):
    """Raised when stage ordering violates a declared prerequisite"""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, ErrorCode.PIPELINE_ERROR, details)

class RoleNotFoundError(MigrationError):
    """No destination role matches a source assignment. Recoverable."""
    def __init__(self, role_name: str, billing_id: str, team_id: str = None):
        super().__init__(
            f"No role found for Role Name: {role_name}, Billing ID: {billing_id}, Team ID: {team_id}",
            ErrorCode.NOT_FOUND,
            {'role_name': role_name, 'billing_id': billing_id, 'team_id': team_id}
        )
