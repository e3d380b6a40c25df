from .data_source_user import USER_SCHEMA, UserDataSource
from .diagnostics import Diagnostic, Diagnostics, Severity, diagnostics_from_error, has_errors
from .provider import DATA_SOURCES, PROVIDER_SCHEMA, Provider, ReadResult
from .schema import Attribute, AttributeType, ResourceData, Schema

__all__ = [
    "Attribute",
    "AttributeType",
    "DATA_SOURCES",
    "Diagnostic",
    "Diagnostics",
    "PROVIDER_SCHEMA",
    "Provider",
    "ReadResult",
    "ResourceData",
    "Schema",
    "Severity",
    "USER_SCHEMA",
    "UserDataSource",
    "diagnostics_from_error",
    "has_errors",
]
