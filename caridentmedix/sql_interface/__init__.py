"""SQL interface package for caridentmedix."""

import logging

from .clinic_repository import ClinicRepository, InMemoryClinicRepository
from .db_interface import SQLInterface
from .exceptions import (
    DatabaseConnectionError,
    InvalidQueryParametersError,
    QueryExecutionError,
    QueryTemplateNotFoundError,
)
from .output_formatter import OutputFormatter
from .query_manager import QueryManager

logger = logging.getLogger(__name__)

__all__ = [
    "SQLInterface",
    "QueryManager",
    "ClinicRepository",
    "InMemoryClinicRepository",
    "QueryTemplateNotFoundError",
    "DatabaseConnectionError",
    "QueryExecutionError",
    "InvalidQueryParametersError",
    "OutputFormatter",
]

logger.debug("SQL interface package initialized")
