"""caridentmedix package"""
import logging

# Configure a null handler by default
logging.getLogger(__name__).addHandler(logging.NullHandler())

# Expose public interface
from . import matching
from .matching import (
    Clinic,
    ClinicSearchStrategy,
    Dentist,
    FuzzyMatcher,
    SearchCriteria,
    find_nearby_clinics,
    levenshtein_distance,
    search_clinics,
    weighted_levenshtein_distance,
)
from .sql_interface import (
    SQLInterface,
    QueryManager,
    ClinicRepository,
    OutputFormatter,
    QueryTemplateNotFoundError,
    DatabaseConnectionError,
    QueryExecutionError,
    InvalidQueryParametersError
)
from .main import main

__version__ = "0.1.0"

__all__ = [
    'matching',
    'Clinic',
    'Dentist',
    'SearchCriteria',
    'FuzzyMatcher',
    'ClinicSearchStrategy',
    'search_clinics',
    'find_nearby_clinics',
    'levenshtein_distance',
    'weighted_levenshtein_distance',
    'SQLInterface',
    'QueryManager',
    'ClinicRepository',
    'OutputFormatter',
    'QueryTemplateNotFoundError',
    'DatabaseConnectionError',
    'QueryExecutionError',
    'InvalidQueryParametersError',
    'main',
]
