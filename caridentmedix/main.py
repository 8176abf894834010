"""Main module for the caridentmedix package."""
import argparse
import os
import sys
import logging
from datetime import datetime, timezone
from typing import Any, List, Optional, Tuple
from dotenv import load_dotenv
from .config import DEFAULT_RADIUS_KM, LOG_FILE_ENV_VAR, LOG_FORMAT, LOGGER_NAME, VALID_OUTPUT_FORMATS
from .utils import resolve_templates_dir, read_clinics_from_json
from .sql_interface.db_interface import SQLInterface
from .sql_interface.query_manager import QueryManager
from .sql_interface.clinic_repository import ClinicRepository, InMemoryClinicRepository
from .sql_interface.exceptions import (
    DatabaseConnectionError,
    InvalidQueryParametersError,
    QueryExecutionError,
    QueryTemplateNotFoundError,
)
from .matching import ClinicSearchStrategy, SearchCriteria, find_nearby_clinics
from .metadata import create_metadata_dict
from .output_handler import determine_output_format, handle_output

load_dotenv()

HandlerResult = Tuple[List[Any], str]


def positive_int(value: str) -> int:
    """argparse type for database ids."""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer")
    if number <= 0:
        raise argparse.ArgumentTypeError(f"'{value}' must be a positive integer")
    return number


def add_common_arguments(subparser: argparse.ArgumentParser) -> None:
    subparser.add_argument(
        '--input-json', '-ij', type=str, metavar='JSON_FILE_PATH',
        help='Read clinics from a JSON file (array of clinic objects with nested "dentists")\n'
             'instead of the database.'
    )
    subparser.add_argument(
        '--format', '-f',
        type=str,
        choices=VALID_OUTPUT_FORMATS,
        default=None,
        help='Output format: json, csv, tsv, txt, or stdout (pretty table to console).\n'
             'Inferred from -o extension if not set.'
    )
    subparser.add_argument(
        '--output', '-o', type=str, metavar='FILE_PATH',
        help='Optional path to save results as a JSON, CSV, TSV or TXT file.'
    )


def setup_arg_parser():
    parser = argparse.ArgumentParser(
        description="Searches the clinic directory: fuzzy clinic search, nearby clinics, clinic and dentist lookup.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument(
        '--debug', '-v',
        action='store_true',
        help='Enable verbose debug output for troubleshooting.'
    )
    subparsers = parser.add_subparsers(
        dest='action', help='The action to perform.', required=True, metavar='ACTION'
    )

    # --- Sub-command: search-clinics ---
    parser_search = subparsers.add_parser(
        'search-clinics',
        help='Fuzzy search over clinics and their dentists.',
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser_search.add_argument(
        '--general-search', '-g', type=str, metavar='TERM',
        help='Term matched against every clinic field and the name, email and phone number\n'
             'of its dentists. Results are ranked by closeness to this term.'
    )
    parser_search.add_argument('--name', '-n', type=str, metavar='TERM',
        help='Clinic or dentist name.')
    parser_search.add_argument('--email', '-e', type=str, metavar='TERM',
        help='Clinic or dentist e-mail address.')
    parser_search.add_argument('--phone-number', '-p', type=str, metavar='TERM',
        help='Clinic or dentist phone number.')
    parser_search.add_argument('--address', '-a', type=str, metavar='TERM',
        help='Clinic address.')
    parser_search.add_argument('--description', '-d', type=str, metavar='TERM',
        help='Clinic description.')
    parser_search.add_argument('--website', '-w', type=str, metavar='TERM',
        help='Clinic website.')
    parser_search.add_argument(
        '--with-scores', action='store_true',
        help='Include the rank and ranking score (lower is closer) of every result.'
    )
    add_common_arguments(parser_search)

    # --- Sub-command: nearby-clinics ---
    parser_nearby = subparsers.add_parser(
        'nearby-clinics',
        help='Clinics within a radius of a location, nearest first.',
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser_nearby.add_argument('--latitude', '-lat', type=float, required=True,
        help='REQUIRED. Latitude of the location in decimal degrees.')
    parser_nearby.add_argument('--longitude', '-lon', type=float, required=True,
        help='REQUIRED. Longitude of the location in decimal degrees.')
    parser_nearby.add_argument('--radius-km', '-r', type=float, default=DEFAULT_RADIUS_KM,
        help=f'Search radius in kilometres (default: {DEFAULT_RADIUS_KM:g}).')
    add_common_arguments(parser_nearby)

    # --- Sub-command: get-clinic ---
    parser_clinic = subparsers.add_parser(
        'get-clinic', help='Show one clinic with its dentists.',
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser_clinic.add_argument('--clinic-id', '-i', type=positive_int, required=True, metavar='ID',
        help='REQUIRED. Clinic ID.')
    add_common_arguments(parser_clinic)

    # --- Sub-command: list-dentists ---
    parser_dentists = subparsers.add_parser(
        'list-dentists', help='List the dentists of a clinic, ordered by name.',
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser_dentists.add_argument('--clinic-id', '-i', type=positive_int, required=True, metavar='ID',
        help='REQUIRED. Clinic ID.')
    add_common_arguments(parser_dentists)

    return parser


def setup_logging(debug: bool = False, log_file: Optional[str] = None):
    log_level = logging.DEBUG if debug else logging.INFO
    # Results may go to stdout, so log to stderr
    handlers = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))
    logging.basicConfig(
        level=log_level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True
    )


def build_search_criteria(args: argparse.Namespace) -> SearchCriteria:
    return SearchCriteria(
        general_search=args.general_search,
        name=args.name,
        email=args.email,
        phone_number=args.phone_number,
        address=args.address,
        description=args.description,
        website=args.website,
    )


def handle_search_clinics(args: argparse.Namespace, repository, logger: logging.Logger, parser: argparse.ArgumentParser) -> HandlerResult:
    """Handle the search-clinics action."""
    query_display_name = "Fuzzy Clinic Search"
    criteria = build_search_criteria(args)
    if criteria.is_empty():
        logger.info("No search terms given; returning all clinics unranked.")

    candidates = repository.load_clinics()
    strategy = ClinicSearchStrategy()
    if args.with_scores:
        results = strategy.search_with_scores(candidates, criteria)
    else:
        results = strategy.search(candidates, criteria)

    if not results:
        logger.info("Fuzzy search completed, but no matching clinics were found.")
    else:
        logger.info(f"Fuzzy search found {len(results)} matching clinics.")
    return results, query_display_name


def handle_nearby_clinics(args: argparse.Namespace, repository, logger: logging.Logger, parser: argparse.ArgumentParser) -> HandlerResult:
    """Handle the nearby-clinics action."""
    query_display_name = "Nearby Clinics"
    if args.radius_km < 0:
        parser.error("--radius-km must not be negative.")
    if not -90.0 <= args.latitude <= 90.0 or not -180.0 <= args.longitude <= 180.0:
        parser.error("--latitude must be within [-90, 90] and --longitude within [-180, 180].")

    results = find_nearby_clinics(repository.load_clinics(), args.latitude, args.longitude, args.radius_km)
    return results, query_display_name


def handle_get_clinic(args: argparse.Namespace, repository, logger: logging.Logger, parser: argparse.ArgumentParser) -> HandlerResult:
    """Handle the get-clinic action."""
    query_display_name = f"Clinic {args.clinic_id}"
    clinic = repository.get_clinic(args.clinic_id)
    if clinic is None:
        logger.warning(f"The clinic {args.clinic_id} was not found.")
        return [], query_display_name
    return [clinic], query_display_name


def handle_list_dentists(args: argparse.Namespace, repository, logger: logging.Logger, parser: argparse.ArgumentParser) -> HandlerResult:
    """Handle the list-dentists action."""
    query_display_name = f"Dentists of Clinic {args.clinic_id}"
    if repository.get_clinic(args.clinic_id) is None:
        logger.warning(f"The clinic {args.clinic_id} was not found.")
        return [], query_display_name
    results = repository.get_dentists(args.clinic_id)
    if not results:
        logger.info(f"Clinic {args.clinic_id} has no dentists.")
    return results, query_display_name


# Action handlers dictionary mapping actions to their handler functions
ACTION_HANDLERS = {
    'search-clinics': handle_search_clinics,
    'nearby-clinics': handle_nearby_clinics,
    'get-clinic': handle_get_clinic,
    'list-dentists': handle_list_dentists,
}


def run_action(args: argparse.Namespace, logger: logging.Logger, parser: argparse.ArgumentParser, debug: bool = False) -> HandlerResult:
    """Pick the clinic source (JSON file or database) and run the handler for args.action."""
    handler = ACTION_HANDLERS.get(args.action)
    if handler is None:  # Should not happen due to argparse
        raise RuntimeError(f"No handler for action: {args.action}")

    if args.input_json:
        repository = InMemoryClinicRepository(read_clinics_from_json(args.input_json, logger))
        return handler(args, repository, logger, parser)

    query_manager = QueryManager(resolve_templates_dir(), debug=debug)
    with SQLInterface(debug=debug) as db:
        if not db.connection:
            raise DatabaseConnectionError("Database connection failed.")
        repository = ClinicRepository(db, query_manager)
        return handler(args, repository, logger, parser)


def main(argv: Optional[List[str]] = None):
    parser = setup_arg_parser()
    args = parser.parse_args(argv)

    debug = getattr(args, 'debug', False)
    setup_logging(debug, os.getenv(LOG_FILE_ENV_VAR))
    logger = logging.getLogger(LOGGER_NAME)
    logger.debug(f"Parsed arguments: {args}")

    query_start_time = datetime.now(timezone.utc)
    try:
        results, query_display_name = run_action(args, logger, parser, debug=debug)
    except QueryTemplateNotFoundError as e:
        logger.error(f"Query Template Error: {e}", exc_info=debug)
        sys.exit(1)
    except DatabaseConnectionError as e:
        logger.error(f"Aborting: {e}")
        sys.exit(1)
    except (QueryExecutionError, InvalidQueryParametersError) as e:
        logger.error(f"Database query error: {e}", exc_info=debug)
        sys.exit(1)
    except (OSError, ValueError) as e:
        logger.error(f"Could not read clinics: {e}", exc_info=debug)
        sys.exit(1)
    except RuntimeError as e:
        logger.error(f"Runtime error during execution: {e}", exc_info=debug)
        sys.exit(1)
    except Exception as e:
        logger.exception(f"An unexpected error occurred: {e}")
        sys.exit(1)
    execution_duration_ms = int((datetime.now(timezone.utc) - query_start_time).total_seconds() * 1000)

    output_file_path = getattr(args, 'output', None)
    effective_format = determine_output_format(getattr(args, 'format', None), output_file_path)
    metadata_dict = create_metadata_dict(
        query_start_time, execution_duration_ms, args,
        query_display_name, results
    )
    handle_output(results, output_file_path, query_display_name, effective_format, metadata_dict)

    logger.info(f"--- {query_display_name} finished ---")


if __name__ == "__main__":
    main()
