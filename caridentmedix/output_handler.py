"""Output handling utilities for formatting and writing results."""
import io
import os
import sys
import logging
from typing import Any, Dict, List, Optional
from .sql_interface.output_formatter import OutputFormatter
from .config import FILE_EXTENSION_MAP, DEFAULT_FILE_ENCODING

logger = logging.getLogger(__name__)


def determine_output_format(user_format: Optional[str], output_file_path: Optional[str]) -> str:
    """Determines the effective output format based on user input and file extension."""
    if user_format:
        return user_format

    if output_file_path:
        _, ext = os.path.splitext(output_file_path)
        ext = ext.lower()

        if ext in FILE_EXTENSION_MAP:
            return FILE_EXTENSION_MAP[ext]
        if ext:
            logger.warning(
                f"Output file extension '{ext}' for '{output_file_path}' is not recognized. "
                f"Defaulting to 'json' format."
            )
        else:
            logger.warning(
                f"No file extension for '{output_file_path}'. Defaulting to 'json' format."
            )
        return 'json'

    return 'stdout'


def format_metadata_summary(metadata_dict: Optional[Dict[str, Any]]) -> str:
    """Format metadata dictionary as comment lines."""
    if not metadata_dict:
        return ''
    return '\n'.join(f"# {k}: {v}" for k, v in metadata_dict.items())


def render_output(
    results: List[Any],
    effective_format: str,
    metadata_dict: Optional[Dict[str, Any]],
    output_formatter: OutputFormatter,
) -> str:
    """Render results in the requested format. Tabular formats are preceded by metadata comments."""
    metadata_summary = format_metadata_summary(metadata_dict)
    header = metadata_summary + '\n' if metadata_summary else ''

    if effective_format == 'json':
        return output_formatter.format_as_json(results, metadata_dict)
    if effective_format == 'csv':
        return header + output_formatter.format_as_csv(output_formatter.to_rows(results))
    if effective_format == 'tsv':
        return header + output_formatter.format_as_tsv(output_formatter.to_rows(results))
    if effective_format == 'txt':
        # Plain values only, no metadata
        return output_formatter.format_as_txt(output_formatter.to_rows(results))
    if effective_format == 'stdout':
        buf = io.StringIO()
        output_formatter.format_as_console_table(results, stream=buf)
        return header + buf.getvalue()
    raise ValueError(f"Unknown output format: {effective_format}")


def handle_output(
    results: List[Any],
    output_file_path: Optional[str],
    query_display_name: str,
    effective_format: str,
    metadata_dict: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Format results and write them to a file or stdout.

    Args:
        results: Clinic, Dentist or RankedClinic items
        output_file_path: Path to save results to (None for stdout)
        query_display_name: Display name of the action for logging
        effective_format: Output format ('json', 'csv', 'tsv', 'txt', 'stdout')
        metadata_dict: Optional metadata dictionary to include
    """
    output_formatter = OutputFormatter()

    try:
        rendered = render_output(results, effective_format, metadata_dict, output_formatter)
        if output_file_path:
            with open(output_file_path, 'w', encoding=DEFAULT_FILE_ENCODING, newline='') as f:
                f.write(rendered)
            logger.info(f"Saved results for '{query_display_name}' to {output_file_path}")
        else:
            print(rendered)
    except ValueError as e:
        logger.error(str(e))
        print(str(e), file=sys.stderr)
    except (OSError, TypeError) as e:
        logger.error(f"Error during output handling: {e}")
        print(f"Error during output handling: {e}", file=sys.stderr)
