import csv
import io
import json
import logging
import sys
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from tabulate import tabulate

from ..matching.models import Clinic, Dentist, RankedClinic

logger = logging.getLogger(__name__)

# Columns shown in the console table, in order, when present in the rows
CONSOLE_COLUMNS = [
    "rank", "score", "id", "name", "email", "phone_number", "address",
    "website", "distance_km", "dentist_count", "clinic_id",
]


class OutputFormatter:
    """Formats clinic and dentist results for display or saving."""

    @staticmethod
    def to_record(item: Any) -> Dict[str, Any]:
        """Nested dictionary for a result item; plain dicts pass through."""
        if isinstance(item, (Clinic, Dentist, RankedClinic)):
            return item.to_dict()
        if isinstance(item, dict):
            return item
        raise TypeError(f"Cannot format result item of type {type(item).__name__}")

    @staticmethod
    def to_row(item: Any) -> Dict[str, Any]:
        """
        Flat dictionary for tabular formats.

        The nested dentist list of a clinic is reduced to a count and a
        semicolon separated list of names.
        """
        record = dict(OutputFormatter.to_record(item))
        if "dentists" in record:
            dentists = record.pop("dentists") or ()
            record["dentist_count"] = len(dentists)
            record["dentist_names"] = "; ".join(d.get("name") or "" for d in dentists)
        return record

    @staticmethod
    def to_rows(data: List[Any]) -> List[Dict[str, Any]]:
        return [OutputFormatter.to_row(item) for item in data]

    @staticmethod
    def _json_serializer(obj: Any) -> Any:
        """Serializer for datetime/date (ISO 8601) and Decimal coordinates."""
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, Decimal):
            return float(obj)
        raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")

    @staticmethod
    def format_as_json(data_payload: List[Any], metadata: Optional[Dict[str, Any]] = None, indent: Optional[int] = 4) -> str:
        """
        Formats the results and metadata into a JSON string.

        The output has two top-level keys, "metadata" and "data". Clinics keep
        their nested dentists.

        Args:
            data_payload (List[Any]): Clinic, Dentist, RankedClinic or dict items.
            metadata (Dict[str, Any]): The metadata dictionary for the query.
            indent (Optional[int]): Indentation level. None gives compact output.

        Returns:
            str: The JSON document.

        Raises:
            TypeError: If the data contains values that cannot be serialized.
        """
        structured_output = {
            "metadata": metadata or {},
            "data": [OutputFormatter.to_record(item) for item in data_payload],
        }
        try:
            return json.dumps(structured_output, default=OutputFormatter._json_serializer, indent=indent)
        except (TypeError, ValueError) as e:
            logger.error(f"Error during JSON serialization: {e}")
            raise

    @staticmethod
    def _format_delimited(rows: List[Dict[str, Any]], delimiter: str) -> str:
        if not rows:
            return ""

        # Union of keys keeps columns stable when only some rows carry distance/score
        fieldnames: List[str] = []
        for row in rows:
            fieldnames.extend(key for key in row if key not in fieldnames)

        output = io.StringIO()
        writer = csv.DictWriter(output, fieldnames=fieldnames, delimiter=delimiter, lineterminator="\n")
        writer.writeheader()
        writer.writerows(rows)
        return output.getvalue()

    @staticmethod
    def format_as_csv(rows: List[Dict[str, Any]]) -> str:
        """Formats flat rows into a CSV string."""
        return OutputFormatter._format_delimited(rows, ",")

    @staticmethod
    def format_as_tsv(rows: List[Dict[str, Any]]) -> str:
        """Formats flat rows into a TSV string."""
        return OutputFormatter._format_delimited(rows, "\t")

    @staticmethod
    def format_as_txt(rows: List[Dict[str, Any]]) -> str:
        """
        Formats rows as plain text, one non-empty value per line and
        records separated by '---'.
        """
        blocks = []
        for row in rows:
            values = [str(value).strip() for value in row.values() if value is not None and str(value).strip()]
            blocks.append("\n".join(values))
        return "\n---\n".join(blocks)

    @staticmethod
    def format_as_console_table(data: List[Any], stream=sys.stdout) -> None:
        """Formats data as a grid table and writes it to the given stream."""
        if not data:
            logger.info("No data to display.")
            print("No data to display.", file=stream)
            return

        rows = OutputFormatter.to_rows(data)
        headers = [column for column in CONSOLE_COLUMNS if any(column in row for row in rows)]
        table = tabulate(
            [[row.get(column) for column in headers] for row in rows],
            headers=headers,
            tablefmt="grid",
            floatfmt=".2f",
        )
        print(table, file=stream)
