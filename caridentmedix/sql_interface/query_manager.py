"""SQL template loading for the clinic directory queries."""

import os
from pathlib import Path
from typing import Tuple, Union

from ..secure_logging import get_secure_logger
from .exceptions import InvalidQueryParametersError, QueryTemplateNotFoundError


class QueryManager:
    """Loads SQL templates and pairs them with their parameters."""

    def __init__(self, templates_dir: Union[str, Path], debug: bool = False):
        """
        Initialize QueryManager with a templates directory and debug flag.

        Args:
            templates_dir (Union[str, Path]): Path to directory containing SQL templates.
            debug (bool): Whether to log debug information.

        Raises:
            ValueError: If templates_dir is None or not a valid directory.
        """
        if templates_dir is None:
            raise ValueError("templates_dir cannot be None")

        templates_dir_str = str(templates_dir)
        if not os.path.exists(templates_dir_str):
            raise ValueError(f"templates_dir path does not exist: {templates_dir_str}")
        if not os.path.isdir(templates_dir_str):
            raise ValueError(f"templates_dir is not a directory: {templates_dir_str}")

        self.templates_dir = templates_dir_str
        self.debug = debug
        self.logger = get_secure_logger(__name__, production_mode=not debug)

        if self.debug:
            template_files = [f for f in os.listdir(self.templates_dir) if f.endswith(".sql")]
            self.logger.debug(f"QueryManager initialized with {len(template_files)} SQL templates")

    def load_query_template(self, template_name: str) -> str:
        """
        Load a SQL query template from file.

        Args:
            template_name (str): Name of template file, with or without the .sql extension

        Returns:
            str: The SQL query template string

        Raises:
            QueryTemplateNotFoundError: If template file doesn't exist or can't be read
        """
        if not template_name.endswith(".sql"):
            template_name += ".sql"

        template_path = os.path.join(self.templates_dir, template_name)
        if not os.path.isfile(template_path):
            raise QueryTemplateNotFoundError(f"SQL template file not found: {template_path}")

        try:
            with open(template_path, encoding="utf-8") as f:
                template = f.read()
        except OSError as e:
            raise QueryTemplateNotFoundError(f"Error reading SQL template file '{template_path}': {e}")

        if self.debug:
            self.logger.debug(f"Template '{template_name}' loaded successfully")
        return template

    @staticmethod
    def _validate_clinic_id(clinic_id: int) -> int:
        if isinstance(clinic_id, bool) or not isinstance(clinic_id, int) or clinic_id <= 0:
            raise InvalidQueryParametersError(f"clinic_id must be a positive integer, got {clinic_id!r}")
        return clinic_id

    def get_all_clinics_query(self) -> Tuple[str, Tuple[()]]:
        """Get all clinics, ordered by id."""
        return self.load_query_template("get_all_clinics"), ()

    def get_all_dentists_query(self) -> Tuple[str, Tuple[()]]:
        """Get every dentist that belongs to a clinic, grouped by clinic."""
        return self.load_query_template("get_all_dentists"), ()

    def get_clinic_by_id_query(self, clinic_id: int) -> Tuple[str, Tuple[int]]:
        return self.load_query_template("get_clinic_by_id"), (self._validate_clinic_id(clinic_id),)

    def get_dentists_by_clinic_id_query(self, clinic_id: int) -> Tuple[str, Tuple[int]]:
        """Get the dentists of one clinic, ordered by name."""
        return self.load_query_template("get_dentists_by_clinic_id"), (self._validate_clinic_id(clinic_id),)
