"""Database interface module for the clinic directory on SQL Server."""

import html
import os
import re
import time
from typing import Any, Dict, List, Optional, Tuple

try:
    import pyodbc
except ImportError:
    # pyodbc needs the system ODBC libraries; without them the package still imports
    # and file based searches keep working, only connect() refuses.
    pyodbc = None

from bs4 import BeautifulSoup

from ..config import DEFAULT_SQL_DRIVER
from ..secure_logging import get_secure_logger

logger = get_secure_logger(__name__)


class SQLInterface:
    """Handles database connection, query execution, and result fetching."""

    @staticmethod
    def _clean_field_value(value: Any) -> Any:
        """
        Strip HTML from a text value. Clinic descriptions are edited in a rich text
        field and may contain markup and entities.

        Args:
            value (Any): The value to clean, typically a string from a database field.

        Returns:
            Any: The cleaned value if the input was a string, otherwise the original value.
        """
        if not isinstance(value, str):
            return value

        text = html.unescape(value)
        text = re.sub(r"<br\s*/?>", "\n", text, flags=re.IGNORECASE)
        if "<" in text:
            text = BeautifulSoup(text, "html.parser").get_text(separator="\n")
        text = re.sub(r"\n\s*\n+", "\n", text)
        return text.strip()

    @staticmethod
    def _describe_error(ex: Exception) -> str:
        """Short, credential free description of a driver error."""
        if pyodbc is not None and isinstance(ex, pyodbc.Error) and len(ex.args) >= 2:
            return f"SQLSTATE {ex.args[0]}"
        return type(ex).__name__

    def __init__(self, debug: bool = False):
        """Initializes connection parameters from environment variables."""
        self.server: Optional[str] = os.getenv("SQL_SERVER")
        self.database: Optional[str] = os.getenv("DATABASE")
        self.username_sql: Optional[str] = os.getenv("USERNAME_SQL")
        self.password: Optional[str] = os.getenv("PASSWORD")
        self.driver: str = os.getenv("SQL_DRIVER", DEFAULT_SQL_DRIVER)
        self.connection = None
        self.cursor = None
        self.debug = debug

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close_connection()
        return False

    @property
    def is_configured(self) -> bool:
        return all([self.server, self.database, self.username_sql, self.password, self.driver])

    def _connection_string(self) -> str:
        return (
            f"DRIVER={self.driver};"
            f"SERVER={self.server};"
            f"DATABASE={self.database};"
            f"UID={self.username_sql};"
            f"PWD={self.password};"
        )

    def connect(self) -> bool:
        """
        Establishes a database connection using parameters from environment variables.

        Returns:
            bool: True if connection is successful, False otherwise.
        """
        if pyodbc is None:
            logger.error("pyodbc not available. Cannot establish database connection.")
            return False

        if self.connection is not None:
            logger.warning("Connection object already exists. Close before reconnecting if needed.")
            return True

        if not self.is_configured:
            logger.error(
                "Database connection details incomplete. Check your .env file "
                "(SQL_SERVER, DATABASE, USERNAME_SQL, PASSWORD, SQL_DRIVER).",
            )
            return False

        start_time = time.time()
        try:
            logger.debug(f"Attempting database connection to server: {self.server}")
            self.connection = pyodbc.connect(self._connection_string(), autocommit=False)
            self.cursor = self.connection.cursor()
        except Exception as ex:
            duration_ms = (time.time() - start_time) * 1000
            reason = self._describe_error(ex)
            logger.log_authentication_event("DB_CONNECT", self.username_sql, success=False, details=reason)
            logger.error(f"Database connection failed: {reason}")
            logger.log_database_operation("CONNECT", success=False, duration_ms=duration_ms)
            self.connection = None
            self.cursor = None
            return False

        duration_ms = (time.time() - start_time) * 1000
        logger.log_authentication_event("DB_CONNECT", self.username_sql, success=True)
        logger.log_database_operation("CONNECT", success=True, duration_ms=duration_ms)
        return True

    def execute_query(self, query: str, params: Tuple = ()) -> bool:
        """
        Executes a SQL query using '?' placeholders for parameters.

        Rolls back the open transaction when execution fails.

        Args:
            query (str): The SQL query string with '?' placeholders for parameters.
            params (Tuple): A tuple of parameter values corresponding to the placeholders.

        Returns:
            bool: True if execution was successful, False on error.
        """
        if not self.connection or not self.cursor:
            logger.error("Not connected to the database. Cannot execute query.")
            return False

        start_time = time.time()
        try:
            self.cursor.execute(query, params)
        except Exception as ex:
            duration_ms = (time.time() - start_time) * 1000
            logger.log_sql_execution(query, params, success=False, duration_ms=duration_ms)
            logger.error(f"SQL execution failed: {self._describe_error(ex)}")
            self._rollback()
            return False

        duration_ms = (time.time() - start_time) * 1000
        logger.log_sql_execution(query, params, success=True, duration_ms=duration_ms)
        return True

    def fetch_results(self) -> Optional[List[Dict[str, Any]]]:
        """
        Fetches all rows of the last executed query as dictionaries keyed by column name.

        String values are cleaned of HTML.

        Returns:
            Optional[List[Dict[str, Any]]]: The rows, an empty list if the statement produced
                                            no result set, or None on error.
        """
        if not self.cursor:
            logger.error("No cursor available to fetch results.")
            return None

        try:
            if self.cursor.description is None:
                return []

            columns = [column[0] for column in self.cursor.description]
            start_time = time.time()
            rows = self.cursor.fetchall()
            duration_ms = (time.time() - start_time) * 1000
        except Exception as ex:
            logger.error(f"Error fetching results from cursor: {self._describe_error(ex)}")
            return None

        logger.log_database_operation("FETCH", success=True, duration_ms=duration_ms, row_count=len(rows))
        return [
            {col: self._clean_field_value(val) for col, val in zip(columns, row)}
            for row in rows
        ]

    def _rollback(self) -> None:
        if self.connection:
            try:
                self.connection.rollback()
                logger.info("Transaction rolled back.")
            except Exception as rollback_ex:
                logger.critical(f"Error during transaction rollback: {self._describe_error(rollback_ex)}")

    def close_connection(self) -> None:
        """Closes the database cursor and connection if they are open."""
        if self.debug:
            logger.debug("Closing database connection and cursor...")
        if self.cursor:
            try:
                self.cursor.close()
            except Exception as ex:
                logger.warning(f"Error closing cursor: {ex}")
            finally:
                self.cursor = None

        if self.connection:
            try:
                self.connection.close()
                logger.info("Connection closed.")
            except Exception as ex:
                logger.warning(f"Error closing connection: {ex}")
            finally:
                self.connection = None
