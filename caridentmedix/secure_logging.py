"""
Secure logging utilities for the clinic directory.

Clinic and dentist contact details are personal data. This module keeps them,
and any database credentials, out of log output while still leaving enough
behind for debugging and auditing database access and searches.
"""

import logging
import re
from typing import Any, Optional


class SecureLogger:
    """
    Secure logging wrapper that sanitizes sensitive data before logging.

    Credentials are always redacted. In production mode e-mail addresses and
    phone numbers are masked as well.
    """

    # Credentials that should never appear in logs; group 1 is the key name
    SENSITIVE_PATTERN = re.compile(
        r'(?i)\b(password|pwd|secret|token|key)[\'"]?\s*[:=]\s*[\'"]?[^\s\'";]+',
    )

    # Contact data that should be minimized in logs
    EMAIL_PATTERN = re.compile(r"\b[\w.+-]+@[\w-]+(?:\.[\w-]+)+\b")
    PHONE_PATTERN = re.compile(r"(?<![\w.])\+?\d[\d\s()/-]{6,}\d\b")

    def __init__(self, logger: logging.Logger, production_mode: bool = True):
        """
        Initialize secure logger wrapper.

        Args:
            logger: The underlying logger instance
            production_mode: If True, also masks contact details
        """
        self.logger = logger
        self.production_mode = production_mode

    def _sanitize_message(self, message: str) -> str:
        """
        Sanitize log message by removing/masking sensitive data.

        Args:
            message: Original log message

        Returns:
            Sanitized message safe for logging
        """
        sanitized = self.SENSITIVE_PATTERN.sub(r"\1=***REDACTED***", message)

        if self.production_mode:
            sanitized = self.EMAIL_PATTERN.sub("***EMAIL***", sanitized)
            sanitized = self.PHONE_PATTERN.sub("***PHONE***", sanitized)

        return sanitized

    def _sanitize_params(self, params: Any) -> str:
        """
        Safely represent query parameters for logging.

        Args:
            params: SQL query parameters (tuple, list, dict, etc.)

        Returns:
            Safe string representation of parameters
        """
        if params is None:
            return "None"

        if isinstance(params, (tuple, list)):
            if not params:
                return "[]"

            if self.production_mode:
                # Only parameter positions and types
                param_info = [f"param_{i}=<{type(param).__name__}>" for i, param in enumerate(params)]
                return f"[{', '.join(param_info)}]"

            safe_params = []
            for param in params:
                if isinstance(param, str) and len(param) > 10:
                    safe_params.append(f"{param[:3]}...{param[-3:]}")
                else:
                    safe_params.append(str(param))
            return f"[{', '.join(safe_params)}]"

        if isinstance(params, dict):
            if self.production_mode:
                return f"<dict with {len(params)} keys>"
            safe_dict = {}
            for key, value in params.items():
                if isinstance(value, str) and len(value) > 10:
                    safe_dict[key] = f"{value[:3]}...{value[-3:]}"
                else:
                    safe_dict[key] = value
            return str(safe_dict)

        return f"<{type(params).__name__}>"

    def _get_sql_summary(self, sql: str) -> str:
        """
        Create a safe summary of SQL query for logging.

        Args:
            sql: SQL query string

        Returns:
            Safe summary of the SQL query
        """
        tokens = sql.split() if sql else []
        if not tokens:
            return "<empty query>"

        first_word = tokens[0].upper()
        if self.production_mode:
            return f"<{first_word} query, {len(tokens)} tokens>"

        sql_clean = " ".join(tokens)
        if len(sql_clean) > 100:
            return f"{first_word}: {sql_clean[:50]}...{sql_clean[-20:]}"
        return f"{first_word}: {sql_clean}"

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message with security filtering."""
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(self._sanitize_message(message), **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message with security filtering."""
        self.logger.info(self._sanitize_message(message), **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message with security filtering."""
        self.logger.warning(self._sanitize_message(message), **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message with security filtering."""
        self.logger.error(self._sanitize_message(message), **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        """Log critical message with security filtering."""
        self.logger.critical(self._sanitize_message(message), **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Log exception message with security filtering."""
        self.logger.exception(self._sanitize_message(message), **kwargs)

    def log_database_operation(
        self,
        operation: str,
        success: bool = True,
        duration_ms: Optional[float] = None,
        row_count: Optional[int] = None,
    ) -> None:
        """
        Log database operation in a secure, audit-friendly way.

        Args:
            operation: Type of operation (CONNECT, FETCH, etc.)
            success: Whether operation succeeded
            duration_ms: Operation duration in milliseconds
            row_count: Number of rows affected/returned
        """
        status = "SUCCESS" if success else "FAILED"
        duration_str = f", {duration_ms:.2f}ms" if duration_ms is not None else ""
        row_str = f", {row_count} rows" if row_count is not None else ""

        self.info(f"DB_AUDIT: {operation} {status}{duration_str}{row_str}")

    def log_sql_execution(
        self,
        sql: str,
        params: Any = None,
        success: bool = True,
        duration_ms: Optional[float] = None,
    ) -> None:
        """
        Securely log SQL query execution.

        Args:
            sql: SQL query string
            params: Query parameters
            success: Whether execution succeeded
            duration_ms: Execution duration in milliseconds
        """
        sql_summary = self._get_sql_summary(sql)
        param_summary = self._sanitize_params(params)
        status = "SUCCESS" if success else "FAILED"
        duration_str = f" ({duration_ms:.2f}ms)" if duration_ms is not None else ""

        self.debug(f"SQL_EXEC: {sql_summary} | PARAMS: {param_summary} | {status}{duration_str}")

    def log_clinic_search(
        self,
        search_type: str,
        criteria_count: int,
        candidates_count: int,
        results_count: int,
        duration_ms: Optional[float] = None,
    ) -> None:
        """
        Log clinic searches without exposing the search terms.

        Args:
            search_type: Type of search (fuzzy, nearby, ...)
            criteria_count: Number of search criteria used
            candidates_count: Number of clinics considered
            results_count: Number of results returned
            duration_ms: Search duration in milliseconds
        """
        duration_str = f" ({duration_ms:.2f}ms)" if duration_ms is not None else ""
        self.info(
            f"CLINIC_SEARCH: {search_type} search with {criteria_count} criteria "
            f"over {candidates_count} clinics returned {results_count} results{duration_str}",
        )

    def log_authentication_event(
        self,
        event_type: str,
        username: Optional[str] = None,
        success: bool = True,
        details: Optional[str] = None,
    ) -> None:
        """
        Log authentication events securely.

        Args:
            event_type: Type of event (DB_CONNECT, ...)
            username: Username (will be partially masked)
            success: Whether event succeeded
            details: Additional details (will be sanitized)
        """
        status = "SUCCESS" if success else "FAILED"
        user_str = ""

        if username:
            masked_user = f"{username[:2]}***{username[-1:]}" if len(username) > 4 else "***"
            user_str = f" user={masked_user}"

        details_str = f" | {self._sanitize_message(details)}" if details else ""

        self.info(f"AUTH: {event_type} {status}{user_str}{details_str}")


def get_secure_logger(name: str, production_mode: bool = True) -> SecureLogger:
    """
    Get a secure logger instance.

    Args:
        name: Logger name (typically __name__)
        production_mode: Enable masking of contact details

    Returns:
        SecureLogger instance
    """
    return SecureLogger(logging.getLogger(name), production_mode=production_mode)
