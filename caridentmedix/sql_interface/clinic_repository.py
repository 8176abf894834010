"""Read access to clinics and their dentists."""

from collections import defaultdict
from typing import Any, Dict, List, Optional, Tuple

from ..matching.models import Clinic, Dentist
from ..secure_logging import get_secure_logger
from .db_interface import SQLInterface
from .exceptions import QueryExecutionError
from .query_manager import QueryManager

logger = get_secure_logger(__name__)


class ClinicRepository:
    """Materializes Clinic records from the database for the search and lookup operations."""

    def __init__(self, sql_interface: SQLInterface, query_manager: QueryManager):
        self.sql_interface = sql_interface
        self.query_manager = query_manager

    def _fetch(self, query: str, params: Tuple[Any, ...]) -> List[Dict[str, Any]]:
        if not self.sql_interface.execute_query(query, params):
            raise QueryExecutionError("Query execution failed.")
        rows = self.sql_interface.fetch_results()
        if rows is None:
            raise QueryExecutionError("Error occurred while fetching results.")
        return rows

    def load_clinics(self) -> List[Clinic]:
        """All clinics in id order, each with its dentists attached."""
        clinic_rows = self._fetch(*self.query_manager.get_all_clinics_query())
        dentist_rows = self._fetch(*self.query_manager.get_all_dentists_query())

        dentists_by_clinic: Dict[Any, List[Dentist]] = defaultdict(list)
        for row in dentist_rows:
            dentist = Dentist.from_dict(row)
            dentists_by_clinic[dentist.clinic_id].append(dentist)

        clinics = []
        for row in clinic_rows:
            row = dict(row, Dentists=dentists_by_clinic.get(row.get("Id"), []))
            clinics.append(Clinic.from_dict(row))

        logger.info(f"Loaded {len(clinics)} clinics with {len(dentist_rows)} dentists from the database.")
        return clinics

    def get_dentists(self, clinic_id: int) -> List[Dentist]:
        rows = self._fetch(*self.query_manager.get_dentists_by_clinic_id_query(clinic_id))
        return [Dentist.from_dict(row) for row in rows]

    def get_clinic(self, clinic_id: int) -> Optional[Clinic]:
        """The clinic with its dentists, or None when no clinic has this id."""
        rows = self._fetch(*self.query_manager.get_clinic_by_id_query(clinic_id))
        if not rows:
            return None
        row = dict(rows[0], Dentists=self.get_dentists(clinic_id))
        return Clinic.from_dict(row)


class InMemoryClinicRepository:
    """Same lookups as ClinicRepository over clinics that are already loaded, e.g. from a JSON export."""

    def __init__(self, clinics: List[Clinic]):
        self.clinics = list(clinics)

    def load_clinics(self) -> List[Clinic]:
        return list(self.clinics)

    def get_clinic(self, clinic_id: int) -> Optional[Clinic]:
        return next((clinic for clinic in self.clinics if clinic.id == clinic_id), None)

    def get_dentists(self, clinic_id: int) -> List[Dentist]:
        clinic = self.get_clinic(clinic_id)
        if clinic is None:
            return []
        return sorted(clinic.dentists, key=lambda dentist: (dentist.name or "").casefold())
