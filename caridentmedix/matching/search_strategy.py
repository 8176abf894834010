import time
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ..secure_logging import get_secure_logger
from .fuzzy_matchers import FuzzyMatcher, weighted_levenshtein_distance
from .models import CLINIC_TEXT_FIELDS, DENTIST_TEXT_FIELDS, FIELD_WEIGHTS, Clinic, RankedClinic, SearchCriteria

logger = get_secure_logger(__name__)


@dataclass(frozen=True)
class FieldFilter:
    """Which clinic and dentist fields a single search term is compared against."""
    criterion: str
    clinic_fields: Tuple[str, ...]
    dentist_fields: Tuple[str, ...] = ()


# Applied in this order; every supplied term must pass (AND), fields within one term are OR-ed.
CLINIC_FIELD_FILTERS: Tuple[FieldFilter, ...] = (
    FieldFilter("general_search", CLINIC_TEXT_FIELDS, DENTIST_TEXT_FIELDS),
    FieldFilter("name", ("name",), ("name",)),
    FieldFilter("email", ("email",), ("email",)),
    FieldFilter("phone_number", ("phone_number",), ("phone_number",)),
    FieldFilter("address", ("address",)),
    FieldFilter("description", ("description",)),
    FieldFilter("website", ("website",)),
)


class ClinicSearchStrategy:
    def __init__(self, fuzzy_matcher: Optional[FuzzyMatcher] = None):
        self.fuzzy_matcher = fuzzy_matcher or FuzzyMatcher()

    def _passes(self, clinic: Clinic, field_filter: FieldFilter, term: str) -> bool:
        if self.fuzzy_matcher.any_match((clinic.get_text(f) for f in field_filter.clinic_fields), term):
            return True
        for dentist in clinic.dentists:
            if self.fuzzy_matcher.any_match((getattr(dentist, f) for f in field_filter.dentist_fields), term):
                return True
        return False

    def filter_candidates(self, candidates: Sequence[Clinic], criteria: SearchCriteria) -> List[Clinic]:
        filtered = list(candidates)
        for field_filter in CLINIC_FIELD_FILTERS:
            term = criteria.term_for(field_filter.criterion)
            if not term:
                continue
            filtered = [clinic for clinic in filtered if self._passes(clinic, field_filter, term)]
            logger.debug(f"Filter '{field_filter.criterion}' kept {len(filtered)} clinics")
        return filtered

    @staticmethod
    def score(clinic: Clinic, criteria: SearchCriteria) -> int:
        """
        Ranking score of a clinic; lower is a closer match.

        Every field is compared with the general search term and again with its own
        per-field term, so a field that was searched for explicitly counts twice.
        """
        total = 0
        for field_name in CLINIC_TEXT_FIELDS:
            weight = FIELD_WEIGHTS[field_name]
            value = clinic.get_text(field_name)
            total += weighted_levenshtein_distance(value, criteria.general_search, weight)
            total += weighted_levenshtein_distance(value, criteria.term_for(field_name), weight)
        return total

    def rank(self, clinics: Sequence[Clinic], criteria: SearchCriteria) -> List[Clinic]:
        if not criteria.general_search:
            return list(clinics)
        # sorted() is stable, ties keep filter order
        return sorted(clinics, key=lambda clinic: self.score(clinic, criteria))

    def search(self, candidates: Sequence[Clinic], criteria: Optional[SearchCriteria] = None) -> List[Clinic]:
        if candidates is None:
            raise ValueError("candidates must be a sequence of clinics, got None")
        candidates = list(candidates)
        criteria = criteria or SearchCriteria()

        start_time = time.perf_counter()
        results = self.rank(self.filter_candidates(candidates, criteria), criteria)
        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.log_clinic_search(
            "fuzzy",
            criteria_count=self.active_criteria_count(criteria),
            candidates_count=len(candidates),
            results_count=len(results),
            duration_ms=duration_ms,
        )
        return results

    def search_with_scores(
        self, candidates: Sequence[Clinic], criteria: Optional[SearchCriteria] = None
    ) -> List[RankedClinic]:
        criteria = criteria or SearchCriteria()
        # Unranked without a general term
        ranked = bool(criteria.general_search)
        return [
            RankedClinic(clinic=clinic, score=self.score(clinic, criteria) if ranked else None, rank=position)
            for position, clinic in enumerate(self.search(candidates, criteria), start=1)
        ]

    @staticmethod
    def active_criteria_count(criteria: SearchCriteria) -> int:
        return len(criteria.active_terms())


def search_clinics(
    candidates: Sequence[Clinic],
    criteria: Optional[SearchCriteria] = None,
    fuzzy_matcher: Optional[FuzzyMatcher] = None,
) -> List[Clinic]:
    """Filter clinics by every supplied term and order them by closeness to the general search term."""
    return ClinicSearchStrategy(fuzzy_matcher).search(candidates, criteria)
