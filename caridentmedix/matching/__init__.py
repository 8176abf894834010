"""Fuzzy clinic search and nearby clinic lookup."""

from .fuzzy_matchers import MATCH_THRESHOLD, FuzzyMatcher, levenshtein_distance, weighted_levenshtein_distance
from .geo import find_nearby_clinics, haversine_distance_km
from .models import FIELD_WEIGHTS, Clinic, Dentist, RankedClinic, SearchCriteria
from .search_strategy import ClinicSearchStrategy, search_clinics

__all__ = [
    "MATCH_THRESHOLD",
    "FIELD_WEIGHTS",
    "FuzzyMatcher",
    "levenshtein_distance",
    "weighted_levenshtein_distance",
    "Clinic",
    "Dentist",
    "RankedClinic",
    "SearchCriteria",
    "ClinicSearchStrategy",
    "search_clinics",
    "find_nearby_clinics",
    "haversine_distance_km",
]
