from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional, Tuple

# Ranking multipliers. Prefix hits on names are common, so name counts less.
NAME_WEIGHT = 0.5
DEFAULT_FIELD_WEIGHT = 1.5

CLINIC_TEXT_FIELDS = ("name", "email", "phone_number", "address", "description", "website")
DENTIST_TEXT_FIELDS = ("name", "email", "phone_number")

FIELD_WEIGHTS: Dict[str, float] = {
    name: (NAME_WEIGHT if name == "name" else DEFAULT_FIELD_WEIGHT) for name in CLINIC_TEXT_FIELDS
}


def _pick(data: Dict[str, Any], *keys: str) -> Any:
    """Return the first present key, so both camelCase and snake_case rows load."""
    for key in keys:
        if key in data:
            return data[key]
    return None


@dataclass(frozen=True)
class Dentist:
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    id: Optional[int] = None
    clinic_id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Dentist":
        return cls(
            name=_pick(data, "name", "Name"),
            email=_pick(data, "email", "Email"),
            phone_number=_pick(data, "phone_number", "phoneNumber", "PhoneNumber"),
            id=_pick(data, "id", "Id", "DentistId"),
            clinic_id=_pick(data, "clinic_id", "clinicId", "ClinicId"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class Clinic:
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None
    dentists: Tuple[Dentist, ...] = field(default_factory=tuple)
    id: Optional[int] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    image_path: Optional[str] = None
    distance_km: Optional[float] = None  # Set by the nearby search only

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Clinic":
        raw_dentists = _pick(data, "dentists", "Dentists") or []
        latitude = _pick(data, "latitude", "Latitude")
        longitude = _pick(data, "longitude", "Longitude")
        return cls(
            name=_pick(data, "name", "Name"),
            email=_pick(data, "email", "Email"),
            phone_number=_pick(data, "phone_number", "phoneNumber", "PhoneNumber"),
            address=_pick(data, "address", "Address"),
            description=_pick(data, "description", "Description"),
            website=_pick(data, "website", "Website"),
            dentists=tuple(
                d if isinstance(d, Dentist) else Dentist.from_dict(d) for d in raw_dentists
            ),
            id=_pick(data, "id", "Id", "ClinicId"),
            latitude=float(latitude) if latitude is not None else None,
            longitude=float(longitude) if longitude is not None else None,
            image_path=_pick(data, "image_path", "imagePath", "ImagePath"),
        )

    def get_text(self, field_name: str) -> str:
        """Field value for comparisons; missing values compare as the empty string."""
        return getattr(self, field_name) or ""

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        if self.distance_km is None:
            result.pop("distance_km")
        return result


@dataclass(frozen=True)
class RankedClinic:
    """
    A search hit together with its ranking score (lower is closer) and 1-based position.

    score is None for unranked results, i.e. searches without a general term.
    """
    clinic: Clinic
    score: Optional[int]
    rank: int

    def to_dict(self) -> Dict[str, Any]:
        return {"rank": self.rank, "score": self.score, **self.clinic.to_dict()}


@dataclass(frozen=True)
class SearchCriteria:
    general_search: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    description: Optional[str] = None
    website: Optional[str] = None

    def term_for(self, field_name: str) -> Optional[str]:
        return getattr(self, field_name)

    def active_terms(self) -> Dict[str, str]:
        """Non-empty terms in filter order, general search first."""
        ordered = ("general_search",) + CLINIC_TEXT_FIELDS
        return {key: getattr(self, key) for key in ordered if getattr(self, key)}

    def is_empty(self) -> bool:
        return not self.active_terms()
