"""
CRM field mapping
Normalizes booking fields into the shapes TeleCRM expects. Every function here
is total: bad input yields a best-effort value, never an exception.
"""

import logging
import re
from datetime import date, datetime
from typing import Callable, Iterable, Optional, Union

logger = logging.getLogger(__name__)

DEFAULT_COUNTRY_CODE = "91"
CRM_DATETIME_FORMAT = "%d/%m/%Y %H:%M:%S"

# Synonym -> TeleCRM "client concerns" dropdown value. Order matters for the
# containment pass: earlier entries win.
DENTAL_SERVICE_SYNONYMS: list[tuple[str, str]] = [
    # Dental Restorations & Fillings
    ("dental restorations & fillings", "Dental-Restorations & Fillings"),
    ("dental fillings & restorations", "Dental-Restorations & Fillings"),
    ("dental fillings", "Dental-Restorations & Fillings"),
    ("restorations", "Dental-Restorations & Fillings"),
    ("fillings", "Dental-Restorations & Fillings"),
    # Dental Crowns & Veneers
    ("dental crowns & veneers", "Dental-Crowns & Veneers"),
    ("crowns & veneers", "Dental-Crowns & Veneers"),
    ("dental crowns", "Dental-Crowns & Veneers"),
    ("veneers", "Dental-Crowns & Veneers"),
    # Orthodontic Solutions
    ("orthodontic solutions", "Dental-Orthodontic Solutions"),
    ("orthodontics", "Dental-Orthodontic Solutions"),
    ("orthodontic treatments", "Dental-Orthodontic Solutions"),
    ("braces & aligners", "Dental-Orthodontic Solutions"),
    ("braces", "Dental-Orthodontic Solutions"),
    ("aligners", "Dental-Orthodontic Solutions"),
    # Oral Prophylaxis
    ("oral prophylaxis", "Dental-Oral Prophylaxis"),
    ("scaling & oral prophylaxis", "Dental-Oral Prophylaxis"),
    ("scaling", "Dental-Oral Prophylaxis"),
    ("cleaning", "Dental-Oral Prophylaxis"),
    # Tooth Extractions
    ("tooth extractions", "Dental-Tooth Extractions"),
    ("tooth extraction", "Dental-Tooth Extractions"),
    ("extractions", "Dental-Tooth Extractions"),
    ("extraction", "Dental-Tooth Extractions"),
    # Root Canal
    ("root canal", "Dental-Root Canal"),
    ("root canal treatment", "Dental-Root Canal"),
    ("rct", "Dental-Root Canal"),
    # Flap Surgery
    ("flap surgery", "Dental-Flap Surgery"),
    ("periodontal flap surgery", "Dental-Flap Surgery"),
    # Tooth-Specific Minor Surgical Care
    ("tooth-specific minor surgical care", "Dental-Tooth-Specific Minor Surgical Care"),
    ("tooth surgery", "Dental-Tooth-Specific Minor Surgical Care"),
    ("minor surgical care", "Dental-Tooth-Specific Minor Surgical Care"),
    ("surgical care", "Dental-Tooth-Specific Minor Surgical Care"),
    # Teeth Whitening
    ("teeth whitening", "Dental-Teeth Whitening"),
    ("tooth whitening", "Dental-Teeth Whitening"),
    ("whitening", "Dental-Teeth Whitening"),
    ("bleaching", "Dental-Teeth Whitening"),
    # Dental Implants
    ("dental implants", "Dental-Dental Implants"),
    ("implants", "Dental-Dental Implants"),
    ("dental implant", "Dental-Dental Implants"),
    ("implant", "Dental-Dental Implants"),
    # Laser Gum Treatments
    ("laser gum treatments", "Dental-Laser Gum Treatments"),
    ("laser gum", "Dental-Laser Gum Treatments"),
    ("laser gum treatment", "Dental-Laser Gum Treatments"),
    ("gum treatment", "Dental-Laser Gum Treatments"),
    ("periodontics", "Dental-Laser Gum Treatments"),
    ("gum & bone care", "Dental-Laser Gum Treatments"),
]

ServicePredicate = Callable[[str], bool]


def format_phone_number(phone):
    """
    Normalize a phone number to +<country code><digits>.

    Indian numbers are assumed when no country code is present. Values that
    cannot be normalized are returned unchanged.
    """
    if not phone or not isinstance(phone, str):
        return phone

    cleaned = re.sub(r"[\s\-()]", "", phone.strip())

    if cleaned.startswith("+"):
        return cleaned

    if cleaned.startswith(DEFAULT_COUNTRY_CODE) and len(cleaned) >= 12:
        return f"+{cleaned}"

    if cleaned.startswith("0"):
        return f"+{DEFAULT_COUNTRY_CODE}{cleaned[1:]}"

    if cleaned.isdigit():
        # Covers the common 10-digit mobile number as well as other lengths
        return f"+{DEFAULT_COUNTRY_CODE}{cleaned}"

    return phone


def format_service_name(service_name):
    """Title-case a service name, splitting on whitespace, '&' and '-'"""
    if not service_name or not isinstance(service_name, str):
        return service_name

    words = re.split(r"[\s&-]", service_name)
    return " ".join(word[:1].upper() + word[1:].lower() for word in words)


def _exact(synonym: str) -> ServicePredicate:
    return lambda name: name == synonym


def _contains(synonym: str) -> ServicePredicate:
    return lambda name: synonym in name or name in synonym


class ServiceNameMapper:
    """
    Maps free-text service names onto the CRM vocabulary.

    Rules are (predicate, canonical label) pairs tried in order: every exact
    synonym first, then containment in either direction. Names that match no
    rule are title-cased and given the domain prefix.
    """

    def __init__(
        self,
        synonyms: Optional[Iterable[tuple[str, str]]] = None,
        prefix: str = "Dental-",
    ):
        self.prefix = prefix
        self._synonyms: list[tuple[str, str]] = []
        for synonym, label in synonyms if synonyms is not None else DENTAL_SERVICE_SYNONYMS:
            self._synonyms.append((synonym.lower().strip(), label))

    def register(self, synonym: str, label: str) -> None:
        """Add a synonym; it is tried after the existing ones"""
        self._synonyms.append((synonym.lower().strip(), label))

    @property
    def rules(self) -> list[tuple[ServicePredicate, str]]:
        exact = [(_exact(synonym), label) for synonym, label in self._synonyms]
        contained = [(_contains(synonym), label) for synonym, label in self._synonyms]
        return exact + contained

    def map(self, service_name) -> Optional[str]:
        """Canonical label for a service name, or None for blank input"""
        if not service_name or not isinstance(service_name, str):
            return None

        name = service_name.lower().strip()
        if not name:
            return None

        for predicate, label in self.rules:
            if predicate(name):
                return label

        return f"{self.prefix}{format_service_name(service_name.strip())}"


default_service_mapper = ServiceNameMapper()


def map_service_to_client_concerns(service_name) -> Optional[str]:
    """Map a dental service name to the TeleCRM client concerns value"""
    return default_service_mapper.map(service_name)


def format_appointment_datetime(
    preferred_date: Union[date, str, None],
    preferred_time: Optional[str],
    now: Optional[datetime] = None,
) -> str:
    """
    Format an appointment slot as dd/MM/yyyy HH:mm:ss.

    Falls back to the current wall-clock time if either part cannot be parsed.
    """
    try:
        if isinstance(preferred_date, datetime):
            day = preferred_date.date()
        elif isinstance(preferred_date, date):
            day = preferred_date
        elif isinstance(preferred_date, str):
            day = date.fromisoformat(preferred_date.strip().split("T", 1)[0])
        else:
            raise ValueError("Invalid date")

        hours, minutes = (preferred_time or "09:00").split(":")
        slot = datetime.combine(day, datetime.min.time()).replace(
            hour=int(hours), minute=int(minutes)
        )
        return slot.strftime(CRM_DATETIME_FORMAT)
    except (TypeError, ValueError) as e:
        logger.warning(f"⚠️ Could not format appointment date/time ({preferred_date!r}, {preferred_time!r}): {e}")
        fallback = (now or datetime.now()).replace(second=0, microsecond=0)
        return fallback.strftime(CRM_DATETIME_FORMAT)
