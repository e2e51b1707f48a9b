# onboard/forms/phone.py
from dataclasses import dataclass
from typing import Dict, Optional

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat

DEFAULT_COUNTRY = "us"


@dataclass(frozen=True)
class PhoneValue:
    country: str  # ISO2 lowercase, bv. 'us'
    raw: str  # zoals getypt
    national: str  # nationaal geformatteerd
    e164: Optional[str] = None  # alleen als het nummer geldig is


def derive_phone_value(raw: str, country: Optional[str] = None) -> PhoneValue:
    """
    Parse the typed number with the selected country as default region.

    A number typed with a leading `+` selects its own country.
    """
    country = (country or DEFAULT_COUNTRY).lower()
    raw = raw or ""
    if not raw.strip():
        return PhoneValue(country=country, raw=raw, national="")

    try:
        parsed = phonenumbers.parse(raw, country.upper())
    except NumberParseException:
        return PhoneValue(country=country, raw=raw, national="")

    if raw.strip().startswith("+"):
        region = phonenumbers.region_code_for_number(parsed)
        if region and region != "ZZ":
            country = region.lower()

    national = phonenumbers.format_number(parsed, PhoneNumberFormat.NATIONAL)
    e164 = None
    if phonenumbers.is_valid_number(parsed):
        e164 = phonenumbers.format_number(parsed, PhoneNumberFormat.E164)
    return PhoneValue(country=country, raw=raw, national=national, e164=e164)


def transport_fields(value: PhoneValue, name: str = "phone") -> Dict[str, str]:
    """Hidden companions sent next to the visible phone field."""
    return {
        f"{name}_e164": value.e164 or value.raw,
        f"{name}_country": value.country.upper(),
    }
