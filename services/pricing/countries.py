"""Country normalization and EU membership."""

from __future__ import annotations

import unicodedata

# EU member states (ISO 3166-1 alpha-2)
EU_COUNTRY_CODES: frozenset[str] = frozenset(
    {
        "AT", "BE", "BG", "HR", "CY", "CZ", "DK", "EE", "FI", "FR", "DE", "GR", "HU",
        "IE", "IT", "LV", "LT", "LU", "MT", "NL", "PL", "PT", "RO", "SK", "SI", "ES",
        "SE",
    }
)  # fmt: skip

# Country names as typed in the back-office (French and English), accent-free
# and lower-cased. Keys are produced by _name_key.
COUNTRY_NAMES: dict[str, str] = {
    "france": "FR",
    "allemagne": "DE",
    "germany": "DE",
    "autriche": "AT",
    "austria": "AT",
    "belgique": "BE",
    "belgium": "BE",
    "bulgarie": "BG",
    "bulgaria": "BG",
    "chypre": "CY",
    "cyprus": "CY",
    "croatie": "HR",
    "croatia": "HR",
    "danemark": "DK",
    "denmark": "DK",
    "espagne": "ES",
    "spain": "ES",
    "estonie": "EE",
    "estonia": "EE",
    "finlande": "FI",
    "finland": "FI",
    "grece": "GR",
    "greece": "GR",
    "hongrie": "HU",
    "hungary": "HU",
    "irlande": "IE",
    "ireland": "IE",
    "italie": "IT",
    "italy": "IT",
    "lettonie": "LV",
    "latvia": "LV",
    "lituanie": "LT",
    "lithuania": "LT",
    "luxembourg": "LU",
    "malte": "MT",
    "malta": "MT",
    "pays-bas": "NL",
    "netherlands": "NL",
    "pologne": "PL",
    "poland": "PL",
    "portugal": "PT",
    "republique tcheque": "CZ",
    "czech republic": "CZ",
    "czechia": "CZ",
    "roumanie": "RO",
    "romania": "RO",
    "slovaquie": "SK",
    "slovakia": "SK",
    "slovenie": "SI",
    "slovenia": "SI",
    "suede": "SE",
    "sweden": "SE",
    "royaume-uni": "GB",
    "united kingdom": "GB",
    "suisse": "CH",
    "switzerland": "CH",
    "norvege": "NO",
    "norway": "NO",
    "etats-unis": "US",
    "united states": "US",
    "usa": "US",
    "canada": "CA",
    "japon": "JP",
    "japan": "JP",
    "australie": "AU",
    "australia": "AU",
    "emirats arabes unis": "AE",
    "united arab emirates": "AE",
    "uae": "AE",
}

# VAT prefixes that differ from the ISO code
VAT_PREFIX_ALIASES: dict[str, str] = {
    "EL": "GR",
}


def _name_key(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.lower().split())


def normalize_country(value: str | None) -> str:
    """
    Normalize a country code or name to an ISO-2 code.

    Args:
        value: ISO-2 code in any case, or a French/English country name.

    Returns:
        Upper-case ISO-2 code, or an empty string when the value is missing
        or not recognized.
    """
    if not value:
        return ""

    candidate = value.strip()
    if len(candidate) == 2 and candidate.isalpha():
        code = candidate.upper()
        return VAT_PREFIX_ALIASES.get(code, code)

    return COUNTRY_NAMES.get(_name_key(candidate), "")


def is_eu_country(code: str) -> bool:
    """Check if an ISO-2 code belongs to an EU member state."""
    return code in EU_COUNTRY_CODES
