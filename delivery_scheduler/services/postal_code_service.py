"""Postal code normalization, validation and delivery-area lookup."""

from __future__ import annotations

import re
from collections.abc import Iterable
from dataclasses import dataclass, field

from delivery_scheduler.schemas.rules import DeliveryArea, PostalDistrict

POSTAL_CODE_LENGTH: int = 6
PREFIX_LENGTH: int = 2
MAX_SUGGESTIONS: int = 3
POSTAL_CODE_PATTERN = re.compile(r"^\d{6}$")
NON_DIGITS = re.compile(r"[^0-9]")

INVALID_FORMAT_MESSAGE: str = "Invalid postal code format. Please enter a valid 6-digit postal code."
NOT_SERVED_MESSAGE: str = "Sorry, we don't deliver to this area yet."
UNKNOWN_CITY: str = "Unknown"
DEFAULT_PROVINCE: str = "SG"


@dataclass(frozen=True)
class PostalCodeValidation:
    postal_code: str
    is_valid: bool
    delivery_area: DeliveryArea | None = None
    error: str | None = None
    suggestions: list[str] = field(default_factory=list)
    format_error: bool = False


@dataclass(frozen=True)
class PostalCodeSuggestion:
    postal_code: str
    city: str
    province: str
    delivery_area: DeliveryArea


def normalize(raw: str) -> str:
    """Strip non-digits and left-pad with zeros to six characters."""
    return NON_DIGITS.sub("", raw).rjust(POSTAL_CODE_LENGTH, "0")


def is_valid_format(postal_code: str) -> bool:
    return POSTAL_CODE_PATTERN.match(postal_code.strip()) is not None


class PostalCodeResolver:
    """Maps 2-digit postal prefixes to delivery areas."""

    def __init__(
        self,
        areas: Iterable[DeliveryArea],
        districts: Iterable[PostalDistrict] = (),
    ) -> None:
        self._areas: dict[int, DeliveryArea] = {}
        self._by_prefix: dict[str, DeliveryArea] = {}
        for area in areas:
            self._areas[area.id] = area
            for prefix in area.postal_code_prefixes:
                existing = self._by_prefix.get(prefix)
                if existing is not None and existing.id != area.id:
                    raise ValueError(
                        f"Postal prefix {prefix} is claimed by both {existing.name!r} and {area.name!r}"
                    )
                self._by_prefix[prefix] = area
        self._districts: dict[str, PostalDistrict] = {district.prefix: district for district in districts}

    @property
    def known_prefixes(self) -> list[str]:
        return sorted(self._by_prefix)

    def get_area(self, area_id: int) -> DeliveryArea | None:
        return self._areas.get(area_id)

    def lookup_prefix(self, prefix: str) -> DeliveryArea | None:
        return self._by_prefix.get(prefix)

    def validate(self, postal_code: str) -> PostalCodeValidation:
        """Validate format then resolve the delivery area by prefix.

        The format check runs on the raw input so codes containing letters are
        rejected rather than stripped and accepted.
        """
        normalized: str = normalize(postal_code)
        if not is_valid_format(postal_code):
            return PostalCodeValidation(
                postal_code=normalized,
                is_valid=False,
                error=INVALID_FORMAT_MESSAGE,
                format_error=True,
            )

        prefix: str = normalized[:PREFIX_LENGTH]
        area: DeliveryArea | None = self.lookup_prefix(prefix)
        if area is not None:
            return PostalCodeValidation(postal_code=normalized, is_valid=True, delivery_area=area)

        suggestions: list[str] = [code for code in self.known_prefixes if code[0] == prefix[0]][:MAX_SUGGESTIONS]
        return PostalCodeValidation(
            postal_code=normalized,
            is_valid=False,
            error=NOT_SERVED_MESSAGE,
            suggestions=suggestions,
        )

    def autocomplete(self, partial: str, limit: int) -> list[PostalCodeSuggestion]:
        """Return known prefixes compatible with a partially typed code."""
        digits: str = NON_DIGITS.sub("", partial)
        if not digits or limit <= 0:
            return []

        suggestions: list[PostalCodeSuggestion] = []
        for prefix in self.known_prefixes:
            if not (prefix.startswith(digits) or digits.startswith(prefix)):
                continue
            district: PostalDistrict | None = self._districts.get(prefix)
            suggestions.append(
                PostalCodeSuggestion(
                    postal_code=prefix,
                    city=district.city if district else UNKNOWN_CITY,
                    province=district.province if district else DEFAULT_PROVINCE,
                    delivery_area=self.lookup_prefix(prefix),
                )
            )
            if len(suggestions) >= limit:
                break
        return suggestions
