"""Postal code validation endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from delivery_scheduler.api.v1.deps import get_ruleset
from delivery_scheduler.schemas.postal_code import (
    AutocompleteRequest,
    AutocompleteResponse,
    PostalCodeSuggestionRead,
    PostalCodeValidateRequest,
    PostalCodeValidateResponse,
)
from delivery_scheduler.services.postal_code_service import PostalCodeResolver
from delivery_scheduler.services.rule_store import RuleSet

router = APIRouter()


@router.post("/validate", response_model=PostalCodeValidateResponse)
def validate_postal_code(
    payload: PostalCodeValidateRequest,
    ruleset: RuleSet = Depends(get_ruleset),
) -> PostalCodeValidateResponse:
    resolver = PostalCodeResolver(ruleset.delivery_areas, ruleset.postal_districts)
    result = resolver.validate(payload.postal_code)
    if result.format_error:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error)
    return PostalCodeValidateResponse(
        postal_code=result.postal_code,
        is_valid=result.is_valid,
        delivery_area=result.delivery_area,
        error=result.error,
        suggestions=result.suggestions,
    )


@router.post("/autocomplete", response_model=AutocompleteResponse)
def autocomplete_postal_code(
    payload: AutocompleteRequest,
    ruleset: RuleSet = Depends(get_ruleset),
) -> AutocompleteResponse:
    resolver = PostalCodeResolver(ruleset.delivery_areas, ruleset.postal_districts)
    suggestions = resolver.autocomplete(payload.partial_code, payload.limit)
    return AutocompleteResponse(
        suggestions=[
            PostalCodeSuggestionRead(
                postal_code=item.postal_code,
                city=item.city,
                province=item.province,
                delivery_area=item.delivery_area,
            )
            for item in suggestions
        ]
    )
