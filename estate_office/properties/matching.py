"""
Buyer Matching

Scores properties that are currently for sale against a buyer
requirement. Scoring is additive, out of 110:

    Budget          40
    Property type   20
    Bedrooms        15 (5 when above the maximum)
    Bathrooms       10
    Location        15 (7 when the buyer has no preference)
    Features        10 (5 when only some are present)

Only matches at or above the configured threshold are returned.
Every point awarded comes with a reason and every criterion missed
with a mismatch, so an agent can see why a property ranked where it did.
"""

from typing import Optional

from pydantic import BaseModel, Field

from estate_office.config import get_settings
from estate_office.models.base import UserContext
from estate_office.models.crm import BuyerRequirement
from estate_office.models.property import Property
from estate_office.repositories import PropertyRepository, SellCycleRepository


class PropertyMatch(BaseModel):
    property_id: str
    property: Property
    sell_cycle_id: str
    asking_price: float
    match_score: int
    match_reasons: list[str] = Field(default_factory=list)
    mismatches: list[str] = Field(default_factory=list)


class PropertyMatcher:
    """Ranks listed properties for a buyer requirement."""

    def __init__(
        self,
        properties: PropertyRepository,
        sell_cycles: SellCycleRepository,
        threshold: Optional[int] = None,
    ):
        self._properties = properties
        self._sell_cycles = sell_cycles
        self._threshold = (
            threshold if threshold is not None else get_settings().app.match_score_threshold
        )

    def find_matches_for_buyer(
        self,
        requirement: BuyerRequirement,
        user: UserContext,
    ) -> list[PropertyMatch]:
        """Visible properties with an active sell cycle, best match first."""
        matches = []
        for prop in self._properties.list_active(user):
            cycle = self._sell_cycles.active_for_property(prop.id)
            if cycle is None:
                continue

            asking_price = cycle.asking_price or prop.price
            score, reasons, mismatches = score_property(prop, asking_price, requirement)
            if score >= self._threshold:
                matches.append(PropertyMatch(
                    property_id=prop.id,
                    property=prop,
                    sell_cycle_id=cycle.id,
                    asking_price=asking_price,
                    match_score=score,
                    match_reasons=reasons,
                    mismatches=mismatches,
                ))

        matches.sort(key=lambda m: m.match_score, reverse=True)
        return matches


def score_property(
    prop: Property,
    asking_price: float,
    requirement: BuyerRequirement,
) -> tuple[int, list[str], list[str]]:
    """Score one property. Returns (score, reasons, mismatches)."""
    score = 0
    reasons: list[str] = []
    mismatches: list[str] = []

    # Budget
    if requirement.min_budget <= asking_price <= requirement.max_budget:
        score += 40
        reasons.append("Price within budget")
    elif asking_price < requirement.min_budget:
        gap = (requirement.min_budget - asking_price) / requirement.min_budget * 100
        mismatches.append(f"Price below budget ({gap:.0f}% less)")
    else:
        gap = (
            (asking_price - requirement.max_budget) / requirement.max_budget * 100
            if requirement.max_budget else 100.0
        )
        mismatches.append(f"Price above budget ({gap:.0f}% more)")

    # Property type
    if requirement.property_types:
        if prop.property_type in requirement.property_types:
            score += 20
            reasons.append("Matching property type")
        else:
            mismatches.append("Property type does not match")

    # Bedrooms
    if prop.bedrooms:
        if prop.bedrooms >= requirement.min_bedrooms:
            if not requirement.max_bedrooms or prop.bedrooms <= requirement.max_bedrooms:
                score += 15
                reasons.append("Bedrooms match requirements")
            else:
                score += 5
                reasons.append("More bedrooms than needed")
        else:
            mismatches.append(
                f"Not enough bedrooms (has {prop.bedrooms}, needs {requirement.min_bedrooms})"
            )

    # Bathrooms
    if requirement.min_bathrooms and prop.bathrooms:
        if prop.bathrooms >= requirement.min_bathrooms:
            score += 10
            reasons.append("Bathrooms meet requirements")
        else:
            mismatches.append(
                f"Not enough bathrooms (has {prop.bathrooms}, needs {requirement.min_bathrooms})"
            )

    # Location
    if requirement.preferred_locations:
        fields = [prop.location_text, prop.city, prop.area, prop.block]
        haystack = [f.lower() for f in fields if f]
        wanted = [loc.lower() for loc in requirement.preferred_locations]
        if any(loc in text for loc in wanted for text in haystack):
            score += 15
            reasons.append("Located in preferred area")
        else:
            mismatches.append("Location not in preferred areas")
    else:
        score += 7

    # Must-have features
    required = requirement.must_have_features
    if required:
        features = [f.lower() for f in prop.features]
        present = [f for f in required if any(f.lower() in pf for pf in features)]
        if len(present) == len(required):
            score += 10
            reasons.append("All must-have features available")
        elif present:
            score += 5
            reasons.append(f"{len(present)}/{len(required)} must-have features")
            missing = [f for f in required if f not in present]
            mismatches.append(f"Missing: {', '.join(missing)}")
        else:
            mismatches.append(f"Missing all must-have features: {', '.join(required)}")

    return score, reasons, mismatches
