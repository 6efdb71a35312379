from decimal import Decimal

import pytest
from pydantic import ValidationError

from pricing import Bounded, InvalidInput, PricingTier, Unbounded, validate_tier_set


def test_from_row_maps_null_max_to_unbounded():
    tier = PricingTier.from_row(4, 101, None, "6.00", 40)

    assert isinstance(tier.max_quantity, Unbounded)
    assert tier.is_unbounded
    assert tier.contains(10_000)
    assert not tier.contains(100)


def test_from_row_maps_max_to_bounded():
    tier = PricingTier.from_row(1, 1, 10, Decimal("10.00"), None)

    assert tier.max_quantity == Bounded(max=10)
    assert tier.discount_percentage == 0.0
    assert tier.contains(1)
    assert tier.contains(10)
    assert not tier.contains(11)


def test_tier_rejects_negative_price():
    with pytest.raises(ValidationError):
        PricingTier.from_row(1, 1, 10, "-1.00", 0)


def test_tier_rejects_negative_quantity_and_discount():
    with pytest.raises(ValidationError):
        PricingTier.from_row(1, -1, 10, "1.00", 0)

    with pytest.raises(ValidationError):
        PricingTier.from_row(1, 1, 10, "1.00", -5)


def test_tier_rejects_max_below_min():
    with pytest.raises(ValidationError):
        PricingTier.from_row(1, 10, 5, "1.00", 0)


def test_tier_is_immutable():
    tier = PricingTier.from_row(1, 1, 10, "10.00", 0)

    with pytest.raises(ValidationError):
        tier.unit_price = Decimal("1.00")


def test_tier_accepts_discriminated_upper_bound():
    tier = PricingTier.model_validate({
        "id": 1,
        "min_quantity": 5,
        "max_quantity": {"kind": "bounded", "max": 9},
        "unit_price": "3.00",
    })

    assert tier.max_quantity == Bounded(max=9)


def test_valid_tier_set_passes(sample_tiers):
    validate_tier_set(sample_tiers)
    validate_tier_set(list(reversed(sample_tiers)))


def test_empty_tier_set_passes_validation():
    """Conjunto vazio só é rejeitado na precificação"""
    validate_tier_set([])


def test_overlapping_tiers_are_rejected():
    tiers = [
        PricingTier.from_row(1, 1, 10, "10.00", 0),
        PricingTier.from_row(2, 10, 20, "9.00", 10),
    ]

    with pytest.raises(InvalidInput) as exc_info:
        validate_tier_set(tiers)

    assert "sobrepostas" in str(exc_info.value)


def test_unbounded_tier_must_be_last():
    tiers = [
        PricingTier.from_row(1, 1, None, "10.00", 0),
        PricingTier.from_row(2, 50, 100, "9.00", 10),
    ]

    with pytest.raises(InvalidInput):
        validate_tier_set(tiers)


def test_increasing_unit_price_is_rejected():
    """Preço crescente geraria economia negativa"""
    tiers = [
        PricingTier.from_row(1, 1, 10, "10.00", 0),
        PricingTier.from_row(2, 11, None, "12.00", 0),
    ]

    with pytest.raises(InvalidInput):
        validate_tier_set(tiers)


def test_gaps_are_not_rejected_by_validation():
    tiers = [
        PricingTier.from_row(1, 1, 10, "10.00", 0),
        PricingTier.from_row(2, 20, None, "8.00", 20),
    ]

    validate_tier_set(tiers)
