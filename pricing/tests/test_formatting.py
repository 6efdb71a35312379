from pricing import PricingTier, format_tiers


def test_format_tiers_reference_table(sample_tiers):
    """Testa a tabela formatada das quatro faixas de referência"""
    formatted = format_tiers(sample_tiers)

    assert [t.range for t in formatted] == [
        "1-10 units",
        "11-50 units",
        "51-100 units",
        "101+ units",
    ]
    assert [t.price for t in formatted] == ["$10.00", "$8.50", "$7.00", "$6.00"]
    assert [t.discount for t in formatted] == ["Base price", "15% off", "30% off", "40% off"]
    assert [t.unit_price for t in formatted] == [10.0, 8.5, 7.0, 6.0]


def test_format_tiers_preserves_input_order(sample_tiers):
    reversed_tiers = list(reversed(sample_tiers))

    formatted = format_tiers(reversed_tiers)

    assert formatted[0].range == "101+ units"
    assert formatted[-1].range == "1-10 units"


def test_format_tiers_fractional_discount():
    tiers = [PricingTier.from_row(1, 5, 9, "3.5", 12.5)]

    formatted = format_tiers(tiers)

    assert formatted[0].discount == "12.5% off"
    assert formatted[0].price == "$3.50"


def test_format_tiers_empty():
    assert format_tiers([]) == []


def test_format_tiers_large_discount_without_scientific_notation():
    tiers = [PricingTier.from_row(1, 1, None, "1.00", 1234567)]

    formatted = format_tiers(tiers)

    assert formatted[0].discount == "1234567% off"


def test_format_tiers_precise_discount():
    tiers = [PricingTier.from_row(1, 1, None, "1.00", 33.3333)]

    assert format_tiers(tiers)[0].discount == "33.3333% off"
