from datetime import timedelta

import pytest

from storefront.enums.discount_types import DiscountType
from storefront.schemas.discount import DiscountRecord, EmbeddedDiscount
from storefront.schemas.product import Product
from storefront.services.pricing_service.resolver import resolve, to_resolution_input


@pytest.fixture()
def records(now):
    return [
        DiscountRecord(
            id="20off",
            name="Twenty",
            percentage=20,
            valid_from=now - timedelta(days=1),
            valid_to=now + timedelta(days=1),
        ),
        DiscountRecord(id="off", percentage=30, is_active=False),
        DiscountRecord(id="123", percentage=12),
    ]


def test_reference_match_beats_embedded(now, records):
    product = Product(id="p", price=1000, discount_id="20off", discount={"percentage": 50})

    found = resolve(product, records, now)

    assert found is records[0]
    assert found.percentage == 20
    assert found.synthetic is False


def test_reference_match_compares_ids_as_strings(now, records):
    found = resolve({"id": "p", "price": 100, "discountId": 123}, records, now)
    assert found is records[2]


def test_inactive_reference_falls_through_to_next_tier(now, records):
    product = Product(id="p", price=1000, discount_id="off", discount=10)

    found = resolve(product, records, now)

    assert found.synthetic is True
    assert found.source == "numeric"
    assert found.percentage == 10


def test_inactive_reference_without_other_signals_resolves_nothing(now, records):
    assert resolve(Product(id="p", price=1000, discount_id="off"), records, now) is None


def test_unknown_reference_is_ignored(now, records):
    assert resolve(Product(id="p", price=1000, discount_id="missing"), records, now) is None


def test_embedded_object_is_synthesized_with_defaults(now):
    product = Product(id="p", price=1000, discount={"percentage": 50, "name": "Half"})

    found = resolve(product, [], now)

    assert found.synthetic is True
    assert found.source == "embedded"
    assert found.id is None
    assert found.name == "Half"
    assert found.percentage == 50
    assert found.type == DiscountType.sale
    assert found.is_active is True
    assert found.valid_from == now
    assert found.valid_to == now + timedelta(days=7)


def test_embedded_object_keeps_its_dates_and_type(now):
    product = Product(
        id="p",
        price=1000,
        discount={
            "percentage": 15,
            "startDate": "2026-02-01",
            "endDate": "2026-04-01",
            "type": "special",
        },
    )

    found = resolve(product, [], now)

    assert found.valid_from.year == 2026 and found.valid_from.month == 2
    assert found.valid_to.month == 4
    assert found.type == DiscountType.special


def test_embedded_object_with_bad_dates_uses_default_window(now):
    found = resolve({"price": 100, "discount": {"percentage": 5, "startDate": "soon", "endDate": None}}, [], now)

    assert found.valid_from == now
    assert found.valid_to == now + timedelta(days=7)


def test_embedded_zero_percentage_falls_through_to_old_price(now):
    product = Product(id="p", price=900, old_price=1000, discount={"percentage": 0})

    found = resolve(product, [], now)

    assert found.source == "inferred"
    assert found.percentage == 10


def test_bare_numeric_discount(now):
    found = resolve(Product(id="p", price=2999, discount=15), [], now)

    assert found.source == "numeric"
    assert found.percentage == 15
    assert found.valid_to == now + timedelta(days=7)


def test_inferred_from_price_delta(now):
    found = resolve(Product(id="p", price=800, old_price=1000), [], now)

    assert found.source == "inferred"
    assert found.percentage == 20
    assert found.synthetic is True


def test_inferred_percentage_is_rounded(now):
    # (1000 - 875) / 1000 = 12.5% -> 13
    found = resolve(Product(id="p", price=875, old_price=1000), [], now)
    assert found.percentage == 13


def test_old_price_not_above_price_is_no_discount(now):
    assert resolve(Product(id="p", price=1000, old_price=1000), [], now) is None
    assert resolve(Product(id="p", price=1000, old_price=900), [], now) is None


def test_no_signal_resolves_nothing(now, records):
    assert resolve(Product(id="p", price=500), records, now) is None


@pytest.mark.parametrize(
    "raw",
    [
        {"price": 100, "discount": "ten percent"},
        {"price": 100, "discount": ["x"]},
        {"price": "abc", "oldPrice": "def"},
        {"price": 100, "oldPrice": 0},
        {},
        None,
    ],
)
def test_malformed_products_never_raise(now, raw):
    assert resolve(raw, [], now) is None


def test_resolution_input_accepts_objects_and_dicts():
    from_model = to_resolution_input(Product(id="p", price=10, old_price=12, discount_id="x", discount=5))
    from_dict = to_resolution_input({"price": 10, "oldPrice": 12, "discountId": "x", "discount": 5})

    assert from_model == from_dict
    assert from_model.numeric == 5
    assert from_model.embedded is None

    embedded = to_resolution_input(Product(id="p", price=10, discount={"percentage": 5}))
    assert isinstance(embedded.embedded, EmbeddedDiscount)
    assert embedded.numeric is None


def test_malformed_product_payloads_are_dropped_at_ingestion():
    assert Product(id="p", price=10, discount="lots").discount is None
    assert Product(id="p", price=10, discount={"percentage": "x"}).discount.percentage == 0
    assert Product(id="p", price=None).price == 0
