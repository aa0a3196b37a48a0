from __future__ import annotations

import pytest
from services.api.app.models.order import OrderLine
from services.api.app.services.order_lines import (
    OrderLineAggregator,
    VariantOption,
    lines_from_form_pairs,
)

THERMOS = [
    VariantOption(variant_id="v-black", title="0.5 л / Чорний"),
    VariantOption(variant_id="v-grey", title="1 л / Сірий"),
]
MUG = [VariantOption(variant_id="v-mug", title="Default Title")]


def test_lines_follow_pick_order_with_first_variant_and_quantity_one() -> None:
    agg = OrderLineAggregator()
    agg.add("p-thermos", "Термос", THERMOS)
    agg.add("p-mug", "Чашка", MUG)

    assert agg.lines() == (
        OrderLine(variant_id="v-black", quantity=1),
        OrderLine(variant_id="v-mug", quantity=1),
    )


def test_choose_variant_and_quantity() -> None:
    agg = OrderLineAggregator()
    agg.add("p-thermos", "Термос", THERMOS)

    agg.choose_variant("p-thermos", "v-grey")
    agg.set_quantity("p-thermos", 3)

    assert agg.lines() == (OrderLine(variant_id="v-grey", quantity=3),)


def test_variant_must_belong_to_product() -> None:
    agg = OrderLineAggregator()
    agg.add("p-thermos", "Термос", THERMOS)

    with pytest.raises(ValueError, match="does not belong"):
        agg.choose_variant("p-thermos", "v-mug")
    assert agg.lines()[0].variant_id == "v-black"


@pytest.mark.parametrize("quantity", [0, -1, True])
def test_quantity_must_be_positive_integer(quantity: int) -> None:
    agg = OrderLineAggregator()
    agg.add("p-mug", "Чашка", MUG)

    with pytest.raises(ValueError, match="positive integer"):
        agg.set_quantity("p-mug", quantity)


def test_readding_a_product_keeps_one_entry_and_valid_choice() -> None:
    agg = OrderLineAggregator()
    agg.add("p-thermos", "Термос", THERMOS)
    agg.choose_variant("p-thermos", "v-grey")
    agg.set_quantity("p-thermos", 2)

    agg.add("p-thermos", "Термос", THERMOS)

    assert agg.lines() == (OrderLine(variant_id="v-grey", quantity=2),)


def test_replace_all_drops_unpicked_products() -> None:
    agg = OrderLineAggregator()
    agg.add("p-thermos", "Термос", THERMOS)
    agg.add("p-mug", "Чашка", MUG)
    agg.set_quantity("p-mug", 4)

    agg.replace_all([("p-mug", "Чашка", MUG)])

    assert agg.lines() == (OrderLine(variant_id="v-mug", quantity=4),)


def test_remove_unknown_product_raises() -> None:
    agg = OrderLineAggregator()

    with pytest.raises(KeyError):
        agg.remove("p-missing")


def test_product_without_variants_is_rejected() -> None:
    with pytest.raises(ValueError):
        OrderLineAggregator().add("p-empty", "Empty", [])


def test_form_pairs_default_missing_quantity_to_one() -> None:
    lines = lines_from_form_pairs(["v1", "v2", "v3"], ["2", ""])

    assert lines == (
        OrderLine(variant_id="v1", quantity=2),
        OrderLine(variant_id="v2", quantity=1),
        OrderLine(variant_id="v3", quantity=1),
    )


def test_form_pairs_keep_bad_quantities_for_validation() -> None:
    lines = lines_from_form_pairs(["v1", "", "v2"], ["abc", "5", "-1"])

    assert lines == (
        OrderLine(variant_id="v1", quantity=0),
        OrderLine(variant_id="v2", quantity=-1),
    )
