from __future__ import annotations

import threading
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace

from services.api.app.models.order import OrderLine


@dataclass(frozen=True, slots=True)
class VariantOption:
    variant_id: str
    title: str
    image: str | None = None


@dataclass(frozen=True, slots=True)
class ProductSelection:
    product_id: str
    title: str
    variants: tuple[VariantOption, ...]
    chosen_variant_id: str
    quantity: int = 1

    def __post_init__(self) -> None:
        if not self.variants:
            raise ValueError(f"Product {self.product_id} has no variants")
        if self.chosen_variant_id not in {v.variant_id for v in self.variants}:
            raise ValueError(
                f"Variant {self.chosen_variant_id} does not belong to product {self.product_id}"
            )
        _require_quantity(self.quantity)


class OrderLineAggregator:
    """Products picked for one order, in the order they were picked.

    One entry per distinct product. The chosen variant always belongs to the product
    and the quantity is always a positive integer.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._selections: dict[str, ProductSelection] = {}

    def add(
        self,
        product_id: str,
        title: str,
        variants: Sequence[VariantOption],
    ) -> ProductSelection:
        variants = tuple(variants)
        if not variants:
            raise ValueError(f"Product {product_id} has no variants")

        with self._lock:
            current = self._selections.get(product_id)
            variant_ids = {v.variant_id for v in variants}
            if current is not None and current.chosen_variant_id in variant_ids:
                chosen = current.chosen_variant_id
                quantity = current.quantity
            else:
                chosen = variants[0].variant_id
                quantity = current.quantity if current is not None else 1

            selection = ProductSelection(
                product_id=product_id,
                title=title,
                variants=variants,
                chosen_variant_id=chosen,
                quantity=quantity,
            )
            self._selections[product_id] = selection
            return selection

    def replace_all(self, products: Iterable[tuple[str, str, Sequence[VariantOption]]]) -> None:
        """Keep exactly the given products; previous choices survive where still valid."""

        products = list(products)
        keep = {product_id for product_id, _, _ in products}
        with self._lock:
            self._selections = {k: v for k, v in self._selections.items() if k in keep}
        for product_id, title, variants in products:
            self.add(product_id, title, variants)

    def choose_variant(self, product_id: str, variant_id: str) -> ProductSelection:
        with self._lock:
            current = self._get(product_id)
            selection = replace(current, chosen_variant_id=variant_id)
            self._selections[product_id] = selection
            return selection

    def set_quantity(self, product_id: str, quantity: int) -> ProductSelection:
        with self._lock:
            current = self._get(product_id)
            selection = replace(current, quantity=quantity)
            self._selections[product_id] = selection
            return selection

    def remove(self, product_id: str) -> None:
        with self._lock:
            self._get(product_id)
            del self._selections[product_id]

    def selections(self) -> list[ProductSelection]:
        with self._lock:
            return list(self._selections.values())

    def lines(self) -> tuple[OrderLine, ...]:
        return tuple(
            OrderLine(variant_id=s.chosen_variant_id, quantity=s.quantity)
            for s in self.selections()
        )

    def _get(self, product_id: str) -> ProductSelection:
        try:
            return self._selections[product_id]
        except KeyError:
            raise KeyError(f"Product {product_id} is not in this order") from None


def lines_from_form_pairs(
    variant_ids: Sequence[str],
    quantities: Sequence[str | int | None],
) -> tuple[OrderLine, ...]:
    """Pair the submit form's parallel ``variantId``/``qty`` lists.

    A missing or blank quantity defaults to 1. A quantity that is not an integer is
    kept as 0 so validation reports it instead of silently dropping the line.
    """

    lines: list[OrderLine] = []
    for i, variant_id in enumerate(variant_ids):
        variant_id = (variant_id or "").strip()
        if not variant_id:
            continue

        raw = quantities[i] if i < len(quantities) else None
        lines.append(OrderLine(variant_id=variant_id, quantity=_parse_quantity(raw)))
    return tuple(lines)


def _parse_quantity(raw: str | int | None) -> int:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return 1
    try:
        return int(raw)
    except (TypeError, ValueError):
        return 0


def _require_quantity(quantity: int) -> None:
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
        raise ValueError(f"Quantity must be a positive integer, got {quantity!r}")
