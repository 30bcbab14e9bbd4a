"""
In-memory cart used at checkout.

A cart holds lines. A line is one distinct combination of product, variant
options and add-ons; adding the same combination again bumps its quantity.
Line subtotals are always derived from quantity and prices, never stored.

Usage:
    cart = Cart()
    key = cart.add_line(product, variants=[size_large], extras=[extra_shot]).key
    cart.set_quantity(key, 3)
    cart.total()
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, NamedTuple, Optional, Tuple

from apps.core.exceptions import InvalidInputError

from .money import ZERO, round_currency, to_decimal

VARIANT_GROUP_SEPARATOR = '::'
DEFAULT_VARIANT_GROUP = 'Varian'


def split_variant_name(name: str) -> Tuple[str, str]:
    """
    Split ``"Size::Large"`` into ``("Size", "Large")``.

    Names without a separator fall into the default group.
    """
    if VARIANT_GROUP_SEPARATOR in name:
        group, option = name.split(VARIANT_GROUP_SEPARATOR, 1)
        group, option = group.strip(), option.strip()
        if group and option:
            return group, option
    return DEFAULT_VARIANT_GROUP, name.strip()


@dataclass(frozen=True)
class VariantSelection:
    id: str
    name: str


@dataclass(frozen=True)
class ExtraSelection:
    id: str
    name: str
    price: Decimal = ZERO

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'price': str(self.price)}


class LineKey(NamedTuple):
    """Order-independent identity of a cart line."""

    product_id: str
    variant_ids: Tuple[str, ...]
    extra_ids: Tuple[str, ...]

    @classmethod
    def build(cls, product_id, variant_ids=(), extra_ids=()):
        return cls(
            str(product_id),
            tuple(sorted({str(v) for v in variant_ids})),
            tuple(sorted({str(e) for e in extra_ids})),
        )


@dataclass
class CartLine:
    product_id: str
    product_name: str
    unit_price: Decimal
    quantity: int = 1
    variants: Tuple[VariantSelection, ...] = ()
    extras: Tuple[ExtraSelection, ...] = ()

    @property
    def key(self) -> LineKey:
        return LineKey.build(
            self.product_id,
            [v.id for v in self.variants],
            [e.id for e in self.extras],
        )

    @property
    def extras_total(self) -> Decimal:
        return round_currency(sum((e.price for e in self.extras), ZERO))

    @property
    def subtotal(self) -> Decimal:
        return round_currency((self.unit_price + self.extras_total) * self.quantity)

    @property
    def variant_label(self) -> str:
        """Variants grouped by group name, e.g. ``"Size: Large, Sugar: Less"``."""
        groups: Dict[str, List[str]] = {}
        for variant in self.variants:
            group, option = split_variant_name(variant.name)
            groups.setdefault(group, []).append(option)
        return ', '.join(
            f"{group}: {', '.join(options)}" for group, options in groups.items()
        )

    def to_snapshot(self) -> dict:
        return {
            'product_id': self.product_id,
            'variant_ids': list(self.key.variant_ids),
            'extra_ids': list(self.key.extra_ids),
            'quantity': self.quantity,
        }


@dataclass
class Cart:
    _lines: List[CartLine] = field(default_factory=list)

    @property
    def lines(self) -> Tuple[CartLine, ...]:
        return tuple(self._lines)

    @property
    def is_empty(self) -> bool:
        return not self._lines

    def __len__(self):
        return len(self._lines)

    def __iter__(self):
        return iter(self._lines)

    def get_line(self, key: LineKey) -> Optional[CartLine]:
        for line in self._lines:
            if line.key == key:
                return line
        return None

    def add_line(self, product, variants=(), extras=(), quantity: int = 1) -> CartLine:
        """
        Add a product selection to the cart.

        ``product`` needs ``id``, ``name`` and ``price``; variants need
        ``id`` and ``name``; extras also need ``price``. Catalog model
        instances and the selection dataclasses both work.

        Raises:
            InvalidInputError: If quantity is below 1
        """
        if quantity < 1:
            raise InvalidInputError("Quantity must be at least 1")

        variant_selections = tuple(
            VariantSelection(id=str(v.id), name=v.name) for v in variants
        )
        extra_selections = tuple(
            ExtraSelection(id=str(e.id), name=e.name, price=round_currency(e.price))
            for e in extras
        )
        key = LineKey.build(
            product.id,
            [v.id for v in variant_selections],
            [e.id for e in extra_selections],
        )

        existing = self.get_line(key)
        if existing is not None:
            existing.quantity += quantity
            return existing

        line = CartLine(
            product_id=str(product.id),
            product_name=product.name,
            unit_price=round_currency(product.price),
            quantity=quantity,
            variants=variant_selections,
            extras=extra_selections,
        )
        self._lines.append(line)
        return line

    def set_quantity(self, key: LineKey, quantity: int) -> Optional[CartLine]:
        """Set a line's quantity; zero or less removes the line."""
        line = self.get_line(key)
        if line is None:
            raise InvalidInputError("Item is no longer in the cart")
        if quantity <= 0:
            self.remove_line(key)
            return None
        line.quantity = int(quantity)
        return line

    def remove_line(self, key: LineKey) -> None:
        self._lines = [line for line in self._lines if line.key != key]

    def clear(self) -> None:
        self._lines = []

    def total(self) -> Decimal:
        return round_currency(sum((line.subtotal for line in self._lines), ZERO))

    # Per-product aggregates used by discount evaluation

    def quantity_for(self, product_id) -> int:
        product_id = str(product_id)
        return sum(line.quantity for line in self._lines if line.product_id == product_id)

    def subtotal_for(self, product_id) -> Decimal:
        product_id = str(product_id)
        return round_currency(sum(
            (line.subtotal for line in self._lines if line.product_id == product_id),
            ZERO
        ))

    def unit_price_for(self, product_id) -> Decimal:
        """Average unit price of a product across its lines, add-ons included."""
        quantity = self.quantity_for(product_id)
        if not quantity:
            return ZERO
        return round_currency(self.subtotal_for(product_id) / to_decimal(quantity))

    def to_snapshot(self) -> List[dict]:
        return [line.to_snapshot() for line in self._lines]
