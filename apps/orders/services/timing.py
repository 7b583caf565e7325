"""
Order ready-time estimation.

Two estimators exist and both are kept:

- ``estimate_flat``: base minutes plus a flat amount per unit ordered.
  This is what order creation has always used.
- ``estimate_by_category``: base minutes plus a per-category amount per
  unit (coffee 2, food 5, dessert 3, anything else 2).

``estimate_ready_time`` picks one according to
``settings.ORDER_READY_TIME_ESTIMATOR`` (``'flat'`` or ``'category'``).

Both are pure functions of the items and ``now``. Quantities are assumed
to be validated (>= 1) before they get here.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Iterable, Mapping, Optional, Union

from django.conf import settings


DEFAULT_BASE_MINUTES = 5
DEFAULT_PER_ITEM_MINUTES = 2
DEFAULT_CATEGORY_MINUTES = {
    'coffee': 2,
    'food': 5,
    'dessert': 3,
    'default': 2,
}


@dataclass(frozen=True)
class LineItem:
    """The parts of an ordered item that matter for timing."""

    category: str = ''
    quantity: int = 1

    @classmethod
    def from_mapping(cls, data: Mapping) -> 'LineItem':
        return cls(
            category=str(data.get('category') or '').strip().lower(),
            quantity=int(data.get('quantity', 1)),
        )


@dataclass(frozen=True)
class ReadyTimeEstimate:
    ready_at: datetime
    minutes: int


ItemLike = Union[LineItem, Mapping]


def _line_items(items: Iterable[ItemLike]):
    for item in items:
        yield item if isinstance(item, LineItem) else LineItem.from_mapping(item)


def estimate_by_category(
    items: Iterable[ItemLike],
    now: datetime,
    base_minutes: int = DEFAULT_BASE_MINUTES,
    per_category_minutes: Optional[Mapping[str, int]] = None,
) -> ReadyTimeEstimate:
    """
    Estimate preparation time from each item's category.

    ``minutes = base + sum(per_category[category] * quantity)``, where
    unknown categories use the ``'default'`` entry.

    Example:
        2 coffees and 1 food item with base 5::

            >>> estimate_by_category(
            ...     [{'category': 'coffee', 'quantity': 2},
            ...      {'category': 'food', 'quantity': 1}],
            ...     now,
            ... ).minutes
            14
    """
    table = dict(DEFAULT_CATEGORY_MINUTES if per_category_minutes is None else per_category_minutes)
    fallback = table.get('default', DEFAULT_CATEGORY_MINUTES['default'])

    minutes = base_minutes
    for item in _line_items(items):
        minutes += table.get(item.category, fallback) * item.quantity

    return ReadyTimeEstimate(ready_at=now + timedelta(minutes=minutes), minutes=minutes)


def estimate_flat(
    items: Iterable[ItemLike],
    now: datetime,
    base_minutes: int = DEFAULT_BASE_MINUTES,
    per_item_minutes: int = DEFAULT_PER_ITEM_MINUTES,
) -> ReadyTimeEstimate:
    """
    Estimate preparation time ignoring categories.

    ``minutes = base + per_item * total quantity``.
    """
    total_quantity = sum(item.quantity for item in _line_items(items))
    minutes = base_minutes + per_item_minutes * total_quantity
    return ReadyTimeEstimate(ready_at=now + timedelta(minutes=minutes), minutes=minutes)


def estimate_ready_time(items: Iterable[ItemLike], now: datetime) -> ReadyTimeEstimate:
    """Estimate with the estimator and minutes configured in settings."""
    base = getattr(settings, 'ORDER_BASE_PREP_MINUTES', DEFAULT_BASE_MINUTES)
    estimator = getattr(settings, 'ORDER_READY_TIME_ESTIMATOR', 'flat')

    if estimator == 'category':
        return estimate_by_category(
            items,
            now,
            base_minutes=base,
            per_category_minutes=getattr(
                settings, 'ORDER_CATEGORY_PREP_MINUTES', DEFAULT_CATEGORY_MINUTES
            ),
        )
    if estimator == 'flat':
        return estimate_flat(
            items,
            now,
            base_minutes=base,
            per_item_minutes=getattr(settings, 'ORDER_PER_ITEM_MINUTES', DEFAULT_PER_ITEM_MINUTES),
        )
    raise ValueError(f"Unknown ORDER_READY_TIME_ESTIMATOR: {estimator!r}")
