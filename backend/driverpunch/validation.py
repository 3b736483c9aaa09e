from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .models.returns import CONDITIONS

# Keeps item quantities and the summed total inside an SQLite INTEGER
MAX_ITEM_QUANTITY = 100_000
MAX_RETURN_ITEMS = 500


class ValidationError(ValueError):
    """
    400-level input problem.

    errors maps a field path (e.g. "items[1].quantity") to a message so a
    form can show each message beside its field.
    """

    def __init__(self, message: str, errors: dict[str, str] | None = None):
        super().__init__(message)
        self.errors = errors or {}

    def to_dict(self) -> dict:
        return {"error": str(self), "errors": self.errors}


@dataclass(frozen=True)
class ReturnItemInput:
    item_name: str
    quantity: int
    condition: str
    notes: str | None = None


def coerce_quantity(value: Any) -> int | None:
    """Strict integer coercion. Returns None for anything not a whole number."""
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.lstrip("-").isdigit():
            return int(stripped)
    return None


def _first(raw: dict, *keys: str) -> Any:
    for key in keys:
        if key in raw:
            return raw[key]
    return None


def validate_return_items(raw_items: Any) -> list[ReturnItemInput]:
    """
    Validate submitted return items.

    Requirements:
    - At least one item
    - Non-blank item name
    - Whole-number quantity between 1 and MAX_ITEM_QUANTITY
    - At most MAX_RETURN_ITEMS items
    - Condition in good | damaged | missing (defaults to good when omitted)
    - Optional free-text notes

    Raises ValidationError carrying every field-level problem found.
    """
    if not isinstance(raw_items, list) or not raw_items:
        raise ValidationError(
            "At least one item is required",
            {"items": "At least one item is required"},
        )
    if len(raw_items) > MAX_RETURN_ITEMS:
        message = f"At most {MAX_RETURN_ITEMS} items per form"
        raise ValidationError(message, {"items": message})

    errors: dict[str, str] = {}
    items: list[ReturnItemInput] = []

    for index, raw in enumerate(raw_items):
        prefix = f"items[{index}]"
        if not isinstance(raw, dict):
            errors[prefix] = "Item must be an object"
            continue

        name = _first(raw, "item_name", "itemName")
        name = name.strip() if isinstance(name, str) else ""
        if not name:
            errors[f"{prefix}.item_name"] = "Item name is required"

        quantity = coerce_quantity(raw.get("quantity"))
        if quantity is None or quantity < 1:
            errors[f"{prefix}.quantity"] = "Quantity must be at least 1"
        elif quantity > MAX_ITEM_QUANTITY:
            errors[f"{prefix}.quantity"] = f"Quantity must be at most {MAX_ITEM_QUANTITY}"

        condition = raw.get("condition")
        if condition is None:
            condition = "good"
        if condition not in CONDITIONS:
            errors[f"{prefix}.condition"] = f"Condition must be one of: {', '.join(CONDITIONS)}"

        notes = raw.get("notes")
        if notes is not None and not isinstance(notes, str):
            errors[f"{prefix}.notes"] = "Notes must be text"
            notes = None
        notes = (notes.strip() or None) if notes else None

        if not any(key.startswith(prefix) for key in errors):
            items.append(ReturnItemInput(item_name=name, quantity=quantity, condition=condition, notes=notes))

    if errors:
        raise ValidationError("Invalid return form", errors)
    return items


def total_quantity(items: list[ReturnItemInput]) -> int:
    return sum(item.quantity for item in items)
