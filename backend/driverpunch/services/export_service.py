# Overview: Paginated plain-text rendering of a return form for download and print preview.

from __future__ import annotations

import re
from datetime import datetime

from ..models import ReturnForm

LINES_PER_PAGE = 50
PAGE_BREAK = "\f"
DISPLAY_FORMAT = "%b %d, %Y %I:%M %p"

_COLUMNS = (("Item Name", 32), ("Qty", 6), ("Condition", 12), ("Notes", 28))


def _fmt(dt: datetime | None) -> str:
    return dt.strftime(DISPLAY_FORMAT) if dt else "-"


def _cell(value: str, width: int) -> str:
    value = value.replace("\n", " ")
    if len(value) > width - 1:
        value = value[: width - 2] + "~"
    return value.ljust(width)


def _row(values) -> str:
    return "".join(_cell(v, w) for v, (_, w) in zip(values, _COLUMNS)).rstrip()


def render_pages(form: ReturnForm, *, lines_per_page: int = LINES_PER_PAGE) -> list[str]:
    header = [
        "RETURN FORM".center(78).rstrip(),
        "",
        f"Driver: {form.driver_name}",
        f"Driver ID: {form.driver_id}",
        f"Date: {_fmt(form.submitted_at)}",
        f"Punch In Time: {_fmt(form.punch_log.timestamp if form.punch_log else None)}",
        "",
        "Return Items:",
        _row([name for name, _ in _COLUMNS]),
        "-" * 78,
    ]
    rows = [
        _row([item.item_name, str(item.quantity), item.condition, item.notes or "-"])
        for item in form.items
    ]
    footer = [
        "",
        f"Total Items: {form.total_items}",
        "",
        f"Form ID: {form.id} | Status: {form.status}",
    ]

    # Continuation pages repeat the table heading
    table_heading = header[-2:]
    pages: list[list[str]] = [list(header)]
    for line in rows:
        if len(pages[-1]) >= lines_per_page:
            pages.append(list(table_heading))
        pages[-1].append(line)
    if len(pages[-1]) + len(footer) > lines_per_page:
        pages.append([])
    pages[-1].extend(footer)

    total = len(pages)
    return [
        "\n".join(lines + ["", f"Page {number} of {total}".rjust(78)])
        for number, lines in enumerate(pages, start=1)
    ]


def render_document(form: ReturnForm) -> str:
    return (PAGE_BREAK + "\n").join(render_pages(form)) + "\n"


def export_filename(form: ReturnForm) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", (form.driver_name or "driver").lower()).strip("-") or "driver"
    day = form.submitted_at.strftime("%Y-%m-%d") if form.submitted_at else "undated"
    return f"return-form-{slug}-{day}.txt"
