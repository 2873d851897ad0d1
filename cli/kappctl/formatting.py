from __future__ import annotations

import dataclasses
import json
import math
from datetime import datetime, timezone
from typing import Any, Sequence

import yaml
from rich.cells import cell_len
from rich.table import Table
from rich.text import Text

from . import console
from .errors import DecodeError, InputError
from .validation import JSON_FORMAT, YAML_FORMAT

TABLE_CELL_MAX_LEN = 64
DROP_LEN = 4
TABLE_PADDING = 3


def parse_timestamp(value: datetime | str | None) -> datetime | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            dt = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def format_age(seconds: int) -> str:
    """Largest unit only: 3h, 12m, 40s."""
    sign = "-" if seconds < 0 else ""
    seconds = abs(seconds)
    if seconds >= 3600:
        return f"{sign}{seconds // 3600}h"
    if seconds >= 60:
        return f"{sign}{seconds // 60}m"
    return f"{sign}{seconds}s"


def age_output(timestamp: datetime | str | None, *, now: datetime | None = None) -> str:
    dt = parse_timestamp(timestamp)
    if dt is None:
        return "-"
    now = now or datetime.now(timezone.utc)
    elapsed = (now - dt).total_seconds()
    # round half away from zero
    seconds = int(math.copysign(math.floor(abs(elapsed) + 0.5), elapsed))
    return f"{format_age(seconds)} ago"


def format_cell(value: Any) -> str:
    text = "" if value is None else str(value)
    if text in ("null", "{}"):
        return ""
    if len(text) > TABLE_CELL_MAX_LEN:
        text = text[: TABLE_CELL_MAX_LEN - DROP_LEN] + " ..."
    return text


def build_table(records: Sequence[Any]) -> Table | None:
    if not records:
        return None
    fields = dataclasses.fields(records[0])
    headers = [f.name.replace("_", " ").upper() for f in fields]
    rows = [[format_cell(getattr(record, f.name)) for f in fields] for record in records]

    # sized to its content so the terminal width never squeezes a column
    widths = [max(cell_len(cell) for cell in column) for column in zip(headers, *rows)]
    table = Table(
        box=None,
        show_edge=False,
        pad_edge=False,
        padding=(0, TABLE_PADDING, 0, 0),
        header_style="",
        show_lines=False,
        width=sum(w + TABLE_PADDING for w in widths),
    )
    for header in headers:
        table.add_column(header, justify="left", no_wrap=True, overflow="ignore")
    for row in rows:
        # server text is shown literally, never read as markup
        table.add_row(*(Text(cell) for cell in row))
    return table


def print_table(records: Sequence[Any]) -> None:
    table = build_table(records)
    if table is None:
        return
    console.print(table, crop=False)


def yaml_from_json(buf: bytes | str) -> str:
    try:
        data = json.loads(buf)
    except ValueError as e:
        raise DecodeError(f"failed to convert json response to yaml: {e}") from e
    return yaml.safe_dump(data, sort_keys=True, allow_unicode=True, default_flow_style=False)


def output_raw(buf: bytes | str, fmt: str) -> None:
    text = buf.decode("utf-8", errors="replace") if isinstance(buf, (bytes, bytearray)) else buf
    lowered = fmt.lower()
    if lowered == YAML_FORMAT:
        console.raw(yaml_from_json(text))
        return
    if lowered == JSON_FORMAT:
        console.raw(text)
        return
    if lowered == "":
        return
    raise InputError("the format is invalid")
