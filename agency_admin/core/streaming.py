from __future__ import annotations

import csv
import io
from typing import Any, Dict, Iterable, Iterator, List

# leading characters spreadsheet tools evaluate as formulas
_FORMULA_PREFIXES = ("=", "+", "-", "@")


def _cell(value: Any) -> Any:
    if isinstance(value, str) and value.startswith(_FORMULA_PREFIXES):
        return "'" + value
    return value


def csv_stream(rows: Iterable[Dict[str, Any]], fieldnames: List[str]) -> Iterator[bytes]:
    """
    Stream CSV as bytes one row at a time. Public-submitted text is escaped so
    it cannot run as a spreadsheet formula.
    """
    buf = io.StringIO()
    writer = csv.DictWriter(buf, fieldnames=fieldnames, extrasaction="ignore")
    writer.writeheader()
    yield buf.getvalue().encode("utf-8")
    buf.seek(0)
    buf.truncate(0)

    for r in rows:
        writer.writerow({k: _cell(v) for k, v in r.items()})
        yield buf.getvalue().encode("utf-8")
        buf.seek(0)
        buf.truncate(0)
