"""
Readers and writers for holder snapshots.

Two sources are supported:

* holder exports: CSV files of quoted ``"Address","Balance","PendingBalanceUpdate"``
  rows (the last column is optional), one header line;
* benchmark reports: stdout captured from ``python -m insight_bench.pipeline``,
  from which the ``=== Holder Balances CSV for <contract> ...`` section is read.
"""

import csv
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import pandas as pd

from insight_bench.transformers.snapshots import validate_holders

HOLDER_COLUMNS = ["address", "balance", "pending_balance_update", "line_number"]
SECTION_HEADER = "holder_address,token_balance"
PAGE_TOTAL_PATTERN = re.compile(r"got (\d+) items, unique holders: \d+, total items so far: (\d+)")


@dataclass
class HolderExport:
    frame: pd.DataFrame
    total_lines: int = 0
    unparsed: List[Tuple[int, str]] = field(default_factory=list)


@dataclass
class ReportSection:
    frame: pd.DataFrame
    reported_total: int = 0
    decimals: int = 0
    pages: int = 0
    total_items_from_pages: int = 0
    found: bool = False


def _holder_frame(rows: List[dict]) -> pd.DataFrame:
    frame = pd.DataFrame(rows, columns=HOLDER_COLUMNS)
    frame["line_number"] = frame["line_number"].astype("int64")
    frame["pending_balance_update"] = frame["pending_balance_update"].astype(object)
    return validate_holders(frame)


def read_holder_export(path: Path) -> HolderExport:
    lines = Path(path).read_text(encoding="utf-8").split("\n")
    rows = []
    unparsed: List[Tuple[int, str]] = []
    total = 0

    # line 1 is the header
    for number, raw in enumerate(lines[1:], start=2):
        line = raw.strip()
        if not line:
            continue
        total += 1
        fields = next(csv.reader([line]))
        if len(fields) < 2 or not fields[0].strip():
            unparsed.append((number, line))
            continue
        rows.append(
            {
                "address": fields[0].strip(),
                "balance": fields[1].strip(),
                "pending_balance_update": fields[2].strip() if len(fields) > 2 else None,
                "line_number": number,
            }
        )
    return HolderExport(frame=_holder_frame(rows), total_lines=total, unparsed=unparsed)


def read_report_section(path: Path, contract: str) -> ReportSection:
    """Read the first holder section for ``contract`` from a benchmark report."""
    lines = Path(path).read_text(encoding="utf-8").split("\n")
    heading = re.compile(
        r"=== Holder Balances CSV for " + re.escape(contract)
        + r"(?: \((\d+) total holders, (\d+) decimals\))?",
        re.IGNORECASE,
    )
    contract_line = f"contract: {contract}".lower()

    section = ReportSection(frame=_holder_frame([]))
    rows = []
    in_section = False
    found_header = False
    done = False

    for number, line in enumerate(lines, start=1):
        totals = PAGE_TOTAL_PATTERN.search(line)
        if totals:
            section.total_items_from_pages = int(totals.group(2))
        if "Page " in line and "completed in" in line:
            section.pages += 1
        if done:
            continue

        match = heading.search(line)
        if match and not in_section:
            in_section = True
            section.found = True
            if match.group(1):
                section.reported_total = int(match.group(1))
                section.decimals = int(match.group(2))
            continue
        if in_section and not found_header:
            if line.strip() == SECTION_HEADER:
                found_header = True
            continue
        if in_section and found_header:
            if (
                not line.strip()
                or "--" in line
                or "===" in line
                or contract_line in line.lower()
            ):
                done = True
                continue
            parts = line.split(",")
            if len(parts) >= 2:
                rows.append(
                    {
                        "address": parts[0].strip(),
                        "balance": parts[1].strip(),
                        "pending_balance_update": None,
                        "line_number": number,
                    }
                )

    section.frame = _holder_frame(rows)
    return section


def write_holders_csv(frame: pd.DataFrame, path: Path, columns: Sequence[str], header: Optional[Sequence[str]] = None) -> int:
    """Write selected columns with every field quoted; returns the row count."""
    out = frame.loc[:, list(columns)]
    out.to_csv(path, index=False, header=list(header or columns), quoting=csv.QUOTE_ALL)
    return len(out)
