import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Set, Union

import pandas as pd

from .errors import WriteFailure

log = logging.getLogger(__name__)

MAX_SHEET_NAME_LENGTH = 31
DEFAULT_SHEET_NAME = "Sheet"
_INVALID_SHEET_CHARS = re.compile(r"[\[\]:*?/\\]")


def sanitize_sheet_name(name: str, taken: Set[str]) -> str:
    """Make ``name`` a valid Excel sheet name not already in ``taken``.

    Excel compares sheet names case-insensitively, so ``taken`` holds lowered
    names and is updated with the returned one.
    """
    cleaned = _INVALID_SHEET_CHARS.sub("_", name).strip("'") or DEFAULT_SHEET_NAME
    candidate = cleaned[:MAX_SHEET_NAME_LENGTH]
    counter = 1
    while candidate.lower() in taken:
        counter += 1
        suffix = f"~{counter}"
        candidate = cleaned[:MAX_SHEET_NAME_LENGTH - len(suffix)] + suffix
    taken.add(candidate.lower())
    return candidate


def build_frame(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    """Rows become a frame whose columns are the union of their keys, in first-seen order."""
    columns: Dict[str, None] = {}
    for row in rows:
        for key in row:
            columns.setdefault(key, None)
    return pd.DataFrame(rows, columns=list(columns))


def _keep_as_text(worksheet) -> None:
    """Store every cell openpyxl took for a formula as plain text."""
    for row in worksheet.iter_rows():
        for cell in row:
            if cell.data_type == "f":
                cell.data_type = "s"


def write_workbook(plan: Dict[str, List[Dict[str, Any]]], output_path: Union[str, Path],
                   progress_callback: Optional[Callable[[int, str], None]] = None) -> Path:
    """Write one worksheet per sheet of ``plan`` to an .xlsx file.

    ``progress_callback`` hears 50% once the workbook is open, 60% as the rows
    are laid out into sheets and 80% just before the file is saved.
    """
    report = progress_callback or (lambda percent, message: None)
    output_path = Path(output_path)
    if not plan:
        raise WriteFailure("The document contains no data to write")

    try:
        taken: Set[str] = set()
        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            report(50, "Creating Excel workbook...")
            report(60, "Processing data...")
            for name, rows in plan.items():
                sheet_name = sanitize_sheet_name(name, taken)
                if sheet_name != name:
                    log.info(f"Sheet '{name}' written as '{sheet_name}'")
                build_frame(rows).to_excel(writer, sheet_name=sheet_name, index=False)
                _keep_as_text(writer.sheets[sheet_name])
            report(80, "Writing Excel file...")
    except Exception as e:
        log.error(f"Failed to write workbook {output_path}: {str(e)}")
        raise WriteFailure(f"Failed to write Excel file: {str(e)}") from e

    return output_path
