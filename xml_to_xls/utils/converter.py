import codecs
import logging
import re
import time
from pathlib import Path
from typing import Callable, Optional, Sequence

from ..config import config
from .audit import audit_logger
from .errors import ConversionError, ReadFailure
from .parser import ParserStrategy, default_strategies, parse
from .repair import repair
from .splitter import split
from .workbook import write_workbook

log = logging.getLogger(__name__)

OUTPUT_SUFFIX = ".xlsx"
ERROR_CONTEXT = "Error processing XML"

ProgressCallback = Callable[[int, str], None]

_DECLARED_ENCODING = re.compile(rb"""<\?xml[^>]*encoding\s*=\s*["']([A-Za-z0-9._-]+)["']""")


def output_path_for(input_file: Path) -> Path:
    """The workbook path: same base name as the input, .xlsx extension."""
    input_file = Path(input_file)
    output_file = input_file.with_suffix(OUTPUT_SUFFIX)
    if output_file == input_file:
        output_file = input_file.with_name(input_file.name + OUTPUT_SUFFIX)
    return output_file


def decode_document(raw: bytes) -> str:
    """Decode uploaded bytes, preferring UTF-8 and falling back to the declared encoding."""
    if raw.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return raw.decode("utf-16", errors="replace")
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        pass

    match = _DECLARED_ENCODING.search(raw[:200])
    if match:
        try:
            return raw.decode(match.group(1).decode("ascii"), errors="replace")
        except LookupError:
            log.warning(f"Unknown declared encoding {match.group(1)!r}, using latin-1")
    return raw.decode("latin-1")


def _ignore_progress(percent: int, message: str) -> None:
    pass


class XMLToExcelConverter:
    def __init__(self,
        strategies: Optional[Sequence[ParserStrategy]] = None,
        max_depth: Optional[int] = None,
        metadata_sheet: Optional[str] = config.METADATA_SHEET_NAME
    ):
        self.strategies = tuple(strategies) if strategies is not None else default_strategies(config.COERCE_SCALARS)
        self.max_depth = max_depth if max_depth is not None else config.MAX_NESTING_DEPTH
        self.metadata_sheet = metadata_sheet

    def _read(self, input_file: Path) -> str:
        try:
            raw = input_file.read_bytes()
        except OSError as e:
            raise ReadFailure(f"Failed to read XML file: {str(e)}") from e
        try:
            return decode_document(raw)
        except UnicodeError as e:
            raise ReadFailure(f"Failed to decode XML file: {str(e)}") from e

    def convert(self,
        input_file: Path,
        output_file: Optional[Path] = None,
        progress_callback: Optional[ProgressCallback] = None,
        user_id: str = "system"
    ) -> Path:
        """Convert an XML file to a multi-sheet Excel workbook and return its path."""
        start_time = time.time()
        input_file = Path(input_file)
        output_file = Path(output_file) if output_file else output_path_for(input_file)
        report = progress_callback or _ignore_progress

        try:
            report(10, "Reading XML file...")
            text = self._read(input_file)

            report(20, "Cleaning XML data...")
            text = repair(text)

            report(30, "Parsing XML...")
            tree = parse(text, self.strategies, self.max_depth)

            plan = split(tree, self.max_depth, self.metadata_sheet)

            write_workbook(plan, output_file, progress_callback=report)

            report(100, "Conversion complete!")
        except ConversionError as e:
            audit_logger.log_error(
                "convert_xml_to_xlsx",
                e,
                user_id=user_id,
                input_file=str(input_file),
                output_file=str(output_file)
            )
            raise e.with_context(ERROR_CONTEXT) from e

        conversion_time = (time.time() - start_time) * 1000  # Convert to milliseconds
        audit_logger.log_conversion(input_file, output_file, conversion_time, plan, user_id=user_id)
        log.info(f"Converted {input_file.name} -> {output_file.name} ({len(plan)} sheets)")
        return output_file

# Create singleton instance
converter = XMLToExcelConverter()
