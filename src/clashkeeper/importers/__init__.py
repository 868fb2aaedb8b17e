"""External character sheet importers."""

from clashkeeper.importers.sheets import (
    SheetImporter,
    extract_baseline,
    parse_sheet_reference,
)

__all__ = [
    "SheetImporter",
    "extract_baseline",
    "parse_sheet_reference",
]
