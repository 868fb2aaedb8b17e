"""Import baseline character sheets from a shared spreadsheet.

The importer downloads a Google Sheets document as CSV and scans it for
labelled cells ("HP", "MP", "Armor", ...). A value is read from the first
non-empty cell to the right of its label, or from the cell directly below
when that cell is empty or is itself a label.

Failures are reported as:
    SheetUnreachableError: network errors, timeouts, 404 and 5xx answers.
    SheetAuthRequiredError: 401/403 or a redirect to a login page.
    MalformedSheetError: bad reference, or missing/non-numeric stats.
"""

from __future__ import annotations

import csv
import io
import re
from typing import Any

import requests
from tenacity import (
    RetryError,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from clashkeeper.core.config import SheetImportSettings
from clashkeeper.core.exceptions import (
    MalformedSheetError,
    SheetAuthRequiredError,
    SheetUnreachableError,
)
from clashkeeper.core.logging import get_logger
from clashkeeper.models.combatant import Baseline


logger = get_logger(__name__)

_URL_ID_PATTERN = re.compile(r"/spreadsheets/d/([A-Za-z0-9_-]+)")
_BARE_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]{20,}$")
_GID_PATTERN = re.compile(r"[#&?]gid=([0-9]+)")
_INT_PATTERN = re.compile(r"-?[0-9]+")

_NUMERIC_FIELDS = ("max_hp", "max_mp", "max_ip", "max_armor", "max_barrier")
_LOGIN_HOSTS = ("accounts.google.com", "/ServiceLogin")


def parse_sheet_reference(reference: str) -> tuple[str, str | None]:
    """Extract the document id and optional tab id from a link or bare id.

    Returns:
        Tuple of (sheet_id, gid or None).

    Raises:
        MalformedSheetError: If the reference is neither a sheet link nor an id.
    """
    reference = reference.strip()
    match = _URL_ID_PATTERN.search(reference)
    if match:
        gid_match = _GID_PATTERN.search(reference)
        return match.group(1), gid_match.group(1) if gid_match else None
    if _BARE_ID_PATTERN.match(reference):
        return reference, None
    raise MalformedSheetError(
        "Not a spreadsheet link",
        reference=reference,
        remediation="Paste the full Google Sheets link or its document id.",
    )


def _normalise_label(cell: str) -> str:
    return cell.strip().rstrip(":").strip().lower()


def extract_baseline(
    rows: list[list[str]],
    label_aliases: dict[str, list[str]],
    *,
    fallback_name: str | None = None,
    reference: str | None = None,
) -> Baseline:
    """Build a Baseline from CSV rows.

    Args:
        rows: Parsed CSV rows.
        label_aliases: Recognised labels per Baseline field.
        fallback_name: Character name to use when the sheet has none.
        reference: Sheet reference, for error context.

    Raises:
        MalformedSheetError: If a stat is missing or not a number.
    """
    lookup = {
        alias.lower(): field_name
        for field_name, aliases in label_aliases.items()
        for alias in aliases
    }
    found: dict[str, str] = {}

    for row_index, row in enumerate(rows):
        for col_index, cell in enumerate(row):
            field_name = lookup.get(_normalise_label(cell))
            if field_name is None or field_name in found:
                continue
            value = next((v.strip() for v in row[col_index + 1 :] if v.strip()), "")
            if _normalise_label(value) in lookup:
                value = ""
            if not value and row_index + 1 < len(rows):
                below = rows[row_index + 1]
                value = below[col_index].strip() if col_index < len(below) else ""
            if value:
                found[field_name] = value

    values: dict[str, Any] = {}
    missing = [f for f in _NUMERIC_FIELDS if f not in found]
    if missing:
        raise MalformedSheetError(
            "Sheet is missing stats",
            reference=reference,
            details={"missing": missing},
        )
    for field_name in _NUMERIC_FIELDS:
        match = _INT_PATTERN.search(found[field_name])
        if match is None or int(match.group()) < 0:
            raise MalformedSheetError(
                f"{field_name} is not a non-negative number",
                reference=reference,
                details={"field": field_name, "value": found[field_name]},
            )
        values[field_name] = int(match.group())

    name = found.get("character_name") or fallback_name
    if not name:
        raise MalformedSheetError(
            "Sheet has no character name",
            reference=reference,
            details={"missing": ["character_name"]},
        )
    values["character_name"] = name[:100]
    return Baseline(**values)


class SheetImporter:
    """Fetch baselines from Google Sheets CSV exports."""

    def __init__(
        self,
        settings: SheetImportSettings | None = None,
        *,
        session: requests.Session | None = None,
        wait: wait_base | None = None,
    ) -> None:
        """Initialize the importer.

        Args:
            settings: Import settings; library defaults when None.
            session: HTTP session; a new one when None.
            wait: Retry backoff; exponential 2-10 seconds when None.
        """
        self._settings = settings or SheetImportSettings()
        self._session = session or requests.Session()
        self._wait = wait or wait_exponential(multiplier=1, min=2, max=10)

    def export_url(self, reference: str) -> str:
        """CSV export URL for ``reference``."""
        sheet_id, gid = parse_sheet_reference(reference)
        url = self._settings.export_url_template.format(sheet_id=sheet_id)
        if gid is not None:
            url = f"{url}&gid={gid}"
        return url

    def _download(self, url: str) -> requests.Response:
        retrying = Retrying(
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            stop=stop_after_attempt(self._settings.max_retries),
            wait=self._wait,
            reraise=True,
        )
        return retrying(
            self._session.get,
            url,
            timeout=self._settings.timeout_seconds,
            allow_redirects=True,
        )

    def fetch_text(self, reference: str) -> str:
        """Download the CSV text of a sheet.

        Raises:
            SheetUnreachableError: On network failure, 404 or 5xx.
            SheetAuthRequiredError: If the sheet is not shared publicly.
            MalformedSheetError: If the reference is invalid.
        """
        url = self.export_url(reference)
        try:
            response = self._download(url)
        except (requests.ConnectionError, requests.Timeout, RetryError) as exc:
            raise SheetUnreachableError(
                f"Could not reach the sheet: {exc}",
                reference=reference,
            ) from exc

        if response.status_code in (401, 403):
            raise SheetAuthRequiredError("The sheet is private", reference=reference)
        if response.status_code == 404:
            raise SheetUnreachableError(
                "The sheet does not exist",
                reference=reference,
                remediation="Check that the link points to an existing sheet.",
            )
        if response.status_code >= 400:
            raise SheetUnreachableError(
                f"Sheet host answered {response.status_code}",
                reference=reference,
                details={"status_code": response.status_code},
            )

        content_type = response.headers.get("Content-Type", "")
        if any(marker in response.url for marker in _LOGIN_HOSTS) or "text/html" in content_type:
            raise SheetAuthRequiredError("The sheet asks for a login", reference=reference)
        return response.text

    def fetch_baseline(self, reference: str, *, fallback_name: str | None = None) -> Baseline:
        """Download a sheet and extract its baseline.

        Args:
            reference: Sheet link or document id.
            fallback_name: Character name to use when the sheet has none.

        Raises:
            SheetImportError: Any of the three import failures.
        """
        text = self.fetch_text(reference)
        rows = list(csv.reader(io.StringIO(text)))
        baseline = extract_baseline(
            rows,
            self._settings.label_aliases,
            fallback_name=fallback_name,
            reference=reference,
        )
        logger.info(
            "Sheet imported",
            reference=reference,
            character_name=baseline.character_name,
        )
        return baseline


__all__ = [
    "SheetImporter",
    "parse_sheet_reference",
    "extract_baseline",
]
