"""
Pincode Rule CSV Import

parse -> validate -> classify -> batch write, shared by the admin bulk upload
and scripts/upload_pincode_rules.py.

The parser splits on commas only. Quoted fields and escaped commas are not
supported: a quoted cell keeps its quotes and a comma inside quotes starts a
new column.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from logger import logger

# models
from models import Pincode_Rule

from .pincode_rule_validation import (
    RULE_INPUT_FIELDS,
    is_valid_pincode,
    validate_rule_fields,
)


SAMPLE_CSV = (
    "pincode,deliverable,etaMinDays,etaMaxDays,codAvailable,shippingFee\n"
    "110001,true,2,4,true,49\n"
    "110005,true,5,7,false,50\n"
)


class PincodeCsvError(ValueError):
    """The file as a whole cannot be imported."""


@dataclass
class InvalidCsvRow:
    row: int
    reason: str
    pincode: Optional[str] = None


@dataclass
class CsvImportResult:
    inserted: int = 0
    updated: int = 0
    invalid: List[InvalidCsvRow] = field(default_factory=list)

    @property
    def invalid_count(self) -> int:
        return len(self.invalid)


def parse_csv(text: str) -> Tuple[List[str], List[Dict[str, str]]]:
    """
    Header row plus one dict per data row, keyed by the header as written.
    Blank lines are dropped, cells are trimmed, short rows are padded with "".
    """
    lines = [
        line.strip()
        for line in text.replace("\r\n", "\n").replace("\r", "\n").split("\n")
    ]
    lines = [line for line in lines if line]

    if not lines:
        return [], []

    headers = [header.strip() for header in lines[0].split(",")]
    rows = []
    for line in lines[1:]:
        cells = [cell.strip() for cell in line.split(",")]
        rows.append(
            {
                header: cells[i] if i < len(cells) else ""
                for i, header in enumerate(headers)
            }
        )

    return headers, rows


def build_header_map(headers: List[str]) -> Dict[str, str]:
    """lower-cased header -> header as written in the file"""
    return {header.lower(): header for header in headers}


def canonical_row(row: Dict[str, str], header_map: Dict[str, str]) -> Dict[str, Optional[str]]:
    """Row values keyed by input name; None when the file has no such column."""
    values = {}
    for input_name in RULE_INPUT_FIELDS:
        header = header_map.get(input_name.lower())
        values[input_name] = row.get(header) if header is not None else None
    return values


def import_pincode_csv(db: Session, shop: str, csv_text: str) -> CsvImportResult:
    """
    Validate every data row and upsert the valid ones for this shop.

    Rows are numbered as a spreadsheet shows them: the first data row is row 2.
    Invalid rows are reported and never written. Valid rows are written in
    file order inside the caller's transaction, so the caller commits or rolls
    back the whole batch. Insert/update classification uses the pincodes that
    existed before the import, so a pincode repeated in one file is counted
    once per row.
    """
    headers, rows = parse_csv(csv_text)
    header_map = build_header_map(headers)

    if "pincode" not in header_map:
        raise PincodeCsvError('CSV must include a "pincode" column.')

    canonical_rows = [canonical_row(row, header_map) for row in rows]

    candidate_pincodes = [
        (values["pincode"] or "").strip()
        for values in canonical_rows
        if is_valid_pincode((values["pincode"] or "").strip())
    ]
    existing = Pincode_Rule.existing_pincodes(db, shop, candidate_pincodes)

    result = CsvImportResult()
    valid_rules = []

    for index, values in enumerate(canonical_rows):
        row_number = index + 2
        validation = validate_rule_fields(values, source="csv")

        if not validation.is_valid:
            result.invalid.append(
                InvalidCsvRow(
                    row=row_number,
                    reason=validation.first_error.message,
                    pincode=validation.pincode,
                )
            )
            continue

        valid_rules.append(validation.values)

    for rule in valid_rules:
        db.execute(Pincode_Rule.upsert_statement(db, shop, rule))

        if rule["pincode"] in existing:
            result.updated += 1
        else:
            result.inserted += 1

    logger.info(
        msg=f"Pincode CSV import for {shop}: rows={len(rows)} "
        f"inserted={result.inserted} updated={result.updated} "
        f"invalid={result.invalid_count}"
    )

    return result
