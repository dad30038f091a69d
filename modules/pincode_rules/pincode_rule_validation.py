"""
Pincode Rule Validation

Field parsing shared by the single-rule form and the CSV bulk import.

- pincode: exactly six digits, kept as text so leading zeros survive
- deliverable / codAvailable: "true", "1", "yes" (any case) are true,
  anything else is false; blank or missing falls back to the field default
- etaMinDays / etaMaxDays / shippingFee: blank or missing is null, anything
  else must be a non-negative whole number
"""

import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple


# ASCII digits only, \d would also match other scripts
PINCODE_REGEX = re.compile(r"[0-9]{6}")
# whole number, optionally written with a zero fraction ("2.0")
INTEGER_REGEX = re.compile(r"([0-9]+)(\.0*)?")
TRUE_VALUES = {"true", "1", "yes"}
# upper bound of the INTEGER columns
MAX_INT_VALUE = 2_147_483_647

# messages differ between the admin form and the CSV report
PINCODE_MESSAGES = {
    "form": "Pincode must be exactly 6 digits.",
    "csv": "Invalid pincode (must be 6 digits).",
}

# (model attribute, input name, form message, csv message)
NUMERIC_FIELDS: Tuple[Tuple[str, str, str, str], ...] = (
    (
        "eta_min_days",
        "etaMinDays",
        "ETA Min must be a non-negative integer.",
        "etaMinDays must be a non-negative integer.",
    ),
    (
        "eta_max_days",
        "etaMaxDays",
        "ETA Max must be a non-negative integer.",
        "etaMaxDays must be a non-negative integer.",
    ),
    (
        "shipping_fee",
        "shippingFee",
        "Shipping fee must be a non-negative integer.",
        "shippingFee must be a non-negative integer.",
    ),
)

RULE_INPUT_FIELDS = (
    "pincode",
    "deliverable",
    "etaMinDays",
    "etaMaxDays",
    "codAvailable",
    "shippingFee",
)


def is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def is_valid_pincode(pincode: Optional[str]) -> bool:
    return bool(PINCODE_REGEX.fullmatch(pincode or ""))


def to_bool(value: Optional[str], fallback: bool = False) -> bool:
    if is_blank(value):
        return fallback
    return str(value).strip().lower() in TRUE_VALUES


def to_non_negative_int(value: Optional[str]) -> Optional[int]:
    """Whole, non-negative number or None. "2.0" counts as 2."""
    if is_blank(value):
        return None
    match = INTEGER_REGEX.fullmatch(str(value).strip())
    if not match:
        return None
    number = int(match.group(1))
    if number > MAX_INT_VALUE:
        return None
    return number


@dataclass
class RuleValidationError:
    field: str
    message: str
    value: Optional[str] = None


@dataclass
class RuleValidationResult:
    pincode: str
    values: Dict[str, object] = field(default_factory=dict)
    errors: List[RuleValidationError] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def first_error(self) -> Optional[RuleValidationError]:
        return self.errors[0] if self.errors else None


def validate_rule_fields(
    raw: Mapping[str, Optional[str]], source: str = "form"
) -> RuleValidationResult:
    """
    Validate one rule given as raw strings keyed by input name.

    Stops at the first problem: a bad pincode is reported before any other
    field is looked at, then numeric fields in column order.
    """
    csv_messages = source == "csv"
    pincode = str(raw.get("pincode") or "").strip()
    result = RuleValidationResult(pincode=pincode)

    if not is_valid_pincode(pincode):
        result.errors.append(
            RuleValidationError("pincode", PINCODE_MESSAGES[source], pincode)
        )
        return result

    values: Dict[str, object] = {
        "pincode": pincode,
        "deliverable": to_bool(raw.get("deliverable"), True),
        "cod_available": to_bool(raw.get("codAvailable"), False),
    }

    for attribute, input_name, form_message, csv_message in NUMERIC_FIELDS:
        raw_value = raw.get(input_name)
        parsed = to_non_negative_int(raw_value)
        if not is_blank(raw_value) and parsed is None:
            result.errors.append(
                RuleValidationError(
                    input_name, csv_message if csv_messages else form_message, raw_value
                )
            )
            return result
        values[attribute] = parsed

    result.values = values
    return result
