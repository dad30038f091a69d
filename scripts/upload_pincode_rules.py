"""
Script to bulk upload a pincode rules CSV for one shop.

Usage:
    python scripts/upload_pincode_rules.py <shop_domain> <path_to_csv_file>

Example:
    python scripts/upload_pincode_rules.py example.myshopify.com pincode-rules.csv
"""

import sys
import os

# Add parent directory to path to import modules
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database.db import SessionLocal, init_models
from modules.pincode_rules.pincode_rule_csv import PincodeCsvError, import_pincode_csv


def upload_pincode_rules(shop: str, csv_file_path: str) -> dict:
    """Run the CSV import in its own transaction and return the summary."""
    if not os.path.exists(csv_file_path):
        raise FileNotFoundError(f"CSV file not found: {csv_file_path}")

    with open(csv_file_path, "r", encoding="utf-8-sig", errors="replace") as f:
        csv_text = f.read()

    init_models()
    db = SessionLocal()
    try:
        result = import_pincode_csv(db, shop.strip().lower(), csv_text)
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

    return {
        "inserted": result.inserted,
        "updated": result.updated,
        "invalid_count": result.invalid_count,
        "invalid": result.invalid,
    }


def main():
    if len(sys.argv) < 3:
        print("Usage: python scripts/upload_pincode_rules.py <shop_domain> <path_to_csv_file>")
        print("\nExample:")
        print("    python scripts/upload_pincode_rules.py example.myshopify.com pincode-rules.csv")
        sys.exit(1)

    shop, csv_file_path = sys.argv[1], sys.argv[2]

    try:
        print(f"Reading CSV file: {csv_file_path}")
        print(f"Shop: {shop}")
        print("-" * 50)

        result = upload_pincode_rules(shop, csv_file_path)

        print("\n" + "=" * 50)
        print("UPLOAD SUMMARY")
        print("=" * 50)
        print(f"Inserted: {result['inserted']}")
        print(f"Updated: {result['updated']}")
        print(f"Invalid: {result['invalid_count']}")

        if result["invalid"]:
            print("\nFirst invalid rows:")
            for row in result["invalid"][:10]:
                suffix = f" (pincode: {row.pincode})" if row.pincode else ""
                print(f"  Row {row.row}: {row.reason}{suffix}")

        print("\n" + "=" * 50)
        print("Upload completed successfully!")

    except (PincodeCsvError, FileNotFoundError) as e:
        print(f"\nERROR: {str(e)}")
        sys.exit(1)


if __name__ == "__main__":
    main()
