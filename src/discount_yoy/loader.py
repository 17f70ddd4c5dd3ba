"""
Transaction loading from CSV and JSON exports.

Maps sales export columns onto the transaction keys used by the aggregator.
"""

import csv
import json
import math
import os
import re

# Column name (lowercased, separators removed) -> transaction key
FIELD_ALIASES = {
    'paymentdate': 'payment_date',
    'paymentvalue': 'payment_value',
    'discountamount': 'discount_amount',
    'discountpercentage': 'discount_percentage',
    'mrpposttax': 'mrp_post_tax',
    'customeremail': 'customer_email',
}

NUMERIC_FIELDS = ('payment_value', 'discount_amount', 'discount_percentage', 'mrp_post_tax')

SUPPORTED_FORMATS = ('csv', 'json')


def parse_amount(amount_str, decimal_separator='.'):
    """Parse an amount string to float, handling various formats.

    Args:
        amount_str: String like "1,234.56" or "1.234,56" or "(100.00)"
        decimal_separator: Character used as decimal separator ('.' or ',')

    Returns:
        Float value of the amount, or None for an empty cell

    Raises:
        ValueError: If the text is not a number, or is NaN or infinite
    """
    if amount_str is None:
        return None
    if isinstance(amount_str, (int, float)):
        return _finite(float(amount_str), amount_str)

    amount_str = amount_str.strip()
    if not amount_str:
        return None

    # Handle parentheses notation for negative: (100.00) -> -100.00
    negative = False
    if amount_str.startswith('(') and amount_str.endswith(')'):
        negative = True
        amount_str = amount_str[1:-1]

    amount_str = re.sub(r'[$€£¥₹%]', '', amount_str).strip()

    if decimal_separator == ',':
        # European format: 1.234,56 or 1 234,56
        amount_str = amount_str.replace('.', '').replace(' ', '')
        amount_str = amount_str.replace(',', '.')
    else:
        amount_str = amount_str.replace(',', '')

    result = _finite(float(amount_str), amount_str)
    return -result if negative else result


def _finite(value, source):
    # float() accepts "nan" and "inf"; JSON numbers may be NaN or Infinity too
    if not math.isfinite(value):
        raise ValueError(f"Amount is not a finite number: {source!r}")
    return value


def field_key(column):
    """Translate a column header to a transaction key, or None if unused."""
    compact = re.sub(r'[\s_\-]', '', column or '').lower()
    return FIELD_ALIASES.get(compact)


def normalize_record(record, decimal_separator='.'):
    """Convert a raw export row into a transaction dict.

    Args:
        record: Mapping of column name -> cell value
        decimal_separator: Character used as decimal separator ('.' or ',')

    Returns:
        Transaction dict with every known key present (None when blank)

    Raises:
        ValueError: If a numeric cell cannot be parsed
    """
    txn = {key: None for key in FIELD_ALIASES.values()}

    for column, value in record.items():
        key = field_key(column)
        if key is None:
            continue
        if isinstance(value, str):
            value = value.strip() or None
        if key in NUMERIC_FIELDS:
            value = parse_amount(value, decimal_separator)
        txn[key] = value

    return txn


def load_csv(filepath, decimal_separator='.'):
    """Load transactions from a CSV file with a header row.

    Rows with unparseable amounts are skipped.
    """
    transactions = []

    with open(filepath, 'r', encoding='utf-8-sig', newline='') as f:
        reader = csv.DictReader(f)
        for row in reader:
            try:
                transactions.append(normalize_record(row, decimal_separator))
            except ValueError:
                continue

    return transactions


def load_json(filepath):
    """Load transactions from a JSON array, or an object with a 'transactions' array."""
    with open(filepath, 'r', encoding='utf-8') as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get('transactions')
    if not isinstance(data, list):
        raise ValueError(f"Expected a list of transactions in {filepath}")

    transactions = []
    for item in data:
        if not isinstance(item, dict):
            continue
        try:
            transactions.append(normalize_record(item))
        except ValueError:
            continue

    return transactions


def detect_format(filepath):
    ext = os.path.splitext(filepath)[1].lower().lstrip('.')
    if ext not in SUPPORTED_FORMATS:
        raise ValueError(
            f"Cannot determine format of '{filepath}'. "
            f"Use one of: {', '.join(SUPPORTED_FORMATS)}"
        )
    return ext


def load_transactions(filepath, file_format=None, decimal_separator='.'):
    """Load transactions from a CSV or JSON file.

    Args:
        filepath: Path to the export file
        file_format: 'csv' or 'json' (default: from the file extension)
        decimal_separator: Decimal separator for CSV amounts

    Returns:
        List of transaction dicts

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the format is unsupported
    """
    if not os.path.exists(filepath):
        raise FileNotFoundError(f"Data file not found: {filepath}")

    file_format = (file_format or detect_format(filepath)).lower()
    if file_format == 'csv':
        return load_csv(filepath, decimal_separator)
    if file_format == 'json':
        return load_json(filepath)
    raise ValueError(f"Unsupported format: '{file_format}'. Use 'csv' or 'json'.")
