"""
Discount Year-on-Year - Core aggregation logic.

Groups discounted sales transactions by calendar month and year, then builds
twelve month-by-month comparison rows and a totals row for the two
comparison years.
"""

import math
from datetime import date, datetime
from decimal import Decimal

BASELINE_YEAR = 2024
CURRENT_YEAR = 2025

MONTH_NAMES = (
    'January', 'February', 'March', 'April', 'May', 'June',
    'July', 'August', 'September', 'October', 'November', 'December',
)

ROW_FIELDS = ('transactions', 'discount', 'revenue', 'customers')


# ============================================================================
# DATE PARSING
# ============================================================================

def parse_payment_date(value, date_formats=None):
    """Parse a payment date into a calendar date.

    Args:
        value: A date, datetime or date string
        date_formats: Optional list of strptime formats tried after ISO-8601

    Returns:
        datetime.date

    Raises:
        ValueError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str) or not value.strip():
        raise ValueError(f"Not a date: {value!r}")

    text = value.strip()
    iso_text = text[:-1] + '+00:00' if text.endswith('Z') else text
    try:
        return datetime.fromisoformat(iso_text).date()
    except ValueError:
        pass

    for fmt in date_formats or []:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    raise ValueError(f"Unrecognized date: {value!r}")


# ============================================================================
# FILTER AND GROUP
# ============================================================================

def amount(txn, key):
    """Numeric field of a transaction, 0 when missing, NaN or infinite."""
    value = txn.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
        return 0
    return value if math.isfinite(value) else 0


def filter_discounted(transactions):
    """Keep only transactions with a discount amount greater than zero."""
    return [txn for txn in transactions if amount(txn, 'discount_amount') > 0]


def new_bucket():
    return {
        'transactions': 0,
        'total_discount': 0,
        'total_revenue': 0,
        'total_potential_revenue': 0,
        'unique_customers': set(),
        'discount_percentages': [],
    }


def group_by_month_year(transactions, date_formats=None):
    """Accumulate transactions into per-month, per-year buckets.

    Args:
        transactions: Discounted transaction dicts
        date_formats: Extra strptime formats for payment dates

    Returns:
        Tuple of (months, skipped) where months is a 12-item list indexed by
        month number - 1, each a dict of year -> bucket, and skipped is the
        list of transactions whose payment date could not be parsed.
    """
    months = [{} for _ in MONTH_NAMES]
    skipped = []

    for txn in transactions:
        try:
            paid_on = parse_payment_date(txn.get('payment_date'), date_formats)
        except ValueError:
            skipped.append(txn)
            continue

        bucket = months[paid_on.month - 1].setdefault(paid_on.year, new_bucket())
        payment_value = amount(txn, 'payment_value')

        bucket['transactions'] += 1
        bucket['total_discount'] += amount(txn, 'discount_amount')
        bucket['total_revenue'] += payment_value
        bucket['total_potential_revenue'] += amount(txn, 'mrp_post_tax') or payment_value
        bucket['unique_customers'].add(txn.get('customer_email'))
        bucket['discount_percentages'].append(amount(txn, 'discount_percentage'))

    return months, skipped


# ============================================================================
# ROWS AND TOTALS
# ============================================================================

def percent_change(current, baseline):
    """Percentage change from baseline to current, 0 when baseline is not positive."""
    if baseline > 0:
        return ((current - baseline) / baseline) * 100
    return 0


def average(total, count):
    return total / count if count > 0 else 0


def build_month_row(month, years):
    """Build one comparison row from a month's year -> bucket mapping."""
    old = years.get(BASELINE_YEAR) or new_bucket()
    new = years.get(CURRENT_YEAR) or new_bucket()

    atv_old = average(old['total_revenue'], old['transactions'])
    atv_new = average(new['total_revenue'], new['transactions'])

    return {
        'month': month,
        'transactions_2024': old['transactions'],
        'transactions_2025': new['transactions'],
        'discount_2024': old['total_discount'],
        'discount_2025': new['total_discount'],
        'revenue_2024': old['total_revenue'],
        'revenue_2025': new['total_revenue'],
        'atv_2024': atv_old,
        'atv_2025': atv_new,
        'customers_2024': len(old['unique_customers']),
        'customers_2025': len(new['unique_customers']),
        'transaction_change': percent_change(new['transactions'], old['transactions']),
        'discount_change': percent_change(new['total_discount'], old['total_discount']),
        # Row-level revenue change is measured on ATV, not raw revenue
        'revenue_change': percent_change(atv_new, atv_old),
        'atv_change': percent_change(atv_new, atv_old),
    }


def build_month_rows(months):
    """Build the twelve month rows, January through December."""
    return [build_month_row(name, months[idx]) for idx, name in enumerate(MONTH_NAMES)]


def compute_totals(rows):
    """Sum the month rows and recompute the change fields from the sums.

    Customer counts are summed per month, so a customer active in two months
    counts twice.
    """
    totals = {}
    for field in ROW_FIELDS:
        for year in (BASELINE_YEAR, CURRENT_YEAR):
            key = f'{field}_{year}'
            totals[key] = sum(row[key] for row in rows)

    txn_old, txn_new = totals['transactions_2024'], totals['transactions_2025']
    rev_old, rev_new = totals['revenue_2024'], totals['revenue_2025']

    totals['atv_2024'] = average(rev_old, txn_old)
    totals['atv_2025'] = average(rev_new, txn_new)

    totals['transaction_change'] = percent_change(txn_new, txn_old)
    totals['discount_change'] = percent_change(totals['discount_2025'], totals['discount_2024'])
    totals['revenue_change'] = percent_change(rev_new, rev_old)

    if txn_old > 0 and rev_old > 0 and txn_new > 0 and rev_new > 0:
        totals['atv_change'] = percent_change(rev_new / txn_new, rev_old / txn_old)
    else:
        totals['atv_change'] = 0

    return totals


def aggregate_year_on_year(transactions, filters=None, date_formats=None):
    """Compute the discount year-on-year comparison.

    Args:
        transactions: Sequence of transaction dicts
        filters: Reserved for future use; ignored
        date_formats: Extra strptime formats for payment dates

    Returns:
        dict with 'rows' (12 month rows), 'totals' (one totals row) and
        'skipped' (transactions dropped for an unparseable payment date)
    """
    discounted = filter_discounted(transactions)
    months, skipped = group_by_month_year(discounted, date_formats)
    rows = build_month_rows(months)

    return {
        'rows': rows,
        'totals': compute_totals(rows),
        'skipped': skipped,
    }
