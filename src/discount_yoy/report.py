"""
Report output for the discount year-on-year comparison.

Renders the rows and totals produced by aggregate_year_on_year() as a text
summary, JSON or Markdown.
"""

import json

from .aggregator import BASELINE_YEAR, CURRENT_YEAR


# ============================================================================
# FORMATTING
# ============================================================================

def format_currency(amount: float, currency_format: str = "${amount}") -> str:
    """Format amount with currency symbol/format (no decimals).

    Args:
        amount: The amount to format
        currency_format: Format string with {amount} placeholder, e.g. "${amount}" or "₹{amount}"

    Returns:
        Formatted currency string, e.g. "$1,234"
    """
    formatted_num = f"{amount:,.0f}"
    return currency_format.format(amount=formatted_num)


def format_change(change: float) -> str:
    """Format a percentage change with sign, e.g. "+12.5%" or "-3.0%"."""
    return f"{change:+.1f}%"


def _round_values(record):
    return {
        key: round(value, 2) if isinstance(value, float) else value
        for key, value in record.items()
    }


# ============================================================================
# EXPORTS
# ============================================================================

def export_json(result):
    """Export rows and totals as JSON.

    Returns: JSON string
    """
    output = {
        'years': {'baseline': BASELINE_YEAR, 'current': CURRENT_YEAR},
        'rows': [_round_values(row) for row in result['rows']],
        'totals': _round_values(result['totals']),
        'skipped': len(result.get('skipped', [])),
    }
    return json.dumps(output, indent=2)


def _table_cells(label, record, fmt):
    return [
        label,
        f"{record['transactions_2024']:,}",
        f"{record['transactions_2025']:,}",
        format_change(record['transaction_change']),
        fmt(record['discount_2024']),
        fmt(record['discount_2025']),
        format_change(record['discount_change']),
        fmt(record['revenue_2024']),
        fmt(record['revenue_2025']),
        format_change(record['revenue_change']),
        fmt(record['atv_2024']),
        fmt(record['atv_2025']),
        format_change(record['atv_change']),
        f"{record['customers_2024']:,}",
        f"{record['customers_2025']:,}",
    ]


def _table_header():
    return [
        'Month',
        f'{BASELINE_YEAR} Txns', f'{CURRENT_YEAR} Txns', 'Txn Change',
        f'{BASELINE_YEAR} Discount', f'{CURRENT_YEAR} Discount', 'Discount Change',
        f'{BASELINE_YEAR} Revenue', f'{CURRENT_YEAR} Revenue', 'Revenue Change',
        f'{BASELINE_YEAR} ATV', f'{CURRENT_YEAR} ATV', 'ATV Change',
        f'{BASELINE_YEAR} Customers', f'{CURRENT_YEAR} Customers',
    ]


def export_markdown(result, currency_format="${amount}"):
    """Export rows and totals as a Markdown table."""
    def fmt(amount):
        return format_currency(amount, currency_format)

    header = _table_header()
    lines = [
        f"# Discount Year-on-Year ({BASELINE_YEAR} vs {CURRENT_YEAR})",
        '',
        '| ' + ' | '.join(header) + ' |',
        '|' + '|'.join(['---'] + ['---:'] * (len(header) - 1)) + '|',
    ]
    for row in result['rows']:
        lines.append('| ' + ' | '.join(_table_cells(row['month'], row, fmt)) + ' |')

    total_cells = _table_cells('**Total**', result['totals'], fmt)
    lines.append('| ' + ' | '.join(total_cells) + ' |')

    return '\n'.join(lines) + '\n'


def format_summary(result, currency_format="${amount}"):
    """Build the plain-text summary table."""
    def fmt(amount):
        return format_currency(amount, currency_format)

    header = _table_header()
    body = [_table_cells(row['month'], row, fmt) for row in result['rows']]
    footer = _table_cells('TOTAL', result['totals'], fmt)

    widths = [
        max(len(line[i]) for line in [header, footer] + body)
        for i in range(len(header))
    ]

    def render(cells):
        first = cells[0].ljust(widths[0])
        rest = [cell.rjust(width) for cell, width in zip(cells[1:], widths[1:])]
        return '  '.join([first] + rest)

    rule = '-' * len(render(header))
    lines = [
        '=' * len(rule),
        f"DISCOUNT YEAR-ON-YEAR ({BASELINE_YEAR} vs {CURRENT_YEAR})",
        '=' * len(rule),
        render(header),
        rule,
    ]
    lines.extend(render(cells) for cells in body)
    lines.append(rule)
    lines.append(render(footer))

    return '\n'.join(lines) + '\n'
