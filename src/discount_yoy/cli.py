"""
Discount YoY CLI - Command-line interface.

Usage:
    discount-yoy run /path/to/config/dir            # Report using config directory
    discount-yoy run --format json -o report.json   # JSON report to a file
    discount-yoy analyze data/sales.csv             # Report a single export file
    discount-yoy init ./discount-report             # Create starter config
"""

import argparse
import os
import sys

from ._version import VERSION
from .aggregator import aggregate_year_on_year
from .config_loader import load_config, resolve_source_path
from .loader import load_transactions
from .report import export_json, export_markdown, format_summary


STARTER_SETTINGS = '''# Discount year-on-year report settings

data_sources:
  - name: Sales
    file: data/sales.csv
    # format: csv                 # csv or json (default: from file extension)
    # decimal_separator: "."      # use "," for European amounts

# Extra date formats tried after ISO-8601 (YYYY-MM-DD)
date_formats:
  - "%d/%m/%Y"

currency_format: "${amount}"
'''

OUTPUT_FORMATS = ('summary', 'json', 'markdown')


def find_config_dir():
    """Find the config directory.

    Resolution order:
    1. DISCOUNT_YOY_CONFIG environment variable (if set and exists)
    2. ./config

    Returns None if no config directory is found.
    """
    env_config = os.environ.get('DISCOUNT_YOY_CONFIG')
    if env_config:
        env_path = os.path.abspath(env_config)
        if os.path.isdir(env_path):
            return env_path

    local = os.path.abspath('config')
    if os.path.isdir(local):
        return local

    return None


def init_config(target_dir):
    """Initialize a new config directory with starter files."""
    config_dir = os.path.join(target_dir, 'config')
    data_dir = os.path.join(target_dir, 'data')

    os.makedirs(config_dir, exist_ok=True)
    os.makedirs(data_dir, exist_ok=True)

    files_created = []
    files_skipped = []

    settings_path = os.path.join(config_dir, 'settings.yaml')
    if not os.path.exists(settings_path):
        with open(settings_path, 'w', encoding='utf-8') as f:
            f.write(STARTER_SETTINGS)
        files_created.append('config/settings.yaml')
    else:
        files_skipped.append('config/settings.yaml')

    return files_created, files_skipped


def render_report(result, output_format, currency_format):
    if output_format == 'json':
        return export_json(result) + '\n'
    if output_format == 'markdown':
        return export_markdown(result, currency_format)
    return format_summary(result, currency_format)


def write_report(text, output_path, quiet):
    """Write the report to a file, or stdout when no path is given."""
    if not output_path:
        sys.stdout.write(text)
        return

    parent = os.path.dirname(os.path.abspath(output_path))
    os.makedirs(parent, exist_ok=True)
    with open(output_path, 'w', encoding='utf-8') as f:
        f.write(text)
    if not quiet:
        print(f"\nReport written to {output_path}")


def warn_skipped(result):
    skipped = result['skipped']
    if skipped:
        print(f"Warning: {len(skipped)} transaction(s) skipped with unparseable payment date",
              file=sys.stderr)
        for txn in skipped[:5]:
            print(f"  {txn.get('payment_date')!r} ({txn.get('customer_email') or 'no email'})",
                  file=sys.stderr)


def cmd_init(args):
    """Handle the 'init' subcommand."""
    target_dir = os.path.abspath(args.dir)
    print(f"Initializing report directory: {os.path.relpath(target_dir)}")
    print()

    created, skipped = init_config(target_dir)
    for f in created:
        print(f"  + {f}")
    for f in skipped:
        print(f"  = {f} (exists)")

    print()
    print("Add your sales exports to data/ and run 'discount-yoy run'.")


def cmd_run(args):
    """Handle the 'run' subcommand."""
    if args.config:
        config_dir = os.path.abspath(args.config)
    else:
        config_dir = find_config_dir()

    if not config_dir or not os.path.isdir(config_dir):
        print("Error: Config directory not found.", file=sys.stderr)
        print("Looked for: ./config", file=sys.stderr)
        print("\nRun 'discount-yoy init' to create a new report directory.", file=sys.stderr)
        sys.exit(1)

    try:
        config = load_config(config_dir, args.settings)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    data_sources = config['data_sources']
    if not data_sources:
        print("Error: No data sources configured", file=sys.stderr)
        print(f"\nEdit {config_dir}/{args.settings} to add your data sources.", file=sys.stderr)
        print("\nExample:", file=sys.stderr)
        print("  data_sources:", file=sys.stderr)
        print("    - name: Sales", file=sys.stderr)
        print("      file: data/sales.csv", file=sys.stderr)
        sys.exit(1)

    if not args.quiet:
        print(f"Config: {config_dir}/{args.settings}")

    all_txns = []
    for source in data_sources:
        filepath = resolve_source_path(source, config_dir)
        try:
            txns = load_transactions(filepath, source['format'], source['decimal_separator'])
        except FileNotFoundError:
            print(f"Warning: {source['name']}: File not found - {source['file']}", file=sys.stderr)
            continue
        except ValueError as e:
            print(f"Warning: {source['name']}: Error parsing - {e}", file=sys.stderr)
            continue

        all_txns.extend(txns)
        if not args.quiet:
            print(f"  {source['name']}: {len(txns)} transactions")

    if not args.quiet:
        print(f"\nTotal: {len(all_txns)} transactions\n")

    result = aggregate_year_on_year(all_txns, filters=config['filters'],
                                    date_formats=config['date_formats'])
    warn_skipped(result)

    text = render_report(result, args.format, config['currency_format'])
    write_report(text, args.output, args.quiet)


def cmd_analyze(args):
    """Handle the 'analyze' subcommand."""
    try:
        txns = load_transactions(args.file, args.file_format, args.decimal_separator)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.quiet:
        print(f"{args.file}: {len(txns)} transactions\n")

    result = aggregate_year_on_year(txns, date_formats=args.date_format)
    warn_skipped(result)

    text = render_report(result, args.format, args.currency_format)
    write_report(text, args.output, args.quiet)


def add_output_arguments(parser):
    parser.add_argument(
        '--format', '-f',
        choices=OUTPUT_FORMATS,
        default='summary',
        help='Output format: summary (text table, default), json, markdown'
    )
    parser.add_argument(
        '--output', '-o',
        help='Write the report to this file instead of stdout'
    )
    parser.add_argument(
        '--quiet', '-q',
        action='store_true',
        help='Only print the report'
    )


def main():
    """Main entry point for the discount-yoy CLI."""
    parser = argparse.ArgumentParser(
        prog='discount-yoy',
        description='Month-by-month, year-over-year report of discounted sales.',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    subparsers = parser.add_subparsers(dest='command', title='commands', metavar='<command>')

    init_parser = subparsers.add_parser(
        'init',
        help='Set up a new report folder with a starter settings.yaml'
    )
    init_parser.add_argument(
        'dir',
        nargs='?',
        default='.',
        help='Directory to initialize (default: current directory)'
    )

    run_parser = subparsers.add_parser(
        'run',
        help='Load configured data sources and print the year-on-year report'
    )
    run_parser.add_argument(
        'config',
        nargs='?',
        help='Path to config directory (default: ./config)'
    )
    run_parser.add_argument(
        '--settings', '-s',
        default='settings.yaml',
        help='Settings file name (default: settings.yaml)'
    )
    add_output_arguments(run_parser)

    analyze_parser = subparsers.add_parser(
        'analyze',
        help='Report on a single CSV or JSON export without a config directory'
    )
    analyze_parser.add_argument(
        'file',
        help='Path to the sales export'
    )
    analyze_parser.add_argument(
        '--file-format',
        choices=['csv', 'json'],
        help='Input format (default: from file extension)'
    )
    analyze_parser.add_argument(
        '--date-format',
        action='append',
        help='Extra strptime format for payment dates (repeatable)'
    )
    analyze_parser.add_argument(
        '--decimal-separator',
        choices=['.', ','],
        default='.',
        help='Decimal separator used in CSV amounts (default: .)'
    )
    analyze_parser.add_argument(
        '--currency-format',
        default='${amount}',
        help='Currency format with {amount} placeholder (default: ${amount})'
    )
    add_output_arguments(analyze_parser)

    subparsers.add_parser(
        'version',
        help='Show version information'
    )

    args = parser.parse_args()

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == 'init':
        cmd_init(args)
    elif args.command == 'run':
        cmd_run(args)
    elif args.command == 'analyze':
        cmd_analyze(args)
    elif args.command == 'version':
        print(f"discount-yoy {VERSION}")


if __name__ == '__main__':
    main()
