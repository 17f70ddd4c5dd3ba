"""Tests for loader module - export parsing and amount handling."""

import json
import math
import os
import tempfile

import pytest

from discount_yoy.aggregator import aggregate_year_on_year
from discount_yoy.loader import (
    field_key,
    load_csv,
    load_json,
    load_transactions,
    normalize_record,
    parse_amount,
)


class TestParseAmount:
    """Tests for parse_amount function with different locales."""

    def test_us_format(self):
        assert parse_amount('123.45') == 123.45
        assert parse_amount('1,234.56') == 1234.56
        assert parse_amount('$1,234.56') == 1234.56
        assert parse_amount('₹2,500') == 2500.0

    def test_european_format(self):
        assert parse_amount('1.234,56', decimal_separator=',') == 1234.56
        assert parse_amount('1 234,56', decimal_separator=',') == 1234.56

    def test_parenthetical_negative(self):
        assert parse_amount('(100.00)') == -100.0

    def test_percent_sign_stripped(self):
        assert parse_amount('15%') == 15.0

    def test_blank_and_none(self):
        assert parse_amount('') is None
        assert parse_amount('   ') is None
        assert parse_amount(None) is None

    def test_numbers_pass_through(self):
        assert parse_amount(12) == 12.0
        assert parse_amount(3.5) == 3.5

    def test_garbage_raises(self):
        with pytest.raises(ValueError):
            parse_amount('abc')

    def test_nan_and_infinity_raise(self):
        for text in ['nan', 'NaN', 'inf', '-inf', 'Infinity', '($inf)']:
            with pytest.raises(ValueError):
                parse_amount(text)
        for value in [float('nan'), float('inf'), float('-inf')]:
            with pytest.raises(ValueError):
                parse_amount(value)


class TestNormalizeRecord:
    """Tests for mapping export columns to transaction keys."""

    def test_header_variants(self):
        assert field_key('paymentDate') == 'payment_date'
        assert field_key('payment_date') == 'payment_date'
        assert field_key('Payment Date') == 'payment_date'
        assert field_key('MRP-Post-Tax') == 'mrp_post_tax'
        assert field_key('productName') is None

    def test_camel_case_record(self):
        txn = normalize_record({
            'paymentDate': '2024-03-15',
            'paymentValue': '900',
            'discountAmount': '100',
            'discountPercentage': '10',
            'mrpPostTax': '1,000',
            'customerEmail': ' a@x.com ',
            'productName': 'Ignored',
        })
        assert txn == {
            'payment_date': '2024-03-15',
            'payment_value': 900.0,
            'discount_amount': 100.0,
            'discount_percentage': 10.0,
            'mrp_post_tax': 1000.0,
            'customer_email': 'a@x.com',
        }

    def test_blank_cells_become_none(self):
        txn = normalize_record({'payment_date': '2024-03-15', 'discount_amount': ''})
        assert txn['discount_amount'] is None
        assert txn['mrp_post_tax'] is None


class TestLoadFiles:
    """Tests for loading CSV and JSON files."""

    def test_load_csv_skips_bad_amounts(self):
        csv_content = """paymentDate,paymentValue,discountAmount,customerEmail
2024-03-15,900,100,a@x.com
2024-03-16,oops,10,b@x.com
2025-03-15,"1,200.50",50,c@x.com
"""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'sales.csv')
            with open(path, 'w', encoding='utf-8') as f:
                f.write(csv_content)

            txns = load_csv(path)

        assert len(txns) == 2
        assert txns[0]['discount_amount'] == 100.0
        assert txns[1]['payment_value'] == 1200.5

    def test_load_csv_european(self):
        csv_content = """payment_date,payment_value,discount_amount
2024-03-15,"1.234,56","10,5"
"""
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'sales.csv')
            with open(path, 'w', encoding='utf-8') as f:
                f.write(csv_content)

            txns = load_csv(path, decimal_separator=',')

        assert txns[0]['payment_value'] == 1234.56
        assert txns[0]['discount_amount'] == 10.5

    def test_load_json_list_and_wrapped(self):
        records = [
            {'paymentDate': '2024-03-15', 'paymentValue': 900, 'discountAmount': 100},
            'not a record',
        ]
        with tempfile.TemporaryDirectory() as tmpdir:
            list_path = os.path.join(tmpdir, 'list.json')
            wrapped_path = os.path.join(tmpdir, 'wrapped.json')
            with open(list_path, 'w', encoding='utf-8') as f:
                json.dump(records, f)
            with open(wrapped_path, 'w', encoding='utf-8') as f:
                json.dump({'transactions': records}, f)

            assert len(load_json(list_path)) == 1
            txns = load_json(wrapped_path)

        assert txns[0]['payment_value'] == 900.0

    def test_load_json_wrong_shape(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'bad.json')
            with open(path, 'w', encoding='utf-8') as f:
                json.dump({'rows': []}, f)

            with pytest.raises(ValueError):
                load_json(path)

    def test_load_transactions_dispatch(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = os.path.join(tmpdir, 'export.data')
            with open(path, 'w', encoding='utf-8') as f:
                json.dump([{'paymentDate': '2025-01-01', 'discountAmount': 1}], f)

            with pytest.raises(ValueError):
                load_transactions(path)
            assert len(load_transactions(path, file_format='json')) == 1

    def test_missing_file(self):
        with pytest.raises(FileNotFoundError):
            load_transactions('/nonexistent/sales.csv')

    def test_non_finite_cells_skip_rows(self):
        csv_content = """paymentDate,paymentValue,discountAmount,customerEmail
2024-03-15,nan,10,a@x.com
2025-03-15,inf,10,b@x.com
2025-03-16,500,-inf,c@x.com
2025-03-17,400,10,d@x.com
"""
        json_content = '[{"paymentDate": "2024-03-15", "paymentValue": NaN, "discountAmount": 10},' \
                       ' {"paymentDate": "2024-03-16", "paymentValue": 90, "discountAmount": Infinity},' \
                       ' {"paymentDate": "2024-03-17", "paymentValue": 80, "discountAmount": 5}]'
        with tempfile.TemporaryDirectory() as tmpdir:
            csv_path = os.path.join(tmpdir, 'sales.csv')
            json_path = os.path.join(tmpdir, 'sales.json')
            with open(csv_path, 'w', encoding='utf-8') as f:
                f.write(csv_content)
            with open(json_path, 'w', encoding='utf-8') as f:
                f.write(json_content)

            csv_txns = load_transactions(csv_path)
            json_txns = load_transactions(json_path)

        assert [t['customer_email'] for t in csv_txns] == ['d@x.com']
        assert [t['payment_value'] for t in json_txns] == [80.0]

        result = aggregate_year_on_year(csv_txns + json_txns)
        for record in result['rows'] + [result['totals']]:
            for key, value in record.items():
                if key != 'month':
                    assert math.isfinite(value), key
