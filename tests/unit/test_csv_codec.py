"""
Unit tests for menu, order and daily summary CSV interchange.
"""

from datetime import date, datetime

from m2pos.csv_codec import (
    dated_filename,
    export_menu_to_csv,
    export_orders_to_csv,
    generate_daily_summary_csv,
    generate_menu_csv_template,
    parse_cooking_styles,
    parse_menu_csv,
    write_csv_file,
)
from m2pos.data import default_menu
from m2pos.models import BillItem, MenuItem, Order


def make_order(order_id, total, method, timestamp, items=()):
    return Order(
        id=order_id,
        items=list(items),
        subtotal=total,
        discount_percent=0,
        discount_amount=0,
        total=total,
        payment_method=method,
        timestamp=timestamp,
    )


class TestParseMenu:
    """Tests for importing menu CSV text."""

    def test_columns_are_matched_by_name(self):
        """Header case and column order do not matter."""
        text = (
            'Price,NAME,ID,isJain,Category,cookingStyle,pcs,description\n'
            '80,Veg Momos,veg-momos,TRUE,momos,Steam|Fried,6,Fresh veg\n'
        )

        items = parse_menu_csv(text)

        assert items == [
            MenuItem(
                id='veg-momos',
                name='Veg Momos',
                price=80,
                category='momos',
                pcs=6,
                cooking_styles=('Steam', 'Fried'),
                description='Fresh veg',
                is_jain=True,
            )
        ]

    def test_blank_fields_take_defaults(self):
        text = 'id,name,price,category,pcs,cookingStyle,description,isJain\n,Plain,40,,,,,\n'

        item = parse_menu_csv(text)[0]

        assert item.id == 'item-1'
        assert item.category == 'momos'
        assert item.pcs is None
        assert item.cooking_styles == (None,)
        assert item.description is None
        assert item.is_jain is False

    def test_rows_without_positive_price_are_dropped(self, caplog):
        text = (
            'id,name,price,category,pcs,cookingStyle,description,isJain\n'
            ',,0,momos,,,,false\n'
            'soup,Soup,abc,maggie,,,,false\n'
            'tea,Tea,15,maggie,,,,false\n'
        )

        items = parse_menu_csv(text)

        assert [item.id for item in items] == ['tea']
        assert 'menu_csv_row_skipped' in caplog.text

    def test_price_reads_leading_digits(self):
        text = 'id,name,price\nbun,Bun,25rs\n'

        assert parse_menu_csv(text)[0].price == 25

    def test_short_input_yields_nothing(self):
        assert parse_menu_csv('') == []
        assert parse_menu_csv('id,name,price\n') == []

    def test_short_rows_are_skipped(self):
        text = 'id,name,price,category\nbun,Bun,25\ntea,Tea,15,maggie\n'

        assert [item.id for item in parse_menu_csv(text)] == ['tea']

    def test_unterminated_quote_swallows_rest_of_line(self):
        text = 'id,name,price,category\nx,"Open name,50,momos\n'

        assert parse_menu_csv(text) == []

    def test_doubled_quotes_are_unescaped(self):
        text = 'id,name,price\nspecial,"Chef\'s ""Special"", Large",150\n'

        assert parse_menu_csv(text)[0].name == 'Chef\'s "Special", Large'

    def test_windows_line_endings(self):
        text = 'id,name,price\r\ntea,Tea,15\r\n'

        assert [(item.id, item.price) for item in parse_menu_csv(text)] == [('tea', 15)]


class TestCookingStyles:
    """Tests for the pipe-separated cooking style column."""

    def test_known_styles_in_order(self):
        assert parse_cooking_styles('Fried|Steam') == ('Fried', 'Steam')

    def test_duplicates_collapse(self):
        assert parse_cooking_styles('Steam|Steam|Fried') == ('Steam', 'Fried')

    def test_empty_and_null_mean_no_choice(self):
        assert parse_cooking_styles('') == (None,)
        assert parse_cooking_styles('NULL') == (None,)

    def test_unknown_styles_become_no_style(self):
        assert parse_cooking_styles('Boiled') == (None,)
        assert parse_cooking_styles('Steam|Boiled|steam') == ('Steam', None)


class TestExportMenu:
    """Tests for writing the catalog and the template."""

    def test_export_rows(self):
        lines = export_menu_to_csv(default_menu()).split('\n')

        assert lines[0] == 'id,name,price,category,pcs,cookingStyle,description,isJain'
        assert lines[1] == 'trio-steam,"The Trio",50,momos,3,Steam,"Classic steamed momos trio",false'
        assert 'jain-momos,"Jain Momos",120,momos,8,Steam|Fried,"No Onion | No Garlic",true' in lines
        assert 'cold-drink,"Cold Drink",29,maggie,,,"Chilled refreshment",false' in lines
        assert len(lines) == 1 + len(default_menu())

    def test_missing_description_is_blank(self):
        item = MenuItem(id='tea', name='Tea', price=15, category='maggie')

        assert export_menu_to_csv([item]).split('\n')[1] == 'tea,"Tea",15,maggie,,,,false'

    def test_round_trip_reproduces_catalog(self):
        menu = default_menu()

        assert parse_menu_csv(export_menu_to_csv(menu)) == menu

    def test_round_trip_with_quotes_and_commas(self):
        item = MenuItem(
            id='special',
            name='Chef\'s "Special", Large',
            price=150,
            category='combo',
            description='Momos, maggie "and" drink',
        )

        assert parse_menu_csv(export_menu_to_csv([item])) == [item]

    def test_template_has_one_example_row(self):
        template = generate_menu_csv_template()

        assert template.startswith('id,name,price,category,pcs,cookingStyle,description,isJain\n')
        items = parse_menu_csv(template)
        assert len(items) == 1
        assert items[0].id == 'example-item'
        assert items[0].cooking_styles == ('Steam', 'Fried')


class TestExportOrders:
    """Tests for the order history and daily summary exports."""

    def test_order_rows(self, menu):
        timestamp = datetime(2026, 10, 17, 14, 5).astimezone()
        items = [
            BillItem(id='a', menu_item=menu['masala-magic'], cooking_style='Fried', quantity=2),
            BillItem(id='b', menu_item=menu['cold-drink'], cooking_style=None, quantity=1),
        ]
        order = make_order('M2-2026-4321', 227, 'upi', timestamp, items)
        order.customer_name = 'Asha'
        order.customer_phone = '9876543210'

        lines = export_orders_to_csv([order]).split('\n')

        assert lines[0] == 'Order ID,Date,Time,Items,Total,Payment Method,Customer Name,Customer Phone'
        assert lines[1] == (
            'M2-2026-4321,17/10/2026,02:05 pm,'
            '"Masala Magic Momos (Fried) x2; Cold Drink x1",227,UPI,Asha,9876543210'
        )

    def test_customer_name_with_comma_is_quoted(self):
        order = make_order('M2-2026-1000', 50, 'cash', datetime(2026, 10, 17, 9, 0).astimezone())
        order.customer_name = 'Rao, K'

        assert export_orders_to_csv([order]).split('\n')[1].endswith(',CASH,"Rao, K",')

    def test_daily_summary_scenario(self):
        """Same-day cash and UPI orders collapse into one summary row."""
        orders = [
            make_order('M2-2026-1001', 100, 'cash', datetime(2026, 10, 17, 12, 0).astimezone()),
            make_order('M2-2026-1002', 50, 'upi', datetime(2026, 10, 17, 18, 30).astimezone()),
        ]

        lines = generate_daily_summary_csv(orders).split('\n')

        assert lines == [
            'Date,Total Orders,Cash Orders,UPI Orders,Cash Amount,UPI Amount,Total Sales',
            '17/10/2026,2,1,1,100,50,150',
        ]

    def test_daily_summary_keeps_first_seen_date_order(self):
        orders = [
            make_order('M2-2026-1003', 70, 'cash', datetime(2026, 10, 18, 12, 0).astimezone()),
            make_order('M2-2026-1002', 50, 'upi', datetime(2026, 10, 16, 12, 0).astimezone()),
            make_order('M2-2026-1001', 30, 'cash', datetime(2026, 10, 18, 9, 0).astimezone()),
        ]

        lines = generate_daily_summary_csv(orders).split('\n')

        assert lines[1:] == ['18/10/2026,2,2,0,100,0,100', '16/10/2026,1,0,1,0,50,50']

    def test_empty_ledger_exports_headers_only(self):
        assert export_orders_to_csv([]).count('\n') == 0
        assert generate_daily_summary_csv([]).startswith('Date,')


class TestCsvFiles:
    """Tests for writing exports to disk."""

    def test_write_csv_file_creates_directory(self, tmp_path):
        path = write_csv_file('a,b\n1,2', 'out.csv', tmp_path / 'exports')

        assert path == tmp_path / 'exports' / 'out.csv'
        assert path.read_text(encoding='utf-8') == 'a,b\n1,2'

    def test_dated_filename(self):
        assert dated_filename('m2-orders', date(2026, 10, 17)) == 'm2-orders-2026-10-17.csv'
