import sys
import os
import io
from decimal import Decimal

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from models import ClientAccount
from writer import format_amount, write_accounts


class TestFormatAmount:
    def test_pads_to_four_places(self):
        assert format_amount(Decimal("1.5")) == "1.5000"
        assert format_amount(Decimal("0")) == "0.0000"

    def test_rounds_extra_places(self):
        assert format_amount(Decimal("1.23456")) == "1.2346"
        assert format_amount(Decimal("0.00005")) == "0.0000"

    def test_negative(self):
        assert format_amount(Decimal("-3")) == "-3.0000"

    def test_no_exponent(self):
        assert format_amount(Decimal("1E+3")) == "1000.0000"


class TestWriteAccounts:
    def test_writes_header_and_rows(self):
        out = io.StringIO()
        write_accounts([
            ClientAccount(client_id=1, available=Decimal("1.5"), held=Decimal("0")),
            ClientAccount(client_id=2, available=Decimal("0"), held=Decimal("0"), locked=True),
        ], out)

        assert out.getvalue() == (
            "client,available,held,total,locked\n"
            "1,1.5000,0.0000,1.5000,false\n"
            "2,0.0000,0.0000,0.0000,true\n"
        )

    def test_no_accounts(self):
        out = io.StringIO()
        write_accounts([], out)
        assert out.getvalue() == "client,available,held,total,locked\n"
