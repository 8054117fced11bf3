"""Tests for sn_report/ingest.py (file-level detection and normalization)."""

import random
from datetime import datetime

import pytest

from sn_report.errors import EmptyInputError, NoValidRowsError
from sn_report.ingest import ingest
from sn_report.schemas import RecordKind, SNStatus
from sn_report.templates import render_template


def _comparable(records):
    return [r.model_dump(exclude={"id", "created_at", "expired_date"}) for r in records]


class TestNamedHeaders:
    """Files whose header uses recognised column names."""

    def test_inventory_scenario(self, now):
        result = ingest("sn;flag;product\n123456789;HVC;Widget\n", RecordKind.INVENTORY, now)
        assert result.delimiter == ";"
        assert len(result.records) == 1
        item = result.records[0]
        assert item.sn_number == "123456789"
        assert item.flag == "HVC"
        assert item.product_name == "Widget"
        assert item.sub_category == "General"
        assert item.warehouse == "Gudang Utama"
        assert item.salesforce_name == "-"
        assert item.status == SNStatus.READY
        assert result.mapping.positional is False

    def test_one_record_per_row_in_file_order(self, now):
        rows = [f"{100000000 + i};F{i};P{i}" for i in range(25)]
        text = "sn;flag;product\n" + "\n".join(rows) + "\n"
        result = ingest(text, RecordKind.INVENTORY, now)
        assert [r.sn_number for r in result.records] == [str(100000000 + i) for i in range(25)]

    def test_comma_file_detected(self, now):
        text = "SN_NUMBER,ID_DIGIPOS,NAMA_OUTLET,HARGA,TRX_ID\n123456789012,DG-10001,Outlet Berkah Jaya,25000,TRX-ABC1234\n"
        result = ingest(text, RecordKind.SELLTHRU, now)
        assert result.delimiter == ","
        update = result.records[0]
        assert update.price == 25000
        assert update.nama_outlet == "Outlet Berkah Jaya"

    def test_quoted_cells(self, now):
        text = 'sn,product\n"123456789","Voucher, 10GB"\n'
        result = ingest(text, RecordKind.INVENTORY, now)
        assert result.records[0].product_name == "Voucher, 10GB"

    def test_shuffled_columns_give_same_values(self, now):
        headers = ["NO_SN", "FLAG", "NAMA_PRODUK", "KATEGORI", "GUDANG", "SALESFORCE", "TAP", "NO_RS"]
        values = ["123456789012", "HVC", "Kartu 10GB", "Voucher", "Gudang Jakarta", "CVS 05", "Pasar Baru", "RS-1"]
        canonical = ";".join(headers) + "\n" + ";".join(values) + "\n"

        order = list(range(len(headers)))
        random.Random(7).shuffle(order)
        shuffled = ";".join(headers[i] for i in order) + "\n" + ";".join(values[i] for i in order) + "\n"

        a = ingest(canonical, RecordKind.INVENTORY, now)
        b = ingest(shuffled, RecordKind.INVENTORY, now)
        assert _comparable(a.records) == _comparable(b.records)

    @pytest.mark.parametrize("kind", list(RecordKind))
    def test_every_template_ingests(self, kind, now):
        result = ingest(render_template(kind), kind, now)
        assert len(result.records) == 1
        assert result.mapping.positional is False


class TestPositionalFallback:
    def test_unrecognised_headers_use_positional_layout(self, now):
        result = ingest("a;b;c\n123456789;X;Y\n", RecordKind.INVENTORY, now)
        item = result.records[0]
        assert item.sn_number == "123456789"
        assert item.flag == "X"
        assert item.product_name == "Y"
        assert result.mapping.positional is True
        assert any("positional" in w for w in result.warnings)

    def test_header_row_excluded_in_positional_mode(self, now):
        result = ingest("1234567890;X\n123456789;Y\n", RecordKind.INVENTORY, now)
        assert [r.sn_number for r in result.records] == ["123456789"]

    def test_topup_without_header_names(self, now):
        text = "c1;c2;c3;c4;c5\n2025-11-26;628;821;Debit;210.000\n"
        result = ingest(text, RecordKind.TOPUP, now)
        assert result.records[0].amount == 210000
        assert result.records[0].transaction_type == "Debit"


class TestDelimiterSelection:
    def test_first_success_wins_over_more_rows(self, now):
        """Comma yields 1 row, tab would yield 10: comma still wins."""
        lines = ["x\ttanggal,no_tr_sn"]
        lines += [f"2025-11-26\tSN00000000{i:02d}" for i in range(10)]
        lines += ["2025-11-26,SN9999999999"]
        result = ingest("\n".join(lines), RecordKind.DISTRIBUTION, now)

        assert result.delimiter == ","
        assert [r.sn_number for r in result.records] == ["SN9999999999"]
        assert not any("TAB" in w for w in result.warnings)

    def test_one_warning_per_attempt_in_order(self, now):
        result = ingest("sn\tflag\n123456789\tHVC\n", RecordKind.INVENTORY, now)
        assert result.delimiter == "\t"
        assert result.warnings[0].startswith("Delimiter ';'")
        assert result.warnings[1].startswith("Delimiter ','")
        assert result.warnings[2].startswith("Delimiter TAB")
        assert len(result.warnings) == 3

    def test_pipe_delimiter(self, now):
        result = ingest("sn|flag\n123456789|HVC\n", RecordKind.INVENTORY, now)
        assert result.delimiter == "|"
        assert result.records[0].flag == "HVC"


class TestTextHandling:
    def test_bom_skipped(self, now):
        result = ingest("\ufeffsn;flag\n123456789;HVC\n", RecordKind.INVENTORY, now)
        assert result.mapping.positional is False
        assert result.records[0].flag == "HVC"

    def test_mixed_line_endings_and_blank_lines(self, now):
        text = "sn;flag\r\n123456789;A\r\n\r\n   \n223456789;B\r323456789;C"
        result = ingest(text, RecordKind.INVENTORY, now)
        assert [r.flag for r in result.records] == ["A", "B", "C"]

    def test_empty_text(self, now):
        with pytest.raises(EmptyInputError):
            ingest("", RecordKind.INVENTORY, now)

    def test_only_blank_lines(self, now):
        with pytest.raises(EmptyInputError):
            ingest("\ufeff\n  \r\n", RecordKind.INVENTORY, now)

    def test_header_only_has_no_valid_rows(self, now):
        with pytest.raises(NoValidRowsError):
            ingest("sn;flag\n", RecordKind.INVENTORY, now)

    def test_accepts_kind_value(self, now):
        assert ingest("sn;flag\n123456789;A\n", "new", now).kind == RecordKind.INVENTORY


class TestDistributionBlindFallback:
    def test_blind_pass_semicolon_then_comma(self, now):
        with pytest.raises(NoValidRowsError) as exc_info:
            ingest("header\nabc\n", RecordKind.DISTRIBUTION, now)

        warnings = exc_info.value.warnings
        blind = [w for w in warnings if w.startswith("Fallback: blind")]
        assert blind == [
            "Fallback: blind positional parse with delimiter ';'.",
            "Fallback: blind positional parse with delimiter ','.",
        ]
        # Blind attempts come after the four regular delimiters.
        assert warnings.index(blind[0]) > max(i for i, w in enumerate(warnings) if w.startswith("Delimiter '|'"))
        assert "Fallback: blind" in str(exc_info.value)

    def test_blind_pass_recovers_misnamed_header(self, now):
        """Header names the serial column, but the data sits in the template positions."""
        text = "tanggal;x;sn\n2025-11-26;123456789012\n"
        result = ingest(text, RecordKind.DISTRIBUTION, now)
        assert result.mapping.positional is True
        assert result.records[0].sn_number == "123456789012"
        assert result.records[0].created_at == "2025-11-26"
        assert result.warnings[-2] == "Fallback: blind positional parse with delimiter ';'."

    def test_other_kinds_have_no_blind_pass(self, now):
        with pytest.raises(NoValidRowsError) as exc_info:
            ingest("header\nabc\n", RecordKind.INVENTORY, now)
        assert not any("blind" in w for w in exc_info.value.warnings)


class TestIdempotence:
    def test_same_file_twice_gives_equal_records(self):
        text = render_template(RecordKind.TOPUP) + "2025-11-27;1;2;Credit;5.000;IDR;x;Budi;Pemuda;1;Toko\n"
        first = ingest(text, RecordKind.TOPUP, datetime(2025, 1, 1))
        second = ingest(text, RecordKind.TOPUP, datetime(2025, 1, 2))
        assert _comparable(first.records) == _comparable(second.records)
        assert first.delimiter == second.delimiter
        assert first.mapping == second.mapping
