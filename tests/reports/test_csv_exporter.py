from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from src.hr_reports.hr_reports.reports.exporter import (
    ATTENDANCE_EXPORT_HEADER,
    CsvExporter,
    render_cell,
)


def test_every_cell_is_quoted_and_rows_have_no_trailing_newline():
    text = CsvExporter().render(("A", "B"), [("x", 1), ("y", 2.5)])

    assert text == '"A","B"\n"x","1"\n"y","2.5"'


def test_embedded_quotes_are_doubled():
    text = CsvExporter().render(("Reason",), [('Family "event", out of town',)])

    assert text.splitlines()[1] == '"Family ""event"", out of town"'


def test_missing_values_render_as_na():
    text = CsvExporter().render(("A", "B", "C"), [(None, "", 0)])

    assert text.splitlines()[1] == '"N/A","N/A","0"'


def test_row_width_must_match_header():
    with pytest.raises(ValueError):
        CsvExporter().render(("A", "B"), [("only-one",)])


@pytest.mark.parametrize(
    "value, expected",
    [
        (8.0, "8"),
        (7.25, "7.25"),
        (7.456, "7.456"),
        (0.1 + 0.2, "0.30000000000000004"),
        (True, "true"),
        (date(2025, 1, 6), "2025-01-06"),
        (datetime(2025, 1, 6, 14, 30), "2025-01-06"),
    ],
)
def test_render_cell(value, expected):
    assert render_cell(value) == expected


def test_export_names_file_with_epoch_millis():
    now = datetime(2025, 1, 1, tzinfo=timezone.utc)

    export = CsvExporter().export("attendance-report", ATTENDANCE_EXPORT_HEADER, [], now=now)

    assert export.filename == "attendance-report-1735689600000.csv"
    assert export.media_type == "text/csv"
    assert export.content == (
        b'"Date","Employee ID","Employee Name","Email","Clock In","Clock Out","Work Hours","Status"'
    )
    assert export.row_count == 0
