"""Test plain-text table rendering."""

from kubehealth.core.table import SimpleTable


class TestSimpleTable:
    def test_render(self):
        table = SimpleTable(["Name", "Status"])
        table.add_row(["node-1", "Ready"])
        table.add_row(["n2", "NotReady"])

        assert table.render().split("\n") == [
            "+--------+----------+",
            "| NAME   | STATUS   |",
            "+--------+----------+",
            "| node-1 | Ready    |",
            "| n2     | NotReady |",
            "+--------+----------+",
        ]

    def test_width_never_below_header(self):
        table = SimpleTable(["Description"])
        table.add_row(["ok"])
        assert table.column_widths() == [len("Description")]

    def test_no_cell_exceeds_width(self):
        long_text = "x" * 120
        table = SimpleTable(["Title", "Action"])
        table.add_row(["short", long_text])

        widths = table.column_widths()
        assert widths[1] == 120
        for line in table.render().split("\n"):
            assert len(line) == sum(w + 3 for w in widths) + 1

    def test_empty_headers(self):
        table = SimpleTable([])
        table.add_row(["ignored"])
        assert table.render() == ""

    def test_short_and_long_rows(self):
        table = SimpleTable(["A", "B"])
        table.add_row(["1"])
        table.add_row(["1", "2", "3"])

        lines = table.render().split("\n")
        assert lines[3] == "| 1 |"
        assert lines[4] == "| 1 | 2 |"

    def test_cells_are_stringified(self):
        table = SimpleTable(["Restarts"])
        table.add_row([12])
        assert "| 12       |" in str(table)
