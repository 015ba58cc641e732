import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

from main import main


def write_csv(tmp_path, rows):
    csv_file = tmp_path / "input.csv"
    csv_file.write_text('\n'.join(["type, client, tx, amount"] + rows))
    return str(csv_file)


class TestMain:
    def test_prints_accounts(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, [
            "deposit, 2, 2, 20.0",
            "deposit, 1, 1, 10.0",
            "withdrawal, 1, 3, 5.0",
        ])

        assert main([csv_file]) == 0

        out = capsys.readouterr().out
        assert out == (
            "client,available,held,total,locked\n"
            "1,5.0000,0.0000,5.0000,false\n"
            "2,20.0000,0.0000,20.0000,false\n"
        )

    def test_strict_disputes_flag(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, [
            "deposit, 1, 1, 10.0",
            "dispute, 1, 1,",
            "resolve, 1, 1,",
            "resolve, 1, 1,",
        ])

        assert main([csv_file, "--strict-disputes"]) == 0

        assert "1,10.0000,0.0000,10.0000,false" in capsys.readouterr().out

    def test_reject_locked_flag(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, [
            "deposit, 1, 1, 10.0",
            "dispute, 1, 1,",
            "chargeback, 1, 1,",
            "deposit, 1, 2, 3.0",
        ])

        assert main([csv_file, "--reject-locked"]) == 0

        assert "1,0.0000,0.0000,0.0000,true" in capsys.readouterr().out

    def test_parse_error_exit_code(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, ["deposit, 1, 1, ten"])

        assert main([csv_file]) == 1

        assert capsys.readouterr().out == ""

    def test_missing_file(self, tmp_path, capsys):
        assert main([str(tmp_path / "nope.csv")]) == 1
        assert capsys.readouterr().out == ""

    def test_invalid_utf8_exit_code(self, tmp_path, capsys):
        csv_file = tmp_path / "bad.csv"
        csv_file.write_bytes(b"type, client, tx, amount\ndeposit, 1, 1, \xff\n")

        assert main([str(csv_file)]) == 1
        assert capsys.readouterr().out == ""

    def test_oversized_field_exit_code(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, ["deposit, 1, 1, " + "1" * 200000])

        assert main([csv_file]) == 1
        assert capsys.readouterr().out == ""

    def test_amount_over_limit_exit_code(self, tmp_path, capsys):
        csv_file = write_csv(tmp_path, ["deposit, 1, 1, 999999999999999999999999.9999"])

        assert main([csv_file]) == 1
        assert capsys.readouterr().out == ""
