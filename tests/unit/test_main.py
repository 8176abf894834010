"""Unit tests for the caridentmedix command line entry point."""

import argparse
import json
import logging
from unittest.mock import patch

import pytest

from caridentmedix.main import main, positive_int, setup_arg_parser
from caridentmedix.sql_interface.clinic_repository import InMemoryClinicRepository


@pytest.fixture(autouse=True)
def restore_root_logging():
    """main() reconfigures the root logger; put the original handlers back."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def run_json(capsys, argv):
    main(argv + ["--format", "json"])
    return json.loads(capsys.readouterr().out)


class TestArgParser:
    """Test the command line definition."""

    def test_positive_int(self):
        assert positive_int("7") == 7

    @pytest.mark.parametrize("value", ["0", "-3", "abc"])
    def test_positive_int_rejects(self, value):
        with pytest.raises(argparse.ArgumentTypeError):
            positive_int(value)

    def test_search_options(self):
        args = setup_arg_parser().parse_args(
            ["search-clinics", "-g", "Bright", "-n", "Anna", "-e", "a@b.de", "-p", "+49", "-a", "Berlin",
             "-d", "implants", "-w", "https://", "--with-scores"],
        )
        assert args.action == "search-clinics"
        assert (args.general_search, args.name, args.email, args.phone_number) == ("Bright", "Anna", "a@b.de", "+49")
        assert (args.address, args.description, args.website) == ("Berlin", "implants", "https://")
        assert args.with_scores is True

    def test_nearby_default_radius(self):
        args = setup_arg_parser().parse_args(["nearby-clinics", "--latitude", "52.52", "--longitude", "13.405"])
        assert args.radius_km == 50.0

    def test_action_required(self):
        with pytest.raises(SystemExit) as exc_info:
            main([])
        assert exc_info.value.code == 2

    def test_invalid_clinic_id(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["get-clinic", "--clinic-id", "0"])
        assert exc_info.value.code == 2


class TestJsonInput:
    """Run every action against a JSON export."""

    def test_search_clinics(self, capsys, sample_clinics_json):
        output = run_json(capsys, ["search-clinics", "-ij", str(sample_clinics_json), "-g", "Bright Smile Clinic"])

        assert [c["id"] for c in output["data"]] == [1]
        assert output["metadata"]["action"] == "search-clinics"
        assert output["metadata"]["parameters"]["general_search"] == "Bright Smile Clinic"
        assert output["metadata"]["status"] == "success"

    def test_search_without_terms_returns_all(self, capsys, sample_clinics_json):
        output = run_json(capsys, ["search-clinics", "-ij", str(sample_clinics_json)])
        assert [c["id"] for c in output["data"]] == [1, 2]

    def test_search_with_scores(self, capsys, sample_clinics_json):
        output = run_json(
            capsys, ["search-clinics", "-ij", str(sample_clinics_json), "-g", "Downtown Dental", "--with-scores"],
        )
        assert output["data"][0]["rank"] == 1
        assert output["data"][0]["name"] == "Downtown Dental"
        assert isinstance(output["data"][0]["score"], int)

    def test_search_by_dentist_name(self, capsys, sample_clinics_json):
        output = run_json(capsys, ["search-clinics", "-ij", str(sample_clinics_json), "--name", "Anna Weber"])
        assert [c["id"] for c in output["data"]] == [1]

    def test_nearby_clinics(self, capsys, sample_clinics_json):
        output = run_json(
            capsys,
            ["nearby-clinics", "-ij", str(sample_clinics_json), "--latitude", "52.5219", "--longitude", "13.4132",
             "--radius-km", "5"],
        )
        assert [c["id"] for c in output["data"]] == [2, 1]
        assert output["data"][0]["distance_km"] == pytest.approx(0.0)

    def test_nearby_negative_radius(self, sample_clinics_json):
        with pytest.raises(SystemExit) as exc_info:
            main(["nearby-clinics", "-ij", str(sample_clinics_json), "-lat", "52.5", "-lon", "13.4", "-r", "-1"])
        assert exc_info.value.code == 2

    def test_get_clinic(self, capsys, sample_clinics_json):
        output = run_json(capsys, ["get-clinic", "-ij", str(sample_clinics_json), "--clinic-id", "2"])
        assert output["data"][0]["name"] == "Downtown Dental"

    def test_get_unknown_clinic(self, capsys, sample_clinics_json):
        output = run_json(capsys, ["get-clinic", "-ij", str(sample_clinics_json), "--clinic-id", "99"])
        assert output["data"] == []
        assert output["metadata"]["status"] == "success_no_data"

    def test_list_dentists(self, capsys, sample_clinics_json):
        output = run_json(capsys, ["list-dentists", "-ij", str(sample_clinics_json), "-i", "1"])
        assert [d["name"] for d in output["data"]] == ["Anna Weber"]

    def test_missing_json_file(self, temp_dir):
        with pytest.raises(SystemExit) as exc_info:
            main(["search-clinics", "-ij", str(temp_dir / "missing.json")])
        assert exc_info.value.code == 1

    def test_output_file_format_from_extension(self, temp_dir, sample_clinics_json):
        out_path = temp_dir / "results.tsv"

        main(["search-clinics", "-ij", str(sample_clinics_json), "-o", str(out_path)])

        lines = out_path.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("# query_timestamp_utc: ")
        header = next(line for line in lines if not line.startswith("#"))
        assert header.split("\t")[0] == "name"

    def test_console_table(self, capsys, sample_clinics_json):
        main(["get-clinic", "-ij", str(sample_clinics_json), "-i", "1"])
        out = capsys.readouterr().out
        assert "# action: get-clinic" in out
        assert "Bright Smile Clinic" in out

    def test_log_file(self, monkeypatch, temp_dir, capsys, sample_clinics_json):
        log_path = temp_dir / "run.log"
        monkeypatch.setenv("CARIDENT_LOGFILE", str(log_path))

        main(["get-clinic", "-ij", str(sample_clinics_json), "-i", "1", "-f", "json"])

        logging.getLogger().handlers[-1].flush()
        assert "--- Clinic 1 finished ---" in log_path.read_text(encoding="utf-8")


class TestDatabaseSource:
    """Run actions against a mocked database."""

    def test_connection_failure_exits(self):
        with patch("caridentmedix.main.SQLInterface") as mock_sql_class:
            mock_sql_class.return_value.__enter__.return_value.connection = None
            with pytest.raises(SystemExit) as exc_info:
                main(["search-clinics", "-g", "Bright"])
        assert exc_info.value.code == 1

    def test_uses_clinic_repository(self, capsys, sample_clinics):
        with patch("caridentmedix.main.SQLInterface") as mock_sql_class, \
                patch("caridentmedix.main.ClinicRepository") as mock_repo_class:
            db = mock_sql_class.return_value.__enter__.return_value
            mock_repo_class.return_value = InMemoryClinicRepository(sample_clinics)

            output = run_json(capsys, ["search-clinics", "--name", "Anna"])

        mock_repo_class.assert_called_once()
        assert mock_repo_class.call_args.args[0] is db
        assert [c["id"] for c in output["data"]] == [1]

    def test_query_error_exits(self):
        with patch("caridentmedix.main.SQLInterface") as mock_sql_class:
            db = mock_sql_class.return_value.__enter__.return_value
            db.execute_query.return_value = False
            with pytest.raises(SystemExit) as exc_info:
                main(["get-clinic", "-i", "1"])
        assert exc_info.value.code == 1
