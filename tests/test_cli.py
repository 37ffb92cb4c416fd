from unittest.mock import patch

from figma_exporter import cli
from figma_exporter.config import APP_VERSION
from figma_exporter.errors import TransportError
from figma_exporter.models import ExportReport, ItemFailure


def test_version(capsys):
    assert cli.main(["-v"]) == 0
    assert capsys.readouterr().out.strip() == APP_VERSION


def test_format_list(capsys):
    assert cli.main(["--format-list"]) == 0
    assert capsys.readouterr().out.split() == ["supported", "format:", "jpg", "png", "svg"]


def test_update_check(capsys):
    with patch.object(cli, "check_update", return_value="Already up to date."):
        assert cli.main(["--update-check"]) == 0
    assert "Already up to date." in capsys.readouterr().out


def test_directory_is_required():
    assert cli.main([]) == 2


def test_builds_config_from_flags(tmp_path):
    with patch.object(cli, "load_credentials", return_value=("proj", "secret")), \
            patch.object(cli, "run_export", return_value=ExportReport()) as run:
        code = cli.main(
            ["--dir", str(tmp_path), "--format", "svg", "--depth", "3", "--keep-going"]
        )

    assert code == 0
    config = run.call_args.args[0]
    assert config.output_dir == tmp_path.resolve()
    assert config.image_format == "svg"
    assert config.depth == 3
    assert config.fail_fast is False


def test_configuration_error_exits_non_zero(tmp_path):
    with patch.object(cli, "load_credentials", return_value=("proj", "")):
        assert cli.main(["--dir", str(tmp_path)]) == 1


def test_pipeline_error_exits_non_zero(tmp_path):
    error = TransportError("unreachable", operation="fetch document")
    with patch.object(cli, "load_credentials", return_value=("proj", "secret")), \
            patch.object(cli, "run_export", side_effect=error):
        assert cli.main(["--dir", str(tmp_path)]) == 1


def test_collected_failures_exit_non_zero(tmp_path):
    report = ExportReport(failures=[ItemFailure(item="1:2", error=RuntimeError("x"))])
    with patch.object(cli, "load_credentials", return_value=("proj", "secret")), \
            patch.object(cli, "run_export", return_value=report):
        assert cli.main(["--dir", str(tmp_path)]) == 1


def test_collected_failures_are_summarised_once(tmp_path, caplog):
    report = ExportReport(
        failures=[
            ItemFailure(item="1:2", error=RuntimeError("boom")),
            ItemFailure(item="1:3", error=RuntimeError("boom")),
        ]
    )
    with patch.object(cli, "load_credentials", return_value=("proj", "secret")), \
            patch.object(cli, "run_export", return_value=report), \
            patch.object(cli.logging, "basicConfig"):
        cli.main(["--dir", str(tmp_path)])

    cli_errors = [r.getMessage() for r in caplog.records if r.name == "figma_exporter.cli"]
    assert cli_errors == ["2 item(s) failed, see errors above"]
