from __future__ import annotations

import json
import math
from pathlib import Path

import pytest

from telemetry_pie.cli import run_cli
from telemetry_pie.cli.errors import EXIT_CODES, CliError
from telemetry_pie.cli.io import CONFIG_ENV_VAR, load_cli_config, read_recording
from telemetry_pie.cli.workflows import parse_weights
from tests.conftest import write_pyproject


def _render(args: list[str], capsys: pytest.CaptureFixture[str]) -> dict:
    run_cli(args)
    return json.loads(capsys.readouterr().out)


def test_parse_weights() -> None:
    assert parse_weights("1, 2.5,3") == [1.0, 2.5, 3.0]
    assert parse_weights("") == []
    with pytest.raises(CliError) as excinfo:
        parse_weights("1,x")
    assert excinfo.value.status_code == 2


def test_cli_error_falls_back_to_runtime() -> None:
    error = CliError("bad", category="mystery", context={"path": Path("a")})

    assert error.category == "runtime"
    assert error.status_code == EXIT_CODES["runtime"] == 1
    assert error.as_dict()["context"] == {"path": "a"}


def test_cli_error_is_logged_once(caplog: pytest.LogCaptureFixture) -> None:
    error = CliError.wrap(OSError("disk gone"), category="io")

    error.log()
    error.log()

    records = [record for record in caplog.records if getattr(record, "event", None) == "cli.error"]
    assert len(records) == 1
    assert records[0].status_code == 3
    assert records[0].getMessage() == "disk gone"


def test_render_json(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    payload = _render(["render", "--weights", "1,1,2", "--title", "Loads", "--legend", "A"], capsys)

    assert payload["title"] == "Loads"
    assert payload["hasData"] is True
    assert [segment["label"] for segment in payload["segments"]] == ["A", "Data 2", "Data 3"]
    assert [segment["percent"] for segment in payload["segments"]] == [25.0, 25.0, 50.0]
    assert payload["geometry"] == {"gapAngle": 0.0, "innerRadius": 0.4, "outerRadius": 0.8}


def test_render_with_gap_and_reverse(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    payload = _render(["render", "--weights", "1,1,1", "--gap-angle", "0.2", "--reverse"], capsys)

    segments = payload["segments"]
    assert segments[0]["startAngle"] == pytest.approx(-math.pi / 2 + 0.2)
    assert segments[-1]["endAngle"] == pytest.approx(3 * math.pi / 2 - 0.2)
    assert segments[0]["color"] == "#00ff00"


def test_render_zero_weights_has_no_data(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    payload = _render(["render", "--weights", "0,0"], capsys)

    assert payload["hasData"] is False
    assert payload["segments"] == []


def test_render_svg(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    run_cli(["render", "--weights", "1,3", "--format", "svg", "--color-map", "rainbow"])

    output = capsys.readouterr().out
    assert output.startswith("<svg")
    assert output.count("<path") == 2
    assert "Data 2: 75.00%" in output


def test_render_invalid_weights_exit_code(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(["render", "--weights", "1,abc"])

    assert excinfo.value.code == 2
    assert "Invalid weight 'abc'" in capsys.readouterr().out


def test_render_invalid_gap_is_usage_error(isolated_cwd: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(["render", "--weights", "1", "--gap-angle", "4"])

    assert excinfo.value.code == 2


def test_render_reads_project_defaults(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    write_pyproject(
        isolated_cwd,
        """
        [tool.telemetry_pie.panel]
        title = "From config"
        colorMap = "turbo"

        [tool.telemetry_pie.render]
        inner_radius = 0.2
        """,
    )

    payload = _render(["render", "--weights", "1,2"], capsys)

    assert payload["title"] == "From config"
    assert payload["geometry"]["innerRadius"] == 0.2


def test_invalid_log_level_exits(isolated_cwd: Path) -> None:
    with pytest.raises(SystemExit):
        run_cli(["--log-level", "chatty", "render", "--weights", "1"])


def test_replay_recording(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    recording = isolated_cwd / "run.jsonl"
    recording.write_text(
        "\n".join(
            json.dumps(record)
            for record in (
                {"frame": 0, "topic": "/load", "message": {"data": [1, 1]}},
                {"frame": 0, "topic": "/other", "message": {"data": [9]}},
                {"frame": 1, "topic": "/load", "message": {"data": [1, 3]}},
            )
        ),
        encoding="utf-8",
    )

    payload = _render(["replay", str(recording), "--path", "/load.data", "--trace"], capsys)

    assert [segment["percent"] for segment in payload["segments"]] == [25.0, 75.0]
    assert payload["errorMessage"] is None


def test_replay_reports_path_errors(isolated_cwd: Path, capsys: pytest.CaptureFixture[str]) -> None:
    recording = isolated_cwd / "run.jsonl"
    recording.write_text(json.dumps({"topic": "/load", "message": {"data": [1]}}), encoding="utf-8")

    payload = _render(["replay", str(recording), "--path", "/load.data[$i]"], capsys)

    assert payload["errorMessage"] == "Message paths using variables are not currently supported"
    assert payload["hasData"] is False


def test_replay_missing_recording(isolated_cwd: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        run_cli(["replay", str(isolated_cwd / "missing.jsonl"), "--path", "/load.data"])

    assert excinfo.value.code == 4


def test_replay_malformed_recording(isolated_cwd: Path) -> None:
    recording = isolated_cwd / "bad.jsonl"
    recording.write_text("{nope\n", encoding="utf-8")

    with pytest.raises(CliError) as excinfo:
        read_recording(recording)

    assert excinfo.value.status_code == 3
    assert "bad.jsonl:1" in str(excinfo.value)


def test_replay_bad_receive_time_is_io_error(
    isolated_cwd: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    recording = isolated_cwd / "late.jsonl"
    recording.write_text(
        json.dumps({"topic": "/load", "receive_time": "soon", "message": {"data": [1]}}) + "\n",
        encoding="utf-8",
    )

    with pytest.raises(SystemExit) as excinfo:
        run_cli(["replay", str(recording), "--path", "/load.data"])

    assert excinfo.value.code == EXIT_CODES["io"] == 3
    assert "late.jsonl:1: 'receive_time' must be a number" in capsys.readouterr().out


def test_load_cli_config_precedence(
    isolated_cwd: Path, tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> None:
    write_pyproject(isolated_cwd, "[tool.telemetry_pie.panel]\ntitle = 'cwd'\n")
    env_dir = tmp_path_factory.mktemp("env")
    write_pyproject(env_dir, "[tool.telemetry_pie.panel]\ntitle = 'env'\n")
    explicit_dir = tmp_path_factory.mktemp("explicit")
    explicit = write_pyproject(explicit_dir, "[tool.telemetry_pie.panel]\ntitle = 'explicit'\n")

    assert load_cli_config()["panel"]["title"] == "cwd"
    monkeypatch.setenv(CONFIG_ENV_VAR, str(env_dir))
    assert load_cli_config()["panel"]["title"] == "env"
    config = load_cli_config(explicit)
    assert config["panel"]["title"] == "explicit"
    assert config["_config_path"] == str(explicit.resolve())


def test_load_cli_config_without_files(isolated_cwd: Path) -> None:
    assert load_cli_config() == {"_config_path": None}
