from __future__ import annotations

import numpy as np
import pytest

from eegpipes.dataio.csv_writer import parse_capture
from eegpipes.tools.record import _build_arg_parser, main, run


def _args(*argv: str):
    return _build_arg_parser().parse_args(list(argv))


def test_synthetic_capture(tmp_path) -> None:
    result = run(_args("--module", "ssvep", "--out", str(tmp_path), "--seed", "3"))

    assert result is not None
    assert result.reason == "deadline"
    assert 24 <= result.row_count <= 26
    assert result.filename.startswith("Ssvep_Slow Frequency_Recording_")
    assert result.location == tmp_path / result.filename
    header, rows = parse_capture(result.location.read_text(encoding="utf-8"))
    assert len(header) == 121
    assert len(rows) == result.row_count


def test_capture_from_raw_log(tmp_path, headset) -> None:
    data = headset.generate(256 * 16)
    timestamps = 5000.0 + np.arange(data.shape[1]) * 1000.0 / 256.0
    raw = tmp_path / "raw.csv"
    np.savetxt(raw, np.column_stack([timestamps, data.T]), delimiter=",", header="timestamp,tp9,af7,af8,tp10", comments="")

    result = run(
        _args("--module", "Predict", "--input", str(raw), "--out", str(tmp_path / "out"), "--seconds", "5")
    )

    assert result.filename.startswith("Predict_Baseline_Recording_")
    assert result.reason == "deadline"
    assert 11 <= result.row_count <= 14


def test_short_input_gives_header_only_capture(tmp_path, headset) -> None:
    data = headset.generate(256)
    raw = tmp_path / "short.csv"
    np.savetxt(raw, np.column_stack([np.arange(256) * 1000.0 / 256.0, data.T]), delimiter=",")

    result = run(_args("--input", str(raw), "--out", str(tmp_path)))

    assert result.header_only
    assert result.location.read_text(encoding="utf-8").count("\n") == 1


def test_invalid_settings_exit(tmp_path) -> None:
    with pytest.raises(SystemExit):
        run(_args("--seconds", "0", "--out", str(tmp_path)))


def test_main_prints_location(tmp_path, capsys) -> None:
    main(["--module", "Predict", "--seconds", "2", "--out", str(tmp_path), "--seed", "1"])
    out = capsys.readouterr().out
    assert "Predict_Baseline_Recording_" in out
    assert "deadline" in out
