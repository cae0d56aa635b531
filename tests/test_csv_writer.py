import tempfile
import unittest
from pathlib import Path

import numpy as np

from eegpipes.core.models import FrequencySnapshot
from eegpipes.dataio.csv_writer import (
    capture_columns,
    format_number,
    header_columns,
    parse_capture,
    render_capture,
    snapshot_header,
    snapshot_row,
)
from eegpipes.dataio.export import DirectoryExporter, MemoryExporter
from eegpipes.dataio.file_paths import recording_filename, safe_filename


class CaptureCsvTest(unittest.TestCase):
    def test_format_number(self):
        self.assertEqual(format_number(1.0), "1")
        self.assertEqual(format_number(-3), "-3")
        self.assertEqual(format_number(0.5), "0.5")
        self.assertEqual(format_number(390.625), "390.625")

    def test_header_columns(self):
        self.assertEqual(
            header_columns([0, 1], [1.0, 1.5]),
            ["Timestamp (ms)", "ch0_1Hz", "ch0_1.5Hz", "ch1_1Hz", "ch1_1.5Hz"],
        )

    def test_snapshot_header_and_row_line_up(self):
        snap = FrequencySnapshot.from_arrays(781.25, [1.0, 2.0], np.array([[0.25, 1.0], [2.0, 3.5]]))
        header = snapshot_header(snap)
        row = snapshot_row(snap)
        self.assertEqual(len(header), len(row))
        self.assertEqual(row, ["781.25", "0.25", "1", "2", "3.5"])

    def test_render_and_parse(self):
        text = render_capture(["Timestamp (ms)", "ch0_1Hz"], [["0", "1"], ["390.625", "2"]])
        self.assertEqual(text, "Timestamp (ms),ch0_1Hz\n0,1\n390.625,2\n")
        header, rows = parse_capture(text)
        self.assertEqual(header, ["Timestamp (ms)", "ch0_1Hz"])
        self.assertEqual(rows, [["0", "1"], ["390.625", "2"]])

    def test_parse_empty_capture(self):
        with self.assertRaises(ValueError):
            parse_capture("")

    def test_capture_columns_rejects_foreign_headers(self):
        with self.assertRaises(ValueError):
            capture_columns(["time", "ch0_1Hz"])
        with self.assertRaises(ValueError):
            capture_columns(["Timestamp (ms)", "alpha"])
        self.assertEqual(capture_columns(["Timestamp (ms)", "ch4_2.5Hz"]), {4: [2.5]})


class ExportTest(unittest.TestCase):
    def test_recording_filename(self):
        self.assertEqual(
            recording_filename("Ssvep", "Slow Frequency", 1700000000123),
            "Ssvep_Slow Frequency_Recording_1700000000123.csv",
        )

    def test_safe_filename(self):
        self.assertEqual(safe_filename("a/b\\c.csv"), "a_b_c.csv")
        self.assertEqual(safe_filename(".."), "recording.csv")

    def test_memory_exporter(self):
        exporter = MemoryExporter()
        with self.assertRaises(LookupError):
            exporter.last
        self.assertIsNone(exporter(b"x\n", "text/plain;charset=utf-8", "a.csv"))
        self.assertEqual(exporter.last.text, "x\n")

    def test_directory_exporter(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            root = Path(tmpdir) / "recordings"
            path = DirectoryExporter(root)(b"a,b\n", "text/plain;charset=utf-8", "Predict_x/y_Recording_1.csv")
            self.assertEqual(path.parent, root)
            self.assertEqual(path.name, "Predict_x_y_Recording_1.csv")
            self.assertEqual(path.read_bytes(), b"a,b\n")


if __name__ == "__main__":
    unittest.main()
