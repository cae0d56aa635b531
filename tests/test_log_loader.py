import pathlib
import tempfile
import unittest

import numpy as np

from eegpipes.dataio.log_loader import load_csv, load_raw_samples


class LogLoaderTest(unittest.TestCase):
    def test_load_csv_without_header(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "no_header.csv"
            path.write_text("1,2,3\n4,5,6\n", encoding="utf-8")

            data = load_csv(path)

            np.testing.assert_array_equal(data, np.array([[1, 2, 3], [4, 5, 6]]))

    def test_load_csv_with_header(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "with_header.csv"
            path.write_text("timestamp,tp9,af7\n1,2,3\n4,5,6\n", encoding="utf-8")

            data = load_csv(path)

            np.testing.assert_array_equal(data, np.array([[1, 2, 3], [4, 5, 6]]))

    def test_load_raw_samples_splits_timestamps(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "raw.csv"
            path.write_text("0,1,2,3\n3.90625,4,5,6\n", encoding="utf-8")

            timestamps, data = load_raw_samples(path, channel_count=2)

            np.testing.assert_array_equal(timestamps, [0.0, 3.90625])
            np.testing.assert_array_equal(data, [[1, 4], [2, 5]])

    def test_load_raw_samples_needs_enough_channels(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            path = pathlib.Path(tmpdir) / "raw.csv"
            path.write_text("0,1\n1,2\n", encoding="utf-8")
            with self.assertRaises(ValueError):
                load_raw_samples(path, channel_count=4)


if __name__ == "__main__":
    unittest.main()
