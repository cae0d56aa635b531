"""Data input/output helpers (capture CSV, exports and raw logs).

Utility modules here keep disk-level concerns isolated from the pipeline:
- :mod:`csv_writer` defines the capture header/row layout and parses it back.
- :mod:`export` hands finished captures to a directory or keeps them in memory.
- :mod:`file_paths` builds capture file names.
- :mod:`log_loader` reads raw sample logs for offline replay.
"""
