"""Command-line tools and debugging helpers.

:mod:`record` runs a capture headlessly from synthetic or recorded data;
:mod:`debug` holds the ``EEGPIPES_DEBUG`` timing helpers used by the
pipeline.
"""
