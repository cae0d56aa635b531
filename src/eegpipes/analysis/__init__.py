"""Signal analysis utilities (band-pass filtering and spectra).

Modules here operate on NumPy arrays of EEG samples and stay free of Qt
and I/O dependencies: :mod:`filters` wraps the SciPy Butterworth designs
used by the pipeline, :mod:`fft` turns epochs into sliced magnitude
spectra.
"""
