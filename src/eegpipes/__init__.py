"""eegpipes: streaming EEG spectrum pipelines with live charts and timed CSV captures."""

__version__ = "0.1.0"
