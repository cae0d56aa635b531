"""Qt front end: live spectrum charts and capture controls per module."""
