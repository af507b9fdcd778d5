"""This sub-package contains the dispatch engine and the format codecs."""

# All I/O modules are lazy-loaded - they're imported when accessed
