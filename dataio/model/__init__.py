"""This sub-package contains the data model: media types, values and tables."""
