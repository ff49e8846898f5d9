"""prodgrid: production schedule normalisation and calendar timeline layout."""

__version__ = "0.1.0"
