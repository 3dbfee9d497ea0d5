"""salesgrid: paged, filterable, sortable view over a remote sales dataset."""

__version__ = "0.1.0"
