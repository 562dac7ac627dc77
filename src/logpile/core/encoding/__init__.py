"""Renderers turning snapshots into report text."""

from logpile.core.encoding.delimited import encode_csv
from logpile.core.encoding.jsondoc import encode_json, snapshot_document
from logpile.core.encoding.plot import encode_plot
from logpile.core.encoding.table import encode_table

__all__ = [
    "encode_csv",
    "encode_json",
    "encode_plot",
    "encode_table",
    "snapshot_document",
]
