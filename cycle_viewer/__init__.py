"""Cycle Series Viewer -- notebook tooling for cycle-indexed measurement CSV files.

This package provides tools for:
- Parsing CSV exports with free-form ``key,value`` metadata lines and the
  "Raw Data" / "Corrected Data" sections
- Deriving the relative (divided by first value) and delta (minus first value) views
- Keeping every file of the last load batch in a keyed store with a current selection
- Mapping a dataset to chart series, table rows and escaped HTML tables
- Browsing loaded files in an interactive ipywidgets viewer

Key principles:
- Lenient numbers: malformed numeric fields become NaN, they never abort a parse
- Per-file isolation: one bad file in a batch never stops the others
- Nothing rendered as markup is inserted unescaped

Main subpackages:
- analysis: Relative / delta derivation
- gui: Interactive ipywidgets viewer, chart handles, HTML log
- ingest: CSV section parser and file reader
- models: Data models (Series, Section, ParsedFile, Dataset)
- presentation: Chart / table adapters and HTML rendering
- store: Multi-file dataset store
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
