"""GUI package - interactive ipywidgets viewer.

The viewer has three tabs:
1. Charts: corrected, delta, relative and raw views of the selected file
2. Table: corrected and raw rows against the cycle axis
3. Metadata: key/value lines of the selected file

Entry point:
    from cycle_viewer.gui.app import build_gui
    gui = build_gui()

Design principles:
- A new upload replaces every previously loaded file
- Chart figures are owned by one ChartSet and disposed before each redraw
- All rendered text is HTML-escaped
"""
