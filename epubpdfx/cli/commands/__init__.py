"""Sub-command definitions for the epubpdfx CLI."""
