"""EPUB → PDF conversion tool."""
