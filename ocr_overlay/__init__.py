"""Overlay, inspect, edit and export OCR text regions on raster images."""
