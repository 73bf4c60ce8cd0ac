"""Reporting helpers: metrics, YoY comparison and text rendering."""
