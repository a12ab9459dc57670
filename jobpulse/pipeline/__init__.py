"""Enrichment pipeline: scanning, scheduling, rendering and watching."""
