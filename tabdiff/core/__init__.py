"""Comparison engine: key selection, row hashing, classification, aggregation."""
