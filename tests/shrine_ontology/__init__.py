"""
Tests for the Shrine Ontology Package.

Covers classification, surrogate IDs, index construction,
ancestor linking, emission and the conversion driver.
"""
