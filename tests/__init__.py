"""Tests for the shrine ontology loader."""
