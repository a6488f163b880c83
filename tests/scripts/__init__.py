"""Tests for the command-line driver."""
