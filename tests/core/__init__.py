"""Tests for core configuration and exceptions."""
