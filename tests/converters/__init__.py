"""
Tests for the file converters (CSV, AdapterMappings.xml,
patient_dimension.csv).
"""
