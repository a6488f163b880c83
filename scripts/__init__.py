"""
Scripts Package.

This package contains operational scripts for the ontology loader.

Scripts:
- convert_ontology: Convert the shrine ontology, adapter mappings
  and patient dimension from data/original into data/converted
"""

# Scripts are meant to be run directly, not imported
