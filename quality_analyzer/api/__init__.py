# Data Quality Analyzer - API Package
"""HTTP surface of the analyzer."""
