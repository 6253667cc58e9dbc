"""Test package for the Data Quality Tracker backend."""
