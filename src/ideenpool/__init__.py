"""Ideenpool — digitalization ideas on top of Dataverse."""

__version__ = "0.1.0"
