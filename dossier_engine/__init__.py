"""Identity and relationship graph engine for investigation dossiers."""

__version__ = "0.1.0"
