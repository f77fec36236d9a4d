"""Configuration models and collaborator protocols for PyNucMap."""
