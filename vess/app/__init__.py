"""VESS application layer: state controller and bootstrap."""
