"""Report building and rendering modules."""
