"""Infrastructure: store backends, thumbnail resolution and search repositories."""
