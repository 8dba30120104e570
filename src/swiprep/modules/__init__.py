"""Self-contained helper bricks used by the swiprep engines."""
