"""API layer: canonical render-cycle surface for views and the CLI."""
