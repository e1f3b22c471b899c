"""matchup-arena API server."""
