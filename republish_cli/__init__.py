"""CLI package for npm-republish."""
