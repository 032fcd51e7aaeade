"""
broker_matcher.reporting — output of ranked recommendations.

Modules:
  reporter   — CSV/JSON file writers for recommendation shortlists.
  formatters — ASCII terminal formatters for Typer CLI commands.
"""
