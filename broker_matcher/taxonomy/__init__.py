"""Closed vocabularies for questionnaire answers."""
