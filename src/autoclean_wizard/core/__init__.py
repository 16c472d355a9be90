"""Editing, validation, generation and parsing of task configurations."""
