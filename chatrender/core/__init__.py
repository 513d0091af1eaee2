"""core data models and the message pipeline."""
