"""HTTP service exposing questionnaire flowchart operations."""
