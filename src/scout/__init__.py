"""Content memory and novelty detection for periodic research reports."""
