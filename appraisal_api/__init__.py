"""Employee appraisal HTTP service."""
