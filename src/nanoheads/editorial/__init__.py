"""Editorial workflow: phase-one pipeline, review store, and CLI controllers."""
