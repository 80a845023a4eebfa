"""Release report stages: collect, correlate, categorize, render."""
