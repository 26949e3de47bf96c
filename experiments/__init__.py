"""Experiment harness: replication driver, scenarios and the text report."""
