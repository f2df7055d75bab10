"""Scenario definitions and the replication harness for the drive-thru model."""
