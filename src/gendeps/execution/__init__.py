"""Executing declared generator nodes, directly or through dagster."""
