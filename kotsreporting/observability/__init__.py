"""Logging and metrics for kotsreporting."""
