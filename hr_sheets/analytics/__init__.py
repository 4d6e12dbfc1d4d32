"""Aggregation engines: pure derived views over mapped records."""
