"""Test support for entity-controller tests: sample mapped entities."""
