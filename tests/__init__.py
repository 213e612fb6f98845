"""Test suite for the Portal Joiner."""
