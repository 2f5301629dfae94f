"""Tests for :mod:`climate_accounts.sessions`."""
