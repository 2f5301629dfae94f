"""Tests for :mod:`climate_accounts.services.users`."""
