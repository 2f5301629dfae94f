"""Tests for :mod:`climate_accounts.services.session_store`."""
