"""Tests for :mod:`climate_accounts.controllers`."""
