"""
Controllers for the accounts API.

Controllers receive request data and the store/cache handles to use, and
return a ``(data, status, headers)`` tuple. Failures are raised as
:mod:`climate_accounts.errors` exceptions.
"""
