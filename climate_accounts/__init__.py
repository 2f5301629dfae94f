"""
Climate reporting accounts service.

The accounts service is a Flask application that provides the backend APIs
used by the citizen climate-reporting app for account registration,
authentication, and profile management.

User records live in a durable relational store, which is the source of
truth for identity and profile data. When a user logs in they are issued a
session token; a denormalized projection of their profile is cached under
that token in a redis key-value store with a long expiry, and the token is
mirrored on the user record.

Context
-------
The two stores are never updated transactionally. Instead, every
session-authenticated read goes through the session reconciler (see
:mod:`climate_accounts.sessions`), which treats the cache as advisory:
if the cached projection has drifted from the durable record it is
overwritten in place (read-repair), and if the cache entry is gone the
session is considered expired and the pointer on the user record is
cleared.
"""
