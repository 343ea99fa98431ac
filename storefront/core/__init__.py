"""
Core utilities shared across the storefront API.

This package hosts:
- configuration helpers (env vars, tax/currency knobs, feature flags)
- cross-cutting services such as logging, the mailer adapter, password
  hashing, rate limit helpers and HTTP middleware.

Routers and services depend on these primitives instead of reading os.environ
or configuring handlers themselves.
"""
