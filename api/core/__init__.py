"""
Shared, cross-cutting code for the API.

`core/` should contain small building blocks that feature packages use
(DB wiring, settings, logging, body parsing, rate limiting). Keep
feature-specific SQL and business logic in the corresponding feature package
(e.g. `comments/`).
"""
