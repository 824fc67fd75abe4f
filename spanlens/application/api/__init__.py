"""HTTP API: routes, request models, dependencies and middleware."""
