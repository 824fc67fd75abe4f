"""
API Routes

- chat: POST /chat and POST /explain token streams
- health: liveness and readiness probes
"""
