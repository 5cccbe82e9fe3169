"""Domain layer (pure logic).

- Keep duel rules and calculations here: grid, economy, zapper, tick, purchase.
- Avoid I/O: no DB sessions, no HTTP/FastAPI, no Redis.
- Time and randomness are passed in as arguments (``now`` in epoch ms, a picker).
"""
