"""Media upload relay: session-scoped binary uploads over HTTP."""
