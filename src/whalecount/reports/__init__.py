"""Daily report persistence: per-date parent rows and observation snapshots."""
