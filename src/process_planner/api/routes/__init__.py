"""HTTP routers for counters, annotations, summary and health."""
