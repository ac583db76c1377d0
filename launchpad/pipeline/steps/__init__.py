"""One module per pipeline step; each exposes ``run(run_id, request, ctx)``."""
