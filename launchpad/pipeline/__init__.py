"""Ordered bootstrap pipeline.

Purpose:
- Run install_dependencies -> fetch_release -> verify_binary -> launch_server
  as explicit steps.
- Persist the request, per-step status and step outputs under runs/<run_id>/
  so a failure is attributable to the step that raised it.
"""
