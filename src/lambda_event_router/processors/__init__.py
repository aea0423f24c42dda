"""Drop-in event processor modules.

A route config key with no registration or entry point resolves to
``lambda_event_router.processors.<key>``.
"""
