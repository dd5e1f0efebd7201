"""crawchain service package (lightweight install).

Avoid importing the HTTP application on bare install. Consumers that need the
service startup should explicitly import ``main_fastapi``.
"""
