"""
Behave environment configuration

Resets per-scenario state so documents and annotations never leak between
scenarios.
"""


def before_scenario(context, scenario):
    """Run before each scenario"""
    for name in ("root", "selectors", "annotation", "anchor", "error", "markers", "highlighter"):
        if hasattr(context, name):
            delattr(context, name)
