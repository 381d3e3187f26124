"""
Core: action extraction (actions.py), the per-user engine (engine.py),
ports for external services (ports.py) and the composition object (state.py).
"""
