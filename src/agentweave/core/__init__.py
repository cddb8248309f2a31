"""Weaving and observable-metrics core. Depends only on ports."""
