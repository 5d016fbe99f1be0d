"""
Observability package - logging and Prometheus metrics for the operator.
"""
