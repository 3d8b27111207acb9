"""Logging and metrics for kubeowner."""
