"""Harbormaster - unified read-only view of ECS and EKS clusters."""

__version__ = "0.1.0"
