"""Mutating admission webhook injecting the cluster trust bundle into Pods and Jobs."""

__version__ = "0.1.0"
