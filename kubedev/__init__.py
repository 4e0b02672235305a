"""
kubedev - flip Kubernetes workloads into interactive development mode and back.
"""

__version__ = "0.1.0"
