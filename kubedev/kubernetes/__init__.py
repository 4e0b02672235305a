"""
Kubernetes access for kubedev.

- KubernetesClient (client.py): get/create/update of workloads, bounded by
  timeouts, with version-conflict retry for read-mutate-write cycles
- serialization.py: kubernetes models <-> JSON data
- retry.py: tenacity configuration for version conflicts

The client is imported from its module (kubedev.kubernetes.client) so that
the workload adapters can use the serialization helpers without importing it.
"""
