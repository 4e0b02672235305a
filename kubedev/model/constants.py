"""
Label and annotation keys kubedev writes into workload metadata.

The workload's own metadata is the only persistent state kubedev keeps:
- DEV_LABEL / session pod labels: workload is in dev mode
- TRANSLATION_ANNOTATION: serialized pre-dev-mode snapshot (pod template)
- REVISION_ANNOTATION: rollout revision before dev mode was entered
- MANIFEST_ANNOTATION: full serialized original object (legacy)
- DIVERT_LABEL / AUTO_CREATE_ANNOTATION: per-user divert clones
- FINGERPRINT_ANNOTATION: configuration hash at the last kubedev write
"""

# Labels
DEV_LABEL = "dev.kubedev.io"
INTERACTIVE_DEV_LABEL = "interactive.dev.kubedev.io"
DETACHED_DEV_LABEL = "detached.dev.kubedev.io"
DIVERT_LABEL = "divert.kubedev.io"
DEPLOYED_BY_LABEL = "dev.kubedev.io/deployed-by"

# Annotations
VERSION_ANNOTATION = "dev.kubedev.io/version"
REVISION_ANNOTATION = "dev.kubedev.io/revision"
TRANSLATION_ANNOTATION = "dev.kubedev.io/translation"
RESTART_ANNOTATION = "dev.kubedev.io/restart"
LAST_BUILT_ANNOTATION = "dev.kubedev.io/last-built"
MANIFEST_ANNOTATION = "dev.kubedev.io/deployment"
AUTO_CREATE_ANNOTATION = "dev.kubedev.io/auto-create"
FINGERPRINT_ANNOTATION = "dev.kubedev.io/fingerprint"

# Set by the Deployment controller on every rollout
DEPLOYMENT_REVISION_ANNOTATION = "deployment.kubernetes.io/revision"

# Value of AUTO_CREATE_ANNOTATION on divert clones
UP_COMMAND = "up"

# Bumped whenever the translation annotation format changes
TRANSLATION_VERSION = "1.0"

# Workload kinds
DEPLOYMENT = "Deployment"
STATEFULSET = "StatefulSet"
