"""Constants for the ArgoCD Resource Operator."""

# API Group
API_GROUP = "argocd.cloud37.dev"
API_VERSION = "v1alpha1"
API_GROUP_VERSION = f"{API_GROUP}/{API_VERSION}"

# Resource Kinds
KIND_PROVIDER_CONFIG = "ProviderConfig"
KIND_APPLICATION = "Application"
KIND_APPLICATION_SET = "ApplicationSet"
KIND_PROJECT = "Project"
KIND_REPOSITORY = "Repository"
KIND_CLUSTER = "Cluster"
KIND_TOKEN = "Token"

# Plurals
PLURAL_PROVIDER_CONFIGS = "providerconfigs"

# Labels
LABEL_MANAGED_BY = f"{API_GROUP}/managed-by"

# Annotations
ANNOTATION_EXTERNAL_NAME = f"{API_GROUP}/external-name"

# Finalizers
FINALIZER = f"{API_GROUP}/finalizer"

# Field Manager
FIELD_MANAGER = "argocd-resource-operator"
CONTROLLER_NAME = "argocd-resource-operator"

# Defaults
DEFAULT_PROVIDER_CONFIG = "default"
DELETION_POLICY_DELETE = "Delete"
DELETION_POLICY_ORPHAN = "Orphan"

# Condition Types
COND_READY = "Ready"
COND_SYNCED = "Synced"
COND_AUTH_VALID = "AuthValid"
COND_ENDPOINT_REACHABLE = "EndpointReachable"

# Condition Reasons
REASON_AVAILABLE = "Available"
REASON_UNAVAILABLE = "Unavailable"
REASON_CREATING = "Creating"
REASON_DELETING = "Deleting"
REASON_RECONCILE_SUCCESS = "ReconcileSuccess"
REASON_RECONCILE_ERROR = "ReconcileError"

# Event Reasons
EVENT_REASON_RECONCILE_STARTED = "ReconcileStarted"
EVENT_REASON_RECONCILE_FAILED = "ReconcileFailed"
EVENT_REASON_VALIDATE_SUCCEEDED = "ValidateSucceeded"
EVENT_REASON_VALIDATE_FAILED = "ValidateFailed"
EVENT_REASON_CREATED_EXTERNAL = "CreatedExternalResource"
EVENT_REASON_UPDATED_EXTERNAL = "UpdatedExternalResource"
EVENT_REASON_DELETED_EXTERNAL = "DeletedExternalResource"
EVENT_REASON_LATE_INITIALIZED = "LateInitializedSpec"
