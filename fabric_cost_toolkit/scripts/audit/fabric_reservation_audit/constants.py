"""
Constants for the Fabric reservation audit.
Resource types, API versions and default settings.
"""

CAPACITY_RESOURCE_TYPE = "Microsoft.Fabric/capacities"

# Reservation orders are matched on either of these
DEFAULT_RESERVED_RESOURCE_TYPE = "MicrosoftFabric"
DEFAULT_BRAND = "Fabric"

SUBSCRIPTION_STATE_ENABLED = "Enabled"

BACKEND_CLI = "cli"
BACKEND_REST = "rest"
BACKENDS = (BACKEND_CLI, BACKEND_REST)

ARM_ENDPOINT = "https://management.azure.com"
ARM_SCOPE = "https://management.azure.com/.default"
SUBSCRIPTIONS_API_VERSION = "2022-12-01"
FABRIC_API_VERSION = "2023-11-01"
RESERVATIONS_API_VERSION = "2022-11-01"

EXIT_OK = 0
EXIT_PRECONDITION_FAILED = 1
EXIT_INTERRUPTED = 130

SECTION_WIDTH = 80
