"""Internal constants shared across the library."""

DEFAULT_HOST = "beatsaber.networkauditor.org"
DEFAULT_PORT = 10157

#: GUID used by the relay server for "no sender" and by outbound heartbeats.
ZERO_GUID = "00000000-0000-0000-0000-000000000000"

#: Secret the relay ships with when the operator never configured one.
#: Only used when ``TaConfig.allow_default_password`` is set.
DEFAULT_COORDINATOR_PASSWORD = "thisisthepasswordthatisusedwithoutconfiguringapasswordformaincoordinator"

HEARTBEAT_COMMAND_TYPE = 0
HEARTBEAT_INTERVAL_SECONDS = 20.0
RESOLUTION_TIMEOUT_SECONDS = 10.0
