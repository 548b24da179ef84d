from shinytracker.clients.hunts import (
    HuntsClient,
    HuntsRemote,
    RemoteError,
    RemoteRejected,
    RemoteUnavailable,
)
from shinytracker.clients.species import SpeciesClient

__all__ = [
    "HuntsClient",
    "HuntsRemote",
    "RemoteError",
    "RemoteRejected",
    "RemoteUnavailable",
    "SpeciesClient",
]
