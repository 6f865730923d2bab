"""Composite package - holds the compositor API client and its wire models."""

from .api import CompositeAPI
from .connectivity import AlwaysOnline, Connectivity, SocketConnectivity, create_connectivity
from .models import APIErrorBody, CompositeImage, CompositeRequest, CompositeResponse

__all__ = [
    "APIErrorBody",
    "AlwaysOnline",
    "CompositeAPI",
    "CompositeImage",
    "CompositeRequest",
    "CompositeResponse",
    "Connectivity",
    "SocketConnectivity",
    "create_connectivity",
]
