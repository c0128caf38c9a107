"""KubeOwn: Server-Side Apply field ownership and ownership projection."""

__version__ = "0.1.0"
