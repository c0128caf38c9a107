"""KubeOwn command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kubeown`` script).
"""

from kubeown.cli.main import cli

__all__ = ["cli"]
