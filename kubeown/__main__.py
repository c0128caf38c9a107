"""Entry point for `python -m kubeown`.

Usage:
    python -m kubeown paths deployment.json
    kubectl get deploy web -o json | python -m kubeown report -
"""

from __future__ import annotations

from kubeown.cli import cli

cli(prog_name="kubeown")
