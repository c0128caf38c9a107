"""``kubeown`` command group.

Commands read Kubernetes objects as JSON (a file, or ``-`` for stdin) as
returned by ``kubectl get -o json`` and print to stdout. Nothing here talks
to a cluster.

    kubeown paths live.json --manager kubeown --manifest desired.json
    kubeown project live.json --owner live.json --manifest desired.json
    kubeown report live.json
"""

from __future__ import annotations

import json
from typing import IO

import click

from kubeown import __version__
from kubeown.config import load_config
from kubeown.errors import KubeOwnError
from kubeown.models.config import KubeOwnConfig
from kubeown.models.fields import managed_fields_of
from kubeown.observability.logging import bind_object, get_logger, setup_logging
from kubeown.ownership.accumulator import extract_managed_fields_json, owned_paths
from kubeown.ownership.report import extract_all_ownership, flatten_ownership, remove_parent_paths, visible_ownership
from kubeown.paths.segments import FieldPath
from kubeown.projection.display import flatten_projection
from kubeown.projection.ignore import filter_ignored_paths
from kubeown.projection.projector import project_fields


def _read_object(stream: IO[str]) -> dict[str, object]:
    try:
        obj = json.load(stream)
    except json.JSONDecodeError as exc:
        raise click.ClickException(f"{stream.name}: invalid JSON: {exc}") from exc
    if not isinstance(obj, dict):
        raise click.ClickException(f"{stream.name}: expected a JSON object")
    return obj


def _owned(
    config: KubeOwnConfig,
    obj: dict[str, object],
    manager: str | None,
    manifest: dict[str, object] | None,
    extra_ignores: tuple[str, ...],
) -> list[FieldPath]:
    log = bind_object(get_logger("cli"), obj)
    ownership = owned_paths(
        managed_fields_of(obj),
        manager or config.ownership.field_manager,
        reference=obj,
        manifest=manifest,
        max_depth=config.ownership.max_depth,
        logger=log,
    )
    log.debug("owned_paths_computed", manager=ownership.manager, count=len(ownership), from_manifest=ownership.from_manifest)
    ignores = [*config.ownership.ignore_fields, *extra_ignores]
    kept = filter_ignored_paths(ownership, ignores, obj)
    if len(kept) != len(ownership):
        log.debug("owned_paths_ignored", dropped=set(ownership) - set(kept))
    return sorted(kept, key=str)


@click.group()
@click.version_option(__version__, prog_name="kubeown")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Inspect Server-Side Apply field ownership of Kubernetes objects."""
    try:
        config = load_config()
    except KubeOwnError as exc:
        raise click.ClickException(str(exc)) from exc
    setup_logging(config.log.level)
    ctx.obj = config


@cli.command()
@click.argument("obj_file", type=click.File("r"))
@click.option("--manager", "-m", default=None, help="Field manager (default: KUBEOWN_FIELD_MANAGER).")
@click.option("--manifest", type=click.File("r"), default=None, help="Manifest used when the manager owns nothing yet.")
@click.option("--ignore", "ignores", multiple=True, help="Ignore pattern; repeatable.")
@click.option("--fields-json", is_flag=True, help="Print the manager's merged FieldsV1 tree instead.")
@click.pass_obj
def paths(
    config: KubeOwnConfig,
    obj_file: IO[str],
    manager: str | None,
    manifest: IO[str] | None,
    ignores: tuple[str, ...],
    fields_json: bool,
) -> None:
    """Print the paths a field manager owns on an object, one per line."""
    obj = _read_object(obj_file)
    if fields_json:
        click.echo(extract_managed_fields_json(managed_fields_of(obj), manager or config.ownership.field_manager))
        return
    desired = _read_object(manifest) if manifest is not None else None
    try:
        owned = _owned(config, obj, manager, desired, ignores)
    except KubeOwnError as exc:
        raise click.ClickException(str(exc)) from exc
    for path in owned:
        click.echo(str(path))


@cli.command()
@click.argument("source_file", type=click.File("r"))
@click.option("--path", "-p", "path_args", multiple=True, help="Path to project; repeatable.")
@click.option("--owner", type=click.File("r"), default=None, help="Object whose managedFields give the paths.")
@click.option("--manager", "-m", default=None, help="Field manager (default: KUBEOWN_FIELD_MANAGER).")
@click.option("--manifest", type=click.File("r"), default=None, help="Manifest used when the manager owns nothing yet.")
@click.option("--ignore", "ignores", multiple=True, help="Ignore pattern; repeatable.")
@click.option("--flat", is_flag=True, help="Print path = value lines instead of a JSON document.")
@click.pass_obj
def project(
    config: KubeOwnConfig,
    source_file: IO[str],
    path_args: tuple[str, ...],
    owner: IO[str] | None,
    manager: str | None,
    manifest: IO[str] | None,
    ignores: tuple[str, ...],
    flat: bool,
) -> None:
    """Project an object onto explicit paths or onto a manager's owned paths.

    Without --path the owned paths are read from --owner (or from the source
    object itself when --owner is not given).
    """
    source = _read_object(source_file)
    try:
        if path_args:
            selected: list[FieldPath | str] = list(path_args)
        else:
            owner_obj = _read_object(owner) if owner is not None else source
            desired = _read_object(manifest) if manifest is not None else None
            selected = list(_owned(config, owner_obj, manager, desired, ignores))
        projection = project_fields(source, selected, max_depth=config.ownership.max_depth)
        if flat:
            for path, value in flatten_projection(projection, selected).items():
                click.echo(f"{path} = {value}")
            return
    except KubeOwnError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(json.dumps(projection, indent=2, sort_keys=True))


@cli.command()
@click.argument("obj_file", type=click.File("r"))
@click.option("--all", "show_all", is_flag=True, help="Include status fields and system annotations.")
@click.pass_obj
def report(config: KubeOwnConfig, obj_file: IO[str], show_all: bool) -> None:
    """Print every owned path with the managers that own it."""
    obj = _read_object(obj_file)
    ownership = extract_all_ownership(managed_fields_of(obj), obj, max_depth=config.ownership.max_depth)
    if not show_all:
        ownership = visible_ownership(ownership)
    flat = remove_parent_paths(flatten_ownership(ownership))
    for path in sorted(flat):
        click.echo(f"{path}: {flat[path]}")
