"""Dump every resource of a namespace into a local directory.

Each object goes into ``<kind>-<name>.yaml``. For pods, the logs of every
started container are saved as ``pod-<pod>-<container>.logs``. A resource
type or a log that cannot be read is reported and skipped.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from ksctl.utils.errors import KsctlError

if TYPE_CHECKING:
    from ksctl.clients.base import CRDDefinition, K8sClient
    from ksctl.context import CommandContext

logger = logging.getLogger(__name__)

# mostly cluster-wide manifests served as namespaced
SKIPPED_KINDS = {("packages.operators.coreos.com", "PackageManifest")}


def _write(path: Path, content: str) -> None:
    try:
        path.write_text(content)
    except OSError as e:
        raise KsctlError(f"unable to write '{path}': {e}") from e


def gather_pod_logs(
    ctx: CommandContext,
    client: K8sClient,
    pod: dict[str, Any],
    dest_dir: Path,
) -> list[Path]:
    """Save the logs of the started containers of a pod."""
    pod_name = pod["metadata"]["name"]
    namespace = pod["metadata"].get("namespace", "")
    written = []
    for status in (pod.get("status") or {}).get("containerStatuses") or []:
        if not status.get("started"):
            continue
        container = status["name"]
        ctx.terminal.info(f"collecting logs from {pod_name}/{container}")
        try:
            logs = client.read_pod_log(pod_name, namespace, container)
        except KsctlError as e:
            ctx.terminal.warn(
                f"failed to collect logs from container '{container}' in pod '{pod_name}': {e}"
            )
            continue
        path = dest_dir / f"pod-{pod_name}-{container}.logs"
        _write(path, logs)
        written.append(path)
    return written


def gather_resource(
    ctx: CommandContext,
    client: K8sClient,
    crd: CRDDefinition,
    namespace: str,
    dest_dir: Path,
) -> list[Path]:
    """Save every object of one resource type found in the namespace."""
    try:
        items = client.list_resources(crd, namespace)
    except KsctlError as e:
        ctx.terminal.warn(f"failed to list {crd.api_version.lower()}/{crd.kind.lower()}: {e}")
        return []

    written = []
    for item in items:
        item.setdefault("apiVersion", crd.api_version)
        item.setdefault("kind", crd.kind)
        name = item.get("metadata", {}).get("name", "")
        ctx.terminal.info(f"found {crd.kind}/{name}")
        path = dest_dir / f"{crd.kind.lower()}-{name}.yaml"
        _write(path, yaml.safe_dump(item, default_flow_style=False, sort_keys=False))
        written.append(path)
        if crd.is_core and crd.kind == "Pod":
            written.extend(gather_pod_logs(ctx, client, item, dest_dir))
    return written


def must_gather_namespace(
    ctx: CommandContext,
    target_cluster: str,
    namespace: str,
    dest_dir: Path,
) -> list[Path]:
    """Dump all resources of a namespace of the named cluster into dest_dir.

    Nothing is gathered when dest_dir already holds files.

    Returns:
        The paths of the files written.
    """
    try:
        dest_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise KsctlError(f"unable to create the '{dest_dir}' dest-dir: {e}") from e
    if any(dest_dir.iterdir()):
        ctx.terminal.warn(f"The '{dest_dir}' dest-dir is not empty. Aborting.")
        return []

    cfg = ctx.resolve(target_cluster)
    client = ctx.client_factory.new_client(cfg.token, cfg.server_api)

    ctx.terminal.info("fetching the list of API resources on the cluster...")
    resources = client.namespaced_resources()
    logger.debug(f"{len(resources)} namespaced resource types on {cfg.server_api}")

    ctx.terminal.info(f"gathering all resources from the '{namespace}' namespace...")
    written = []
    for crd in resources:
        if (crd.group, crd.kind) in SKIPPED_KINDS:
            continue
        written.extend(gather_resource(ctx, client, crd, namespace, dest_dir))
    return written


def _handle(ctx: CommandContext, args: argparse.Namespace) -> int:
    must_gather_namespace(ctx, args.target_cluster, args.namespace, Path(args.dest_dir))
    return 0


def register(subparsers: Any) -> None:
    """Register the must-gather-namespace command."""
    parser = subparsers.add_parser(
        "must-gather-namespace",
        help="Dump all resources from a namespace",
        description=(
            "Dump all resources from a namespace into the destination directory, "
            "one resource per file"
        ),
    )
    parser.add_argument("namespace", help="the namespace to gather")
    parser.add_argument(
        "-t", "--target-cluster", required=True, help="the cluster name from ksctl.yaml"
    )
    parser.add_argument(
        "--dest-dir",
        required=True,
        help="the local directory the resources are written to, must be empty",
    )
    parser.set_defaults(handler=_handle)
