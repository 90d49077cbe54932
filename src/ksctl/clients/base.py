"""Structured client for the toolchain resource API.

Wraps the official ``kubernetes`` client with a bearer token bound to a
single API server. Objects travel as plain dicts so they can be previewed,
copied and mutated without a typed schema.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from kubernetes import client as k8s  # type: ignore[import-untyped]
from kubernetes.client import ApiException  # type: ignore[import-untyped]
from urllib3.exceptions import HTTPError

from ksctl.utils.errors import (
    ClusterConnectionError,
    KsctlError,
    MissingTokenError,
    NotFoundError,
    SubmissionError,
)

logger = logging.getLogger(__name__)

FOREGROUND = "Foreground"


@dataclass(frozen=True)
class CRDDefinition:
    """Definition of a resource type served by the API server."""

    group: str
    version: str
    plural: str
    kind: str

    @property
    def api_version(self) -> str:
        """Return ``group/version``, or just ``version`` for the core group."""
        if not self.group:
            return self.version
        return f"{self.group}/{self.version}"

    @property
    def is_core(self) -> bool:
        """Whether the resource belongs to the core API group."""
        return not self.group


def _error_reason(e: ApiException) -> str:
    return e.reason or str(e.status)


class K8sClient:
    """Client bound to one cluster API server with a bearer token.

    Construction builds the HTTP configuration only. Connectivity is proven
    by the first real call. Transport failures are not retried.
    """

    def __init__(
        self,
        server_api: str,
        token: str,
        insecure_skip_tls_verify: bool = False,
        request_timeout: float | None = None,
    ) -> None:
        if not token:
            raise MissingTokenError(server_api)
        self._server_api = server_api
        self._request_timeout = request_timeout

        configuration = k8s.Configuration()
        configuration.host = server_api
        configuration.api_key = {"authorization": token}
        configuration.api_key_prefix = {"authorization": "Bearer"}
        configuration.verify_ssl = not insecure_skip_tls_verify
        configuration.retries = False
        self._configuration = configuration

        self._api_client: Any = None
        self._core_v1: Any = None
        self._custom_objects: Any = None

    @property
    def server_api(self) -> str:
        """URL of the API server this client talks to."""
        return self._server_api

    @property
    def configuration(self) -> Any:
        """The kubernetes client configuration."""
        return self._configuration

    @property
    def api_client(self) -> Any:
        """The underlying ApiClient, created on first use."""
        if self._api_client is None:
            self._api_client = k8s.ApiClient(self._configuration)
        return self._api_client

    @property
    def core_v1(self) -> Any:
        """CoreV1Api bound to this client."""
        if self._core_v1 is None:
            self._core_v1 = k8s.CoreV1Api(self.api_client)
        return self._core_v1

    @property
    def custom_objects(self) -> Any:
        """CustomObjectsApi bound to this client."""
        if self._custom_objects is None:
            self._custom_objects = k8s.CustomObjectsApi(self.api_client)
        return self._custom_objects

    def _kwargs(self) -> dict[str, Any]:
        if self._request_timeout is None:
            return {}
        return {"_request_timeout": self._request_timeout}

    def _unreachable(self, e: HTTPError) -> ClusterConnectionError:
        return ClusterConnectionError(self._server_api, str(e))

    def _call_core(
        self,
        method: str,
        crd: CRDDefinition,
        namespace: str,
        name: str | None = None,
        query_params: list[tuple[str, str]] | None = None,
        body: Any = None,
    ) -> dict[str, Any]:
        """Call the core group path of a resource, which CustomObjectsApi cannot address."""
        path = "/api/{version}/namespaces/{namespace}/{plural}"
        path_params = {"version": crd.version, "namespace": namespace, "plural": crd.plural}
        if name:
            path += "/{name}"
            path_params["name"] = name
        header_params = {"Accept": "application/json"}
        if body is not None:
            header_params["Content-Type"] = "application/json"
        return self.api_client.call_api(
            path,
            method,
            path_params=path_params,
            query_params=query_params or [],
            header_params=header_params,
            body=body,
            response_type="object",
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
            **self._kwargs(),
        )

    # --- Reads ---

    def get(self, crd: CRDDefinition, name: str, namespace: str) -> dict[str, Any]:
        """Get an object by namespaced name.

        Raises:
            NotFoundError: If the object does not exist.
            ClusterConnectionError: If the API server cannot be reached.
            KsctlError: On any other API failure.
        """
        logger.debug(f"GET {crd.kind} {namespace}/{name} on {self._server_api}")
        try:
            if crd.is_core:
                return self._call_core("GET", crd, namespace, name=name)
            return self.custom_objects.get_namespaced_custom_object(
                crd.group, crd.version, namespace, crd.plural, name, **self._kwargs()
            )
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(crd.kind, name, namespace) from e
            raise KsctlError(
                f"unable to get {crd.kind} '{name}' in namespace '{namespace}': {_error_reason(e)}"
            ) from e
        except HTTPError as e:
            raise self._unreachable(e) from e

    def list_resources(
        self,
        crd: CRDDefinition,
        namespace: str,
        label_selector: str | None = None,
    ) -> list[dict[str, Any]]:
        """List objects of a type in a namespace, optionally filtered by labels."""
        logger.debug(f"LIST {crd.kind} in {namespace} selector={label_selector!r}")
        try:
            if crd.is_core:
                query = [("labelSelector", label_selector)] if label_selector else []
                result = self._call_core("GET", crd, namespace, query_params=query)
            else:
                kwargs = self._kwargs()
                if label_selector:
                    kwargs["label_selector"] = label_selector
                result = self.custom_objects.list_namespaced_custom_object(
                    crd.group, crd.version, namespace, crd.plural, **kwargs
                )
        except ApiException as e:
            raise KsctlError(
                f"unable to list {crd.kind} in namespace '{namespace}': {_error_reason(e)}"
            ) from e
        except HTTPError as e:
            raise self._unreachable(e) from e
        return list(result.get("items") or [])

    def read_pod_log(self, name: str, namespace: str, container: str) -> str:
        """Read the log of one container of a pod."""
        logger.debug(f"LOGS {namespace}/{name} container={container}")
        try:
            logs: str = self.core_v1.read_namespaced_pod_log(
                name=name, namespace=namespace, container=container, **self._kwargs()
            )
            return logs
        except ApiException as e:
            raise KsctlError(
                f"unable to read the logs of container '{container}' of pod '{name}': "
                f"{_error_reason(e)}"
            ) from e
        except HTTPError as e:
            raise self._unreachable(e) from e

    def namespaced_resources(self) -> list[CRDDefinition]:
        """Discover the namespaced resource types that can be listed.

        Each API group is reported at its preferred version. Subresources
        are left out. A group whose discovery fails is skipped with a
        warning.
        """
        try:
            discovered = [("", "v1", self.core_v1.get_api_resources(**self._kwargs()))]
            groups = k8s.ApisApi(self.api_client).get_api_versions(**self._kwargs()).groups or []
        except ApiException as e:
            raise KsctlError(f"unable to discover the API resources: {_error_reason(e)}") from e
        except HTTPError as e:
            raise self._unreachable(e) from e

        for group in groups:
            version = group.preferred_version.version
            try:
                resources = self.custom_objects.get_api_resources(
                    group.name, version, **self._kwargs()
                )
            except ApiException as e:
                logger.warning(f"unable to discover {group.name}/{version}: {_error_reason(e)}")
                continue
            except HTTPError as e:
                raise self._unreachable(e) from e
            discovered.append((group.name, version, resources))

        definitions = []
        for group_name, version, resource_list in discovered:
            for resource in resource_list.resources or []:
                if "/" in resource.name or not resource.namespaced:
                    continue
                if "list" not in (resource.verbs or []):
                    continue
                definitions.append(
                    CRDDefinition(
                        group=group_name, version=version, plural=resource.name, kind=resource.kind
                    )
                )
        return definitions

    # --- Writes ---

    def create(self, crd: CRDDefinition, body: dict[str, Any]) -> dict[str, Any]:
        """Create an object in the namespace named in its metadata.

        Raises:
            SubmissionError: If the API server rejects the object or cannot be reached.
        """
        namespace = body.get("metadata", {}).get("namespace", "")
        body.setdefault("apiVersion", crd.api_version)
        body.setdefault("kind", crd.kind)
        logger.debug(f"CREATE {crd.kind} in {namespace}")
        try:
            return self.custom_objects.create_namespaced_custom_object(
                crd.group, crd.version, namespace, crd.plural, body, **self._kwargs()
            )
        except ApiException as e:
            raise SubmissionError(
                f"unable to create {crd.kind} in namespace '{namespace}': {_error_reason(e)}"
            ) from e
        except HTTPError as e:
            raise SubmissionError(
                f"unable to create {crd.kind} in namespace '{namespace}': {e}"
            ) from e

    def update(self, crd: CRDDefinition, body: dict[str, Any]) -> dict[str, Any]:
        """Replace an object.

        The body carries the resourceVersion it was fetched with, so a
        concurrent modification by someone else is rejected by the server.

        Raises:
            NotFoundError: If the object was deleted meanwhile.
            SubmissionError: If the update is rejected or the server cannot be reached.
        """
        metadata = body.get("metadata", {})
        name = metadata.get("name", "")
        namespace = metadata.get("namespace", "")
        logger.debug(f"UPDATE {crd.kind} {namespace}/{name}")
        try:
            return self.custom_objects.replace_namespaced_custom_object(
                crd.group, crd.version, namespace, crd.plural, name, body, **self._kwargs()
            )
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(crd.kind, name, namespace) from e
            if e.status == 409:
                raise SubmissionError(
                    f"the {crd.kind} '{name}' has been modified by someone else in the meantime, "
                    "no change was applied - run the command again"
                ) from e
            raise SubmissionError(
                f"unable to update {crd.kind} '{name}': {_error_reason(e)}"
            ) from e
        except HTTPError as e:
            raise SubmissionError(f"unable to update {crd.kind} '{name}': {e}") from e

    def delete(
        self,
        crd: CRDDefinition,
        name: str,
        namespace: str,
        propagation_policy: str | None = None,
    ) -> None:
        """Delete an object.

        Raises:
            NotFoundError: If the object does not exist.
            SubmissionError: If the deletion is rejected or the server cannot be reached.
        """
        logger.debug(f"DELETE {crd.kind} {namespace}/{name} propagation={propagation_policy}")
        options = None
        if propagation_policy:
            options = k8s.V1DeleteOptions(propagation_policy=propagation_policy)
        try:
            if crd.is_core:
                self._call_core("DELETE", crd, namespace, name=name, body=options)
            else:
                kwargs = self._kwargs()
                if options is not None:
                    kwargs["body"] = options
                self.custom_objects.delete_namespaced_custom_object(
                    crd.group, crd.version, namespace, crd.plural, name, **kwargs
                )
        except ApiException as e:
            if e.status == 404:
                raise NotFoundError(crd.kind, name, namespace) from e
            raise SubmissionError(
                f"unable to delete {crd.kind} '{name}': {_error_reason(e)}"
            ) from e
        except HTTPError as e:
            raise SubmissionError(f"unable to delete {crd.kind} '{name}': {e}") from e
