"""Guarded mutation protocol shared by every state-changing command.

A command subclasses :class:`GuardedMutation` and fills in the steps; the
driver in :meth:`GuardedMutation.run` enforces the order::

    Resolved -> Fetched -> Previewed -> PreconditionChecked
             -> {Confirmed, Declined} -> {Applied, Failed} -> Reported

The operator always sees the current state before being asked anything,
confirmation is asked exactly once, and a single submission is attempted
only after it was given. A failed precondition that means "nothing to do"
ends the run successfully without a prompt; a hard failure raises
:class:`~ksctl.utils.errors.PreconditionError` instead.
"""

from __future__ import annotations

import copy
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar

from ksctl.utils.errors import KsctlError

if TYPE_CHECKING:
    from ksctl.clients.base import CRDDefinition, K8sClient
    from ksctl.context import CommandContext
    from ksctl.resolver import ClusterConfig

logger = logging.getLogger(__name__)


class MutationState(str, Enum):
    """States of one guarded mutation."""

    PENDING = "Pending"
    RESOLVED = "Resolved"
    FETCHED = "Fetched"
    PREVIEWED = "Previewed"
    PRECONDITION_CHECKED = "PreconditionChecked"
    CONFIRMED = "Confirmed"
    DECLINED = "Declined"
    APPLIED = "Applied"
    FAILED = "Failed"
    REPORTED = "Reported"


@dataclass
class MutationEnvelope:
    """What one run of the protocol went through. Never outlives the command."""

    target: dict[str, Any] | None = None
    precondition_met: bool = False
    confirmed: bool = False
    mutated: bool = False
    state: MutationState = MutationState.PENDING

    @property
    def nothing_to_do(self) -> bool:
        """Whether the run stopped at the benign precondition exit."""
        return self.state is MutationState.PRECONDITION_CHECKED and not self.precondition_met


class GuardedMutation(ABC):
    """Base class of a fetch, preview, check, confirm, apply and report workflow.

    Subclasses must implement :meth:`fetch`, :meth:`confirm` and :meth:`apply`
    and usually set :attr:`crd`, :attr:`preview_title` and
    :attr:`success_message`.
    """

    crd: ClassVar[CRDDefinition | None] = None
    preview_title: ClassVar[str] = ""
    success_message: ClassVar[str] = ""

    def __init__(self, ctx: CommandContext) -> None:
        self.ctx = ctx
        self.envelope = MutationEnvelope()
        self._cluster: ClusterConfig | None = None
        self._client: K8sClient | None = None

    @property
    def terminal(self) -> Any:
        """Shortcut to the terminal of the command context."""
        return self.ctx.terminal

    @property
    def cluster(self) -> ClusterConfig:
        """The resolved cluster, available once the run reached Resolved."""
        if self._cluster is None:
            raise RuntimeError("cluster not resolved yet")
        return self._cluster

    @property
    def client(self) -> K8sClient:
        """The client, available once the run reached Resolved."""
        if self._client is None:
            raise RuntimeError("cluster not resolved yet")
        return self._client

    @property
    def namespace(self) -> str:
        """Namespace holding the target objects."""
        return self.cluster.operator_namespace

    # --- Steps ---

    def resolve(self) -> tuple[ClusterConfig, K8sClient]:
        """Resolve the cluster and build a client. Defaults to the host cluster."""
        return self.ctx.host_client()

    @abstractmethod
    def fetch(self) -> dict[str, Any]:
        """Retrieve the target object. A missing object raises NotFoundError."""

    def preview(self, target: dict[str, Any]) -> None:
        """Show the current state of the target to the operator."""
        self.terminal.print_object(self.preview_title, target)

    def check_precondition(self, target: dict[str, Any]) -> bool:
        """Evaluate the business rule against the fetched target.

        Returns:
            False when there is nothing to do. Hard failures raise
            PreconditionError.
        """
        return True

    @abstractmethod
    def confirm(self, target: dict[str, Any]) -> bool:
        """Ask the operator for confirmation, exactly once."""

    @abstractmethod
    def apply(self, target: dict[str, Any]) -> None:
        """Mutate the in-memory copy of the target."""

    def submit(self, target: dict[str, Any]) -> None:
        """Send the change to the API server. Defaults to a single update."""
        if self.crd is None:
            raise NotImplementedError("submit() requires crd to be set")
        self.client.update(self.crd, target)

    def report(self, target: dict[str, Any]) -> None:
        """Tell the operator the change was made."""
        self.terminal.println(self.success_message)

    # --- Driver ---

    def run(self) -> MutationEnvelope:
        """Run the protocol to completion.

        Raises:
            KsctlError: On any resolution, fetch, precondition, input or
                submission failure. The target is left untouched.
        """
        envelope = self.envelope
        name = type(self).__name__

        self._cluster, self._client = self.resolve()
        envelope.state = MutationState.RESOLVED

        target = self.fetch()
        envelope.target = target
        envelope.state = MutationState.FETCHED

        self.preview(target)
        envelope.state = MutationState.PREVIEWED

        envelope.precondition_met = self.check_precondition(target)
        envelope.state = MutationState.PRECONDITION_CHECKED
        if not envelope.precondition_met:
            logger.debug(f"{name}: nothing to do")
            return envelope

        envelope.confirmed = self.confirm(target)
        if not envelope.confirmed:
            envelope.state = MutationState.DECLINED
            logger.debug(f"{name}: declined by the operator")
            return envelope
        envelope.state = MutationState.CONFIRMED

        changed = copy.deepcopy(target)
        self.apply(changed)
        try:
            self.submit(changed)
        except KsctlError:
            envelope.state = MutationState.FAILED
            raise
        envelope.mutated = True
        envelope.state = MutationState.APPLIED
        logger.debug(f"{name}: change submitted")

        self.report(changed)
        envelope.state = MutationState.REPORTED
        return envelope


class PatchObject(GuardedMutation):
    """Guarded update of one object fetched by name from the operator namespace."""

    def __init__(self, ctx: CommandContext, name: str) -> None:
        super().__init__(ctx)
        self.name = name

    def fetch(self) -> dict[str, Any]:
        if self.crd is None:
            raise NotImplementedError("fetch() requires crd to be set")
        return self.client.get(self.crd, self.name, self.namespace)

    def nothing_to_do(self, message: str) -> bool:
        """Tell the operator why the run stops here, for use in check_precondition."""
        self.terminal.info(message)
        return False
