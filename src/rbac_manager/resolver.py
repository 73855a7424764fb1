"""Resolution of RBACDefinitions into Kubernetes authorization objects.

The resolver walks a definition top-down (bindings in order, then subjects,
ClusterRoleBinding specs and RoleBinding specs) and produces ServiceAccounts,
RoleBindings and ClusterRoleBindings with deterministic names:

- ClusterRoleBinding: ``<definition>-<binding>-<clusterRole>``
- RoleBinding of a ClusterRole: ``<definition>-<binding>-<clusterRole>``
- RoleBinding of a Role: ``<definition>-<binding>-<role>-<namespace>``

Resolution is all-or-nothing. Objects are collected in an accumulator private
to one call and only turned into a ``ResolutionResult`` once every binding has
resolved; any error discards the accumulator.

Example:
    >>> from rbac_manager.resolver import resolve_definition
    >>> result = resolve_definition(definition)
    >>> [rb.name for rb in result.role_bindings]
    ['example-admin-view']
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from rbac_manager.audit import ResolutionAuditEvent, ResolutionOutcome, log_resolution_event
from rbac_manager.directory import format_label_selector
from rbac_manager.errors import (
    DefinitionValidationError,
    NamespaceLookupError,
    RBACManagerError,
)
from rbac_manager.result import EventLevel, ResolutionEvent, ResolutionResult
from rbac_manager.schemas.resources import (
    ClusterRoleBindingResource,
    ObjectDecorator,
    RoleBindingResource,
    RoleRef,
    ServiceAccountResource,
)
from rbac_manager.telemetry.sanitization import sanitize_error_message
from rbac_manager.telemetry.tracer_factory import get_tracer

if TYPE_CHECKING:
    from rbac_manager.directory import NamespaceDirectory
    from rbac_manager.schemas.definition import (
        NamespaceSelector,
        RBACBinding,
        RBACDefinition,
        RoleBindingSpec,
        Subject,
    )

logger = structlog.get_logger(__name__)

EventSink = Callable[[ResolutionEvent], None]


def log_resolution_trace(event: ResolutionEvent) -> None:
    """Default event sink: forward resolution events to structlog."""
    getattr(logger, event.level)(event.event, **event.fields)


def name_prefix(definition: RBACDefinition, binding: RBACBinding) -> str:
    """Return the name prefix shared by all bindings of ``binding``.

    Example:
        >>> name_prefix(definition, definition.rbac_bindings[0])
        'example-admin'
    """
    return f"{definition.name}-{binding.name}"


def has_namespace_selectors(definition: RBACDefinition) -> bool:
    """Check whether resolving ``definition`` needs a namespace directory.

    Args:
        definition: The RBACDefinition.

    Returns:
        True if any RoleBinding spec selects namespaces by label.
    """
    return any(
        spec.uses_selector
        for binding in definition.rbac_bindings
        for spec in binding.role_bindings
    )


@dataclass
class _Accumulator:
    """Per-call collection of produced objects and events."""

    definition: RBACDefinition
    decorator: ObjectDecorator
    sink: EventSink
    service_accounts: list[ServiceAccountResource] = field(default_factory=list)
    role_bindings: list[RoleBindingResource] = field(default_factory=list)
    cluster_role_bindings: list[ClusterRoleBindingResource] = field(default_factory=list)
    events: list[ResolutionEvent] = field(default_factory=list)

    def emit(self, level: EventLevel, event: str, **fields: Any) -> None:
        record = ResolutionEvent(
            level=level,
            event=event,
            fields={"definition": self.definition.name, **fields},
        )
        self.events.append(record)
        self.sink(record)

    def build(self) -> ResolutionResult:
        return ResolutionResult(
            definition=self.definition.name,
            service_accounts=tuple(self.service_accounts),
            role_bindings=tuple(self.role_bindings),
            cluster_role_bindings=tuple(self.cluster_role_bindings),
            events=tuple(self.events),
        )


def _trace_id(span: trace.Span) -> str | None:
    ctx = span.get_span_context()
    if not ctx.is_valid:
        return None
    return format(ctx.trace_id, "032x")


def _mark_failed(span: trace.Span, error: RBACManagerError) -> None:
    # Only sanitized text reaches the span; the chained cause is never recorded.
    sanitized = sanitize_error_message(error.message)
    span.set_attribute("rbac.success", False)
    span.set_status(Status(StatusCode.ERROR, sanitized))
    span.set_attribute("exception.type", type(error).__name__)
    span.set_attribute("exception.message", sanitized)


@dataclass(frozen=True)
class RBACDefinitionResolver:
    """Resolves RBACDefinitions into ServiceAccounts and role bindings.

    The resolver holds no state between calls and may be reused and shared.

    Attributes:
        directory: Namespace lookup used for RoleBinding specs with a
            namespace selector. Only required when such specs exist.
        event_sink: Receives diagnostic events as they are emitted. Defaults
            to structlog.

    Example:
        >>> resolver = RBACDefinitionResolver(directory=KubernetesNamespaceDirectory())
        >>> result = resolver.resolve(definition)
        >>> print(result)
        RBACDefinition example:
          ServiceAccounts: 1
          RoleBindings: 2
          ClusterRoleBindings: 0
    """

    directory: NamespaceDirectory | None = None
    event_sink: EventSink | None = None

    def resolve(self, definition: RBACDefinition) -> ResolutionResult:
        """Resolve ``definition`` into the objects it specifies.

        Args:
            definition: The RBACDefinition to resolve.

        Returns:
            ResolutionResult with all produced objects and trace events.

        Raises:
            DefinitionValidationError: If a binding has no subjects, or a
                RoleBinding spec lacks a single role reference or a namespace
                target.
            NamespaceLookupError: If a namespace selector query fails.
        """
        bindings = len(definition.rbac_bindings)
        with get_tracer(__name__).start_as_current_span(
            "rbac_manager.resolve",
            attributes={
                "rbac.definition": definition.name,
                "rbac.bindings_count": bindings,
            },
            record_exception=False,
            set_status_on_exception=False,
        ) as span:
            try:
                result = self._resolve(definition)
            except DefinitionValidationError as e:
                _mark_failed(span, e)
                log_resolution_event(
                    ResolutionAuditEvent.create_failure(
                        outcome=ResolutionOutcome.VALIDATION_ERROR,
                        definition=definition.name,
                        binding=e.binding,
                        bindings=bindings,
                        error=sanitize_error_message(e.message),
                        trace_id=_trace_id(span),
                    )
                )
                raise
            except NamespaceLookupError as e:
                _mark_failed(span, e)
                log_resolution_event(
                    ResolutionAuditEvent.create_failure(
                        outcome=ResolutionOutcome.LOOKUP_ERROR,
                        definition=definition.name,
                        bindings=bindings,
                        error=sanitize_error_message(e.message),
                        trace_id=_trace_id(span),
                    )
                )
                raise

            span.set_attribute("rbac.success", True)
            span.set_attribute("rbac.service_accounts_count", len(result.service_accounts))
            span.set_attribute("rbac.role_bindings_count", len(result.role_bindings))
            span.set_attribute(
                "rbac.cluster_role_bindings_count", len(result.cluster_role_bindings)
            )
            log_resolution_event(
                ResolutionAuditEvent.create_success(
                    definition=definition.name,
                    bindings=bindings,
                    service_accounts=len(result.service_accounts),
                    role_bindings=len(result.role_bindings),
                    cluster_role_bindings=len(result.cluster_role_bindings),
                    trace_id=_trace_id(span),
                )
            )
            return result

    def _resolve(self, definition: RBACDefinition) -> ResolutionResult:
        acc = _Accumulator(
            definition=definition,
            decorator=ObjectDecorator.for_definition(definition),
            sink=self.event_sink or log_resolution_trace,
        )

        if not definition.rbac_bindings:
            acc.emit("warning", "resolver.no_bindings")
            return acc.build()

        for binding in definition.rbac_bindings:
            self._resolve_binding(definition, binding, acc)

        return acc.build()

    def _resolve_binding(
        self,
        definition: RBACDefinition,
        binding: RBACBinding,
        acc: _Accumulator,
    ) -> None:
        prefix = name_prefix(definition, binding)

        if not binding.subjects:
            raise DefinitionValidationError(
                "No subjects specified",
                definition=definition.name,
                binding=binding.name,
            )
        subjects = tuple(binding.subjects)

        for subject in subjects:
            if subject.kind == "ServiceAccount":
                acc.service_accounts.append(
                    ServiceAccountResource(
                        metadata=acc.decorator.stamp(subject.name, subject.namespace),
                    )
                )

        for crb_spec in binding.cluster_role_bindings:
            acc.cluster_role_bindings.append(
                ClusterRoleBindingResource(
                    metadata=acc.decorator.stamp(f"{prefix}-{crb_spec.cluster_role}"),
                    role_ref=RoleRef(kind="ClusterRole", name=crb_spec.cluster_role),
                    subjects=subjects,
                )
            )

        for rb_spec in binding.role_bindings:
            self._resolve_role_binding(definition, binding, rb_spec, subjects, acc)

        acc.emit(
            "debug",
            "resolver.binding_resolved",
            binding=binding.name,
            subjects=len(subjects),
            cluster_role_bindings=len(binding.cluster_role_bindings),
            role_binding_specs=len(binding.role_bindings),
        )

    def _resolve_role_binding(
        self,
        definition: RBACDefinition,
        binding: RBACBinding,
        spec: RoleBindingSpec,
        subjects: tuple[Subject, ...],
        acc: _Accumulator,
    ) -> None:
        prefix = name_prefix(definition, binding)
        role_ref = _role_ref(definition, binding, spec)

        def _binding_in(namespace: str) -> RoleBindingResource:
            if role_ref.kind == "ClusterRole":
                base_name = role_ref.name
            else:
                # Named after the namespace the binding lands in, never spec.namespace:
                # a selector overriding a literal namespace still yields one unique
                # name per matched namespace.
                base_name = f"{role_ref.name}-{namespace}"
            return RoleBindingResource(
                metadata=acc.decorator.stamp(f"{prefix}-{base_name}", namespace),
                role_ref=role_ref,
                subjects=subjects,
            )

        selector = spec.namespace_selector
        if selector is not None and selector.is_set:
            if spec.namespace is not None:
                acc.emit(
                    "warning",
                    "resolver.namespace_ignored",
                    binding=binding.name,
                    namespace=spec.namespace,
                    reason="namespaceSelector takes precedence over namespace",
                )
            namespaces = self._lookup(selector)
            produced = [_binding_in(ns) for ns in namespaces]
            acc.role_bindings.extend(produced)
            acc.emit(
                "debug",
                "resolver.role_binding_selector_resolved",
                binding=binding.name,
                role_kind=role_ref.kind,
                role=role_ref.name,
                label_selector=format_label_selector(selector),
                namespaces=tuple(namespaces),
            )
        elif spec.namespace is not None:
            acc.role_bindings.append(_binding_in(spec.namespace))
            acc.emit(
                "debug",
                "resolver.role_binding_resolved",
                binding=binding.name,
                role_kind=role_ref.kind,
                role=role_ref.name,
                namespace=spec.namespace,
            )
        else:
            raise DefinitionValidationError(
                "Invalid role binding, namespace or namespace selector required",
                definition=definition.name,
                binding=binding.name,
            )

    def _lookup(self, selector: NamespaceSelector) -> list[str]:
        label_selector = format_label_selector(selector)
        if self.directory is None:
            raise NamespaceLookupError(
                selector=label_selector,
                reason="no namespace directory configured",
            )
        try:
            return list(self.directory.list_namespaces(selector))
        except NamespaceLookupError:
            raise
        except Exception as e:
            raise NamespaceLookupError(
                selector=label_selector,
                reason=sanitize_error_message(str(e) or type(e).__name__),
            ) from e


def _role_ref(
    definition: RBACDefinition,
    binding: RBACBinding,
    spec: RoleBindingSpec,
) -> RoleRef:
    if spec.role is not None and spec.cluster_role is not None:
        raise DefinitionValidationError(
            f"Invalid role binding, role '{spec.role}' and clusterRole "
            f"'{spec.cluster_role}' are mutually exclusive",
            definition=definition.name,
            binding=binding.name,
        )
    if spec.cluster_role is not None:
        return RoleRef(kind="ClusterRole", name=spec.cluster_role)
    if spec.role is not None:
        return RoleRef(kind="Role", name=spec.role)
    raise DefinitionValidationError(
        "Invalid role binding, role or clusterRole required",
        definition=definition.name,
        binding=binding.name,
    )


def resolve_definition(
    definition: RBACDefinition,
    directory: NamespaceDirectory | None = None,
    *,
    event_sink: EventSink | None = None,
) -> ResolutionResult:
    """Resolve ``definition`` with a one-off resolver.

    See ``RBACDefinitionResolver.resolve`` for details.
    """
    return RBACDefinitionResolver(directory=directory, event_sink=event_sink).resolve(definition)


__all__ = [
    "EventSink",
    "RBACDefinitionResolver",
    "has_namespace_selectors",
    "log_resolution_trace",
    "name_prefix",
    "resolve_definition",
]
