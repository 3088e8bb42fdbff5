"""Normalized representation of routine signatures.

The persisted form keys each signature by parameter name, with a trailing
``=`` marking an optional parameter and the literal key ``0`` holding the
return type:

    {0: "OpenSSLCertificate|false", "csr": "string", "options=": "array|null"}

Internally the marker becomes an explicit ``optional`` flag so that base-name
matching never depends on string-suffix handling.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from enum import StrEnum

TypeExpr = str

RETURN_KEY = 0
OPTIONAL_MARKER = "="


@dataclass(frozen=True)
class ParameterKey:
    """Identity of a parameter: its base name and optionality marker."""

    name: str
    optional: bool = False

    @classmethod
    def parse(cls, raw: str) -> ParameterKey:
        """Split a persisted key such as ``"serial_hex="`` into name and marker.

        Raises:
            ValueError: If the key has no base name.
        """
        optional = raw.endswith(OPTIONAL_MARKER)
        name = raw[: -len(OPTIONAL_MARKER)] if optional else raw
        if not name:
            raise ValueError(f"Invalid parameter key: {raw!r}")
        return cls(name=name, optional=optional)

    def __str__(self) -> str:
        return f"{self.name}{OPTIONAL_MARKER}" if self.optional else self.name


@dataclass(frozen=True)
class Parameter:
    """One positional parameter of a signature."""

    key: ParameterKey
    type: TypeExpr

    @property
    def name(self) -> str:
        return self.key.name

    @property
    def optional(self) -> bool:
        return self.key.optional


@dataclass(frozen=True)
class Signature:
    """Full parameter-and-return-type description of one routine.

    Dataclass equality is the signature equality rule: same return type and
    the same base names in the same order, with equal types and markers.
    """

    return_type: TypeExpr
    parameters: tuple[Parameter, ...] = ()

    def __post_init__(self) -> None:
        seen: set[str] = set()
        for param in self.parameters:
            if param.name in seen:
                raise ValueError(f"Duplicate parameter {param.name!r} in signature")
            seen.add(param.name)

    @classmethod
    def from_mapping(cls, mapping: Mapping[int | str, TypeExpr]) -> Signature:
        """Build a Signature from its persisted name -> type mapping.

        The return slot may be keyed by ``0`` or ``"0"`` (JSON object keys are
        always strings). Parameter order follows the mapping's order.

        Raises:
            ValueError: If the return slot is missing or repeated, or a base
                name repeats.
        """
        return_type: TypeExpr | None = None
        parameters: list[Parameter] = []
        for raw_key, type_expr in mapping.items():
            if raw_key == RETURN_KEY or raw_key == str(RETURN_KEY):
                if return_type is not None:
                    raise ValueError("Signature mapping has more than one return type (key 0)")
                return_type = type_expr
                continue
            if not isinstance(raw_key, str):
                raise ValueError(f"Invalid parameter key: {raw_key!r}")
            parameters.append(Parameter(ParameterKey.parse(raw_key), type_expr))
        if return_type is None:
            raise ValueError("Signature mapping has no return type (key 0)")
        return cls(return_type=return_type, parameters=tuple(parameters))

    @classmethod
    def of(cls, return_type: TypeExpr, *params: tuple[str, TypeExpr]) -> Signature:
        """Shorthand: ``Signature.of("int", ("a", "string"), ("b=", "int"))``."""
        return cls(
            return_type=return_type,
            parameters=tuple(Parameter(ParameterKey.parse(k), t) for k, t in params),
        )

    def to_mapping(self) -> dict[int | str, TypeExpr]:
        """Return the persisted mapping form, return type first."""
        result: dict[int | str, TypeExpr] = {RETURN_KEY: self.return_type}
        for param in self.parameters:
            result[str(param.key)] = param.type
        return result

    def parameter(self, name: str) -> Parameter | None:
        """Look up a parameter by base name, ignoring the optionality marker."""
        for param in self.parameters:
            if param.name == name:
                return param
        return None

    @property
    def parameter_names(self) -> tuple[str, ...]:
        return tuple(param.name for param in self.parameters)

    def __str__(self) -> str:
        params = ", ".join(f"{p.type} ${p.key}" for p in self.parameters)
        return f"({params}): {self.return_type}"


SignatureTable = Mapping[str, Signature]


def table_from_mappings(
    raw: Mapping[str, Mapping[int | str, TypeExpr]],
) -> dict[str, Signature]:
    """Build a SignatureTable from persisted routine -> mapping data."""
    return {name: Signature.from_mapping(mapping) for name, mapping in raw.items()}


# =============================================================================
# Parameter-granular comparison
# =============================================================================


class ParameterChangeKind(StrEnum):
    """Kind of a single parameter edit between two signatures."""

    RETURN_TYPE = "return_type"
    ADDED = "added"
    REMOVED = "removed"
    RETYPED = "retyped"
    OPTIONALITY = "optionality"  # marker-only change, e.g. status -> status=
    MOVED = "moved"


@dataclass(frozen=True)
class ParameterChange:
    """One parameter edit. ``name`` is None for the return slot."""

    kind: ParameterChangeKind
    name: str | None
    old: str | None
    new: str | None

    def __str__(self) -> str:
        target = "return" if self.name is None else f"${self.name}"
        return f"{self.kind.value} {target}: {self.old!r} -> {self.new!r}"


def compare_signatures(old: Signature, new: Signature) -> list[ParameterChange]:
    """List the parameter-level edits that turn ``old`` into ``new``.

    Parameters are matched by base name, so a marker change is reported as a
    single OPTIONALITY edit rather than a removal plus an addition. A matched
    parameter whose position among the surviving parameters differs is
    reported as MOVED.

    Returns:
        Edits in a stable order: return type, then by position in ``new``,
        then removals in ``old`` order. Empty iff the signatures are equal.
    """
    changes: list[ParameterChange] = []

    if old.return_type != new.return_type:
        changes.append(
            ParameterChange(
                ParameterChangeKind.RETURN_TYPE, None, old.return_type, new.return_type
            )
        )

    old_names = old.parameter_names
    new_names = new.parameter_names
    shared_old = [name for name in old_names if name in new_names]
    shared_new = [name for name in new_names if name in old_names]

    for index, param in enumerate(new.parameters):
        before = old.parameter(param.name)
        if before is None:
            changes.append(
                ParameterChange(ParameterChangeKind.ADDED, param.name, None, str(param.key))
            )
            continue
        if before.type != param.type:
            changes.append(
                ParameterChange(ParameterChangeKind.RETYPED, param.name, before.type, param.type)
            )
        if before.optional != param.optional:
            changes.append(
                ParameterChange(
                    ParameterChangeKind.OPTIONALITY,
                    param.name,
                    str(before.key),
                    str(param.key),
                )
            )
        if shared_old.index(param.name) != shared_new.index(param.name):
            changes.append(
                ParameterChange(
                    ParameterChangeKind.MOVED,
                    param.name,
                    str(old_names.index(param.name)),
                    str(index),
                )
            )

    for param in old.parameters:
        if param.name not in new_names:
            changes.append(
                ParameterChange(ParameterChangeKind.REMOVED, param.name, str(param.key), None)
            )

    return changes
