"""Change-tracked model of a Cobbler system record.

A TrackedRecord holds the fields of one system and remembers their values at
load time. Fields are updated through typed accessors that either merge new
values into the current ones or replace them. Only the fields that end up
different from their loaded value are pushed back, as a single
``cobbler system edit`` command.
"""

import copy
import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

EDIT_COMMAND_PREFIX = "cobbler system edit"

MERGE = "merge"
REPLACE = "replace"
MODES = (MERGE, REPLACE)


class FieldKind(Enum):
    """Value kinds of the record fields this model knows how to edit."""

    TEXT = "text"
    MAPPING = "mapping"
    LIST = "list"


class RenderFormat(str, Enum):
    """Output formats supported by the field accessors."""

    NATIVE = "native"
    JSON = "json"
    JOINED = "joined"
    STRING = "string"


@dataclass(frozen=True)
class FieldSpec:
    """An editable field: its record key, value kind and edit command flag."""

    name: str
    kind: FieldKind
    flag: str

    @property
    def option(self) -> str:
        """Command line option for this field."""
        return f"--{self.flag}"


FIELDS: Dict[str, FieldSpec] = {
    "comment": FieldSpec("comment", FieldKind.TEXT, "comment"),
    "ks_meta": FieldSpec("ks_meta", FieldKind.MAPPING, "ksmeta"),
    "mgmt_classes": FieldSpec("mgmt_classes", FieldKind.LIST, "mgmt-classes"),
}

# Key under which free text that is not a JSON object is kept.
TEXT_KEY = "text"

# Cobbler placeholders for "no value" and "inherit from profile".
EMPTY_MARKERS = ("~", "<<inherit>>")

_NOT_JSON = object()


def empty_value(kind: FieldKind) -> Any:
    """Return the empty value for a field kind."""
    return [] if kind is FieldKind.LIST else {}


def _parse_pairs(text: str) -> Dict[str, str]:
    """Parse Cobbler's ``key=value key2=value2`` notation."""
    pairs: Dict[str, str] = {}
    for token in text.split():
        key, _, value = token.partition("=")
        if key:
            pairs[key] = value
    return pairs


def coerce_value(kind: FieldKind, value: Any) -> Any:
    """Convert accessor input into a structured value of ``kind``.

    Structured input is copied. Text is decoded as JSON when possible and
    otherwise read in Cobbler's textual notation. JSON of the wrong shape and
    any other input kind are empty.
    """
    if isinstance(value, str):
        text = value.strip()
        if not text or text in EMPTY_MARKERS:
            return empty_value(kind)
        try:
            decoded = json.loads(text)
        except ValueError:
            decoded = _NOT_JSON
        if kind is FieldKind.LIST:
            if isinstance(decoded, list):
                return [str(item) for item in decoded]
            return text.split()
        if isinstance(decoded, dict):
            return decoded
        if kind is FieldKind.TEXT:
            return {TEXT_KEY: value}
        if decoded is not _NOT_JSON:
            return {}
        return _parse_pairs(text)

    if kind is FieldKind.LIST:
        if isinstance(value, (list, tuple)):
            return [str(item) for item in value]
        return []
    if isinstance(value, dict):
        return dict(value)
    return {}


def integrate(kind: FieldKind, before: Any, new_value: Any, mode: str = MERGE) -> Any:
    """Combine ``new_value`` into ``before`` according to ``mode``.

    Args:
        kind: Kind of the field being updated
        before: Current structured value
        new_value: Structured update value
        mode: ``merge`` or ``replace``

    Returns:
        The new structured value. ``before`` is not modified.

    Raises:
        ValueError: If ``mode`` is not supported
    """
    if mode not in MODES:
        raise ValueError(f"Invalid mode '{mode}'. Use one of: {', '.join(MODES)}")

    if kind is FieldKind.LIST:
        if mode == REPLACE:
            # An empty replacement usually means the option was not given.
            return list(new_value) if new_value else list(before)
        merged = list(before)
        for item in new_value:
            if item not in merged:
                merged.append(item)
        return merged

    if mode == REPLACE:
        return dict(new_value)
    merged_map = dict(before)
    merged_map.update(new_value)
    return merged_map


def render(spec: FieldSpec, value: Any, fmt: str = RenderFormat.NATIVE) -> Any:
    """Render a structured field value in ``fmt``."""
    fmt = RenderFormat(fmt)
    if fmt is RenderFormat.NATIVE:
        return copy.deepcopy(value)
    if fmt is RenderFormat.JSON:
        return json.dumps(value)
    if fmt is RenderFormat.STRING and spec.kind is FieldKind.TEXT:
        return json.dumps(value)
    if spec.kind is FieldKind.LIST:
        return " ".join(str(item) for item in value)
    return " ".join(f"{key}={val}" for key, val in value.items())


def shell_quote(value: str) -> str:
    """Wrap ``value`` in single quotes, escaping embedded single quotes."""
    return "'" + value.replace("'", "'\"'\"'") + "'"


class TrackedRecord:
    """A Cobbler system record that tracks locally changed fields."""

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the record from a raw mapping (empty for a new system)."""
        self._record: Dict[str, Any] = {}
        self._baseline: Dict[str, Any] = {}
        # Insertion-ordered so edit commands are deterministic.
        self._changes: Dict[str, None] = {}
        self.load(initial or {})

    @classmethod
    def from_mapping(cls, raw: Dict[str, Any]) -> "TrackedRecord":
        """Build a record from a mapping returned by ``get_system``."""
        return cls(raw)

    @classmethod
    def from_json(cls, text: str = "{}") -> "TrackedRecord":
        """Build a record from its JSON representation."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("A system record must be a JSON object.")
        return cls(data)

    def load(self, raw: Dict[str, Any]) -> None:
        """Replace the whole record with ``raw`` and start a new baseline."""
        record = copy.deepcopy(dict(raw))
        for name, spec in FIELDS.items():
            record[name] = coerce_value(spec.kind, record.get(name))
        self._record = record
        self.reset()

    def reset(self) -> None:
        """Make the current values the new baseline and clear the change set."""
        self._baseline = copy.deepcopy(self._record)
        self._changes = {}

    @property
    def name(self) -> Optional[str]:
        """Name of the system, if known."""
        return self._record.get("name")

    @property
    def changes(self) -> Tuple[str, ...]:
        """Names of the fields changed since the last reset, in change order."""
        return tuple(self._changes)

    @property
    def changed(self) -> bool:
        """Whether any field differs from its value at the last reset."""
        return bool(self._changes)

    def field(
        self,
        name: str,
        new_value: Any = None,
        mode: str = MERGE,
        fmt: str = RenderFormat.NATIVE,
    ) -> Any:
        """Update a known field and return its value rendered in ``fmt``.

        Args:
            name: Field name, one of ``FIELDS``
            new_value: Structured value or JSON/Cobbler text; None leaves the field as is
            mode: ``merge`` to combine with the current value, ``replace`` to substitute it
            fmt: One of ``native``, ``json``, ``joined`` or ``string``

        Returns:
            The field value after the update, rendered in ``fmt``

        Raises:
            KeyError: If ``name`` is not a known field
            ValueError: If ``mode`` or ``fmt`` is not supported
        """
        spec = FIELDS[name]
        fmt = RenderFormat(fmt)
        before = self._record.get(name, empty_value(spec.kind))
        after = integrate(spec.kind, before, coerce_value(spec.kind, new_value), mode)
        self._record[name] = after
        if after != self._baseline.get(name, empty_value(spec.kind)):
            self._changes[name] = None
        else:
            self._changes.pop(name, None)
        return render(spec, after, fmt)

    def comment(
        self, new_value: Any = None, mode: str = MERGE, fmt: str = RenderFormat.NATIVE
    ) -> Any:
        """Read or update the comment field."""
        return self.field("comment", new_value, mode, fmt)

    def ks_meta(
        self, new_value: Any = None, mode: str = MERGE, fmt: str = RenderFormat.NATIVE
    ) -> Any:
        """Read or update the kickstart metadata field."""
        return self.field("ks_meta", new_value, mode, fmt)

    def mgmt_classes(
        self, new_value: Any = None, mode: str = MERGE, fmt: str = RenderFormat.NATIVE
    ) -> Any:
        """Read or update the management classes field."""
        return self.field("mgmt_classes", new_value, mode, fmt)

    def emit_edit(self, prefix: str = EDIT_COMMAND_PREFIX) -> str:
        """Return a ``cobbler system edit`` command for the changed fields only."""
        parts: List[str] = [prefix, "--name", shell_quote(self.name or "")]
        for name in self._changes:
            spec = FIELDS[name]
            parts.append(spec.option)
            parts.append(shell_quote(render(spec, self._record[name], RenderFormat.STRING)))
        return " ".join(parts)

    def to_dict(self) -> Dict[str, Any]:
        """Return a copy of the record fields."""
        return copy.deepcopy(self._record)

    def to_json(self) -> str:
        """Return the record as JSON text."""
        return json.dumps(self._record)
