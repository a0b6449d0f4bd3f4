"""Single-record persistence primitive.

A record is a dataclass whose public fields are its attributes. Validation
rules are a pydantic model attached as ``Rules``; saving, deleting and querying
go through the process-wide ``RecordStore`` installed with ``configure_store``.

Records may be materialised by an ORM without running ``__init__``, so the
per-instance bookkeeping (errors, relation state) lives in lazily created
``__dict__`` entries rather than in dataclass fields.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, fields
from logging import getLogger
from typing import TYPE_CHECKING, ClassVar

from pydantic import BaseModel, ValidationError

from relsync.domain.errors import EmptyPreparedInputError, StoreNotConfiguredError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from relsync.domain.ports.persistence import RecordStore

log = getLogger(__name__)

# errors not tied to a single attribute (storage failures, model-level rules)
RECORD_ERROR_KEY = "__record__"

type AttributeMap = Mapping[str, object]
type ErrorMap = dict[str, list[str]]


@dataclass(slots=True)
class _StoreState:
    store: RecordStore | None = None


_STATE = _StoreState()


def configure_store(store: RecordStore | None) -> None:
    """Install (or clear, with ``None``) the store used by every record."""

    _STATE.store = store


def current_store() -> RecordStore:
    if _STATE.store is None:
        raise StoreNotConfiguredError(
            "No record store configured. Call relsync.domain.model.configure_store() "
            "or relsync.adapters.sqlalchemy.startup() first."
        )
    return _STATE.store


def is_blank_identity(value: object) -> bool:
    return value is None or value == ""


@dataclass(eq=False, kw_only=True)
class BaseRecord:
    """A record that can load, validate, save and delete itself.

    Subclasses must be dataclasses constructible without arguments.
    """

    id: int | None = None

    PRIMARY_KEY: ClassVar[str] = "id"
    # input scope used by ``load``; defaults to the class name
    SCOPE: ClassVar[str | None] = None
    Rules: ClassVar[type[BaseModel] | None] = None

    @classmethod
    def attribute_names(cls) -> tuple[str, ...]:
        return tuple(f.name for f in fields(cls) if not f.name.startswith("_"))

    @classmethod
    def safe_attribute_names(cls) -> tuple[str, ...]:
        """Attributes that may be mass-assigned from external input."""
        return tuple(name for name in cls.attribute_names() if name != cls.PRIMARY_KEY)

    @classmethod
    def scope_name(cls) -> str:
        return cls.SCOPE if cls.SCOPE is not None else cls.__name__

    @property
    def primary_key(self) -> object:
        return getattr(self, self.PRIMARY_KEY)

    @property
    def is_new(self) -> bool:
        return is_blank_identity(self.primary_key)

    @property
    def attributes(self) -> dict[str, object]:
        return {name: getattr(self, name) for name in self.attribute_names()}

    def set_attributes(self, values: AttributeMap, *, safe_only: bool = True) -> None:
        allowed = self.safe_attribute_names() if safe_only else self.attribute_names()
        for name, value in values.items():
            if name not in allowed:
                log.debug("Ignoring attribute %r for %s", name, type(self).__name__)
                continue
            setattr(self, name, value)

    # Errors ------------------------------------------------------------------

    def _error_store(self) -> ErrorMap:
        return vars(self).setdefault("_record_errors", {})

    @property
    def errors(self) -> ErrorMap:
        return {name: list(messages) for name, messages in self._error_store().items()}

    def has_errors(self, attribute: str | None = None) -> bool:
        store = self._error_store()
        if attribute is None:
            return any(store.values())
        return bool(store.get(attribute))

    def add_error(self, attribute: str, message: str) -> None:
        self._error_store().setdefault(attribute, []).append(message)

    def clear_errors(self, attribute: str | None = None) -> None:
        if attribute is None:
            self._error_store().clear()
        else:
            self._error_store().pop(attribute, None)

    # Input -------------------------------------------------------------------

    def prepare(self, data: AttributeMap) -> AttributeMap | None:
        """Hook to reshape raw input before it is assigned; return it unchanged by default."""
        return data

    def load(self, data: AttributeMap, scope: str | None = None) -> bool:
        """Assign attributes from ``data[scope]`` (or ``data`` itself when scope is ``""``).

        Returns ``False`` when there is nothing to load for this record.
        """

        effective_scope = self.scope_name() if scope is None else scope
        raw = data if effective_scope == "" else data.get(effective_scope)
        if not raw or not isinstance(raw, Mapping):
            return False

        formatted = self.prepare(raw)  # pyright: ignore[reportUnknownArgumentType]
        if not formatted:
            raise EmptyPreparedInputError(
                f"{type(self).__name__}.prepare() returned no data for non-empty input"
            )
        self.set_attributes(formatted)
        return True

    # Persistence -------------------------------------------------------------

    def validate(
        self,
        attribute_names: Sequence[str] | None = None,
        *,
        clear_errors: bool = True,
    ) -> bool:
        if clear_errors:
            self.clear_errors()
        selected = set(attribute_names) if attribute_names is not None else None

        rules = self.Rules
        if rules is not None:
            try:
                rules.model_validate(self.attributes)
            except ValidationError as exc:
                for error in exc.errors():
                    location = error["loc"]
                    attribute = str(location[0]) if location else RECORD_ERROR_KEY
                    # a subset narrows attribute errors only; model-level errors always count
                    if (
                        selected is not None
                        and attribute != RECORD_ERROR_KEY
                        and attribute not in selected
                    ):
                        continue
                    self.add_error(attribute, error["msg"])

        return not self.has_errors()

    def save(
        self,
        *,
        run_validation: bool = True,
        attribute_names: Sequence[str] | None = None,
    ) -> bool:
        if run_validation and not self.validate(attribute_names):
            log.debug("%s not saved due to validation errors", type(self).__name__)
            return False
        return current_store().persist(self, attribute_names)

    def before_delete(self) -> bool:
        """Hook run by ``delete``; returning ``False`` vetoes the removal."""
        return True

    def delete(self) -> bool:
        if not self.before_delete():
            return False
        return current_store().remove(self)
