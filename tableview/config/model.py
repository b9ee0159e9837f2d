from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional

from tableview.core.columns import ColumnDefinition, ColumnKey, SearchCriteria, SortType
from tableview.core.exceptions import ConfigError
from tableview.engine.filtering import NORMALISERS
from tableview.engine.pagination import SHOW_ALL
from tableview.engine.sorting import BlankPolicy, SortKey


@dataclass
class ColumnConfig:
    """
    Parsed config entry for a single column.

    `render` and `comparator` are names, resolved against the registries
    passed to `to_definition`, since callables cannot live in JSON.
    """
    data: Optional[ColumnKey] = None
    title: str = ""
    visible: bool = True
    searchable: bool = True
    sortable: bool = True
    use_rendered: bool = False
    sort_type: SortType = SortType.AUTO
    search: SearchCriteria = field(default_factory=SearchCriteria)
    default_content: Any = ""
    render: Optional[str] = None
    comparator: Optional[str] = None

    @classmethod
    def from_raw(cls, raw: Any, index: int) -> ColumnConfig:
        if isinstance(raw, (str, int)) and not isinstance(raw, bool):
            return cls(data=raw)
        if not isinstance(raw, Mapping):
            raise ConfigError(f"Column {index}: expected a key or an object, got {type(raw).__name__}")
        try:
            sort_type = SortType(raw.get("sort_type", "auto"))
        except ValueError:
            raise ConfigError(f"Column {index}: unknown sort_type {raw.get('sort_type')!r}") from None
        return cls(
            data=raw.get("data"),
            title=raw.get("title", ""),
            visible=bool(raw.get("visible", True)),
            searchable=bool(raw.get("searchable", True)),
            sortable=bool(raw.get("sortable", True)),
            use_rendered=bool(raw.get("use_rendered", False)),
            sort_type=sort_type,
            search=SearchCriteria.from_dict(raw.get("search", {})),
            default_content=raw.get("default_content", ""),
            render=raw.get("render"),
            comparator=raw.get("comparator"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "data": self.data,
            "title": self.title,
            "visible": self.visible,
            "searchable": self.searchable,
            "sortable": self.sortable,
            "use_rendered": self.use_rendered,
            "sort_type": self.sort_type.value,
            "search": self.search.to_dict(),
            "default_content": self.default_content,
            "render": self.render,
            "comparator": self.comparator,
        }

    def to_definition(
        self,
        index: int,
        renderers: Optional[Mapping[str, Callable[..., str]]] = None,
        comparators: Optional[Mapping[str, Callable[[Any, Any], int]]] = None,
    ) -> ColumnDefinition:
        render = _lookup(renderers, self.render, "renderer", index)
        comparator = _lookup(comparators, self.comparator, "comparator", index)
        return ColumnDefinition(
            index=index,
            data=self.data,
            title=self.title,
            visible=self.visible,
            render=render,
            use_rendered=self.use_rendered,
            searchable=self.searchable,
            sortable=self.sortable,
            search=SearchCriteria(self.search.term, self.search.regex, self.search.smart),
            sort_type=self.sort_type,
            comparator=comparator,
            default_content=self.default_content,
        )


def _lookup(registry: Optional[Mapping[str, Any]], name: Optional[str], kind: str, index: int) -> Any:
    if name is None:
        return None
    if registry is None or name not in registry:
        raise ConfigError(f"Column {index}: {kind} '{name}' is not registered")
    return registry[name]


def _parse_sort(raw: Any, what: str) -> List[SortKey]:
    try:
        return [SortKey.coerce(item) for item in raw or []]
    except (TypeError, ValueError) as err:
        raise ConfigError(f"Invalid {what}: {raw!r}") from err


@dataclass
class TableConfig:
    """
    Table-level configuration.

    - columns: column configs, in column order
    - page_length: rows per page, -1 shows every row
    - search: initial global search
    - sort: initial user sort keys
    - sort_fixed_pre / sort_fixed_post: keys always applied before / after the user keys
    - blank_policy: placement of blank numeric/date values
    - normaliser: name of the text normalisation policy ("default", "case", "exact")
    """
    columns: List[ColumnConfig] = field(default_factory=list)
    page_length: int = 10
    search: SearchCriteria = field(default_factory=SearchCriteria)
    sort: List[SortKey] = field(default_factory=list)
    sort_fixed_pre: List[SortKey] = field(default_factory=list)
    sort_fixed_post: List[SortKey] = field(default_factory=list)
    blank_policy: BlankPolicy = BlankPolicy.LOWEST
    normaliser: str = "default"

    def __post_init__(self) -> None:
        if self.page_length == 0 or self.page_length < SHOW_ALL:
            raise ConfigError(f"page_length must be positive or {SHOW_ALL}, got {self.page_length}")
        if self.normaliser not in NORMALISERS:
            raise ConfigError(f"Unknown normaliser '{self.normaliser}'")

    @classmethod
    def from_dict(cls, raw: Mapping[str, Any]) -> TableConfig:
        if not isinstance(raw, Mapping):
            raise ConfigError(f"Table config must be an object, got {type(raw).__name__}")
        try:
            blank_policy = BlankPolicy(raw.get("blank_policy", "lowest"))
        except ValueError:
            raise ConfigError(f"Unknown blank_policy {raw.get('blank_policy')!r}") from None
        try:
            page_length = int(raw.get("page_length", 10))
        except (TypeError, ValueError):
            raise ConfigError(f"Invalid page_length {raw.get('page_length')!r}") from None
        return cls(
            columns=[ColumnConfig.from_raw(c, i) for i, c in enumerate(raw.get("columns", []))],
            page_length=page_length,
            search=SearchCriteria.from_dict(raw.get("search", {})),
            sort=_parse_sort(raw.get("sort"), "sort"),
            sort_fixed_pre=_parse_sort(raw.get("sort_fixed_pre"), "sort_fixed_pre"),
            sort_fixed_post=_parse_sort(raw.get("sort_fixed_post"), "sort_fixed_post"),
            blank_policy=blank_policy,
            normaliser=str(raw.get("normaliser", "default")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "columns": [c.to_dict() for c in self.columns],
            "page_length": self.page_length,
            "search": self.search.to_dict(),
            "sort": [list(k.as_tuple()) for k in self.sort],
            "sort_fixed_pre": [list(k.as_tuple()) for k in self.sort_fixed_pre],
            "sort_fixed_post": [list(k.as_tuple()) for k in self.sort_fixed_post],
            "blank_policy": self.blank_policy.value,
            "normaliser": self.normaliser,
        }

    def build_columns(
        self,
        renderers: Optional[Mapping[str, Callable[..., str]]] = None,
        comparators: Optional[Mapping[str, Callable[[Any, Any], int]]] = None,
    ) -> List[ColumnDefinition]:
        return [c.to_definition(i, renderers, comparators) for i, c in enumerate(self.columns)]
