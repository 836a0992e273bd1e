"""In-memory surfaces: the visual anchors screens and effects operate on."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from sequencer.api.errors import MissingAnchorError
from sequencer.api.geometry import Rect

type PropValue = float | str

DEFAULT_PROPS: dict[str, PropValue] = {
    "opacity": 1.0,
    "x": 0.0,
    "y": 0.0,
    "scale": 1.0,
    "rotation": 0.0,
    "left": 0.0,
    "top": 0.0,
    "glow": 0.0,
    "z_index": 0.0,
    "visibility": "visible",
}


@dataclass(slots=True, eq=False)
class Surface:
    """Mutable render-facing element state (classes, style props, text)."""

    id: str
    rect: Rect = field(default_factory=lambda: Rect(0.0, 0.0, 0.0, 0.0))
    classes: set[str] = field(default_factory=set)
    style: dict[str, PropValue] = field(default_factory=dict)
    text: str = ""
    value: str = ""
    disabled: bool = False

    @property
    def active(self) -> bool:
        return "active" in self.classes

    def add_class(self, *names: str) -> None:
        self.classes.update(names)

    def remove_class(self, *names: str) -> None:
        self.classes.difference_update(names)

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def prop(self, name: str) -> PropValue:
        """Return style prop, falling back to the neutral default."""
        if name in self.style:
            return self.style[name]
        return DEFAULT_PROPS.get(name, 0.0)

    def number(self, name: str) -> float:
        value = self.prop(name)
        return float(value) if isinstance(value, (int, float)) else 0.0

    def set_prop(self, name: str, value: PropValue) -> None:
        self.style[name] = value

    def clear_props(self, *names: str) -> None:
        for name in names:
            self.style.pop(name, None)


class SurfaceRegistry:
    """Surface lookup by id, prefix or class, in registration order."""

    def __init__(self, surfaces: Iterable[Surface] = ()) -> None:
        self._surfaces: dict[str, Surface] = {}
        for surface in surfaces:
            self.register(surface)

    def __contains__(self, surface_id: object) -> bool:
        return surface_id in self._surfaces

    def __len__(self) -> int:
        return len(self._surfaces)

    def register(self, surface: Surface) -> Surface:
        """Register surface, replacing any previous surface with the same id."""
        self._surfaces[surface.id] = surface
        return surface

    def create(
        self,
        surface_id: str,
        *,
        rect: Rect | None = None,
        classes: Iterable[str] = (),
    ) -> Surface:
        surface = Surface(id=surface_id, classes=set(classes))
        if rect is not None:
            surface.rect = rect
        return self.register(surface)

    def remove(self, surface_id: str) -> Surface | None:
        return self._surfaces.pop(surface_id, None)

    def get(self, surface_id: str) -> Surface | None:
        return self._surfaces.get(surface_id)

    def require(self, *surface_ids: str) -> tuple[Surface, ...]:
        """Resolve every id or raise MissingAnchorError naming the absent ones."""
        missing = tuple(surface_id for surface_id in surface_ids if surface_id not in self._surfaces)
        if missing:
            raise MissingAnchorError(missing)
        return tuple(self._surfaces[surface_id] for surface_id in surface_ids)

    def select(self, prefix: str) -> tuple[Surface, ...]:
        """Return surfaces whose id starts with prefix."""
        return tuple(surface for surface in self._surfaces.values() if surface.id.startswith(prefix))

    def with_class(self, name: str) -> tuple[Surface, ...]:
        return tuple(surface for surface in self._surfaces.values() if name in surface.classes)

    def ids(self) -> tuple[str, ...]:
        return tuple(self._surfaces)
