"""Layer stack controller.

:class:`LayerStackController` owns the ordered list of layers, each
layer's selection/filter/config and its undo history, and re-renders the
whole stack onto the attached render surface.  UI code calls the
operations below and reads :attr:`LayerStackController.state` back; it
never touches pixels or histories itself.

All operations are total: an out-of-range layer index, a missing surface
or an empty selection degrade to a no-op or a fallback instead of raising.
Every operation returns the (possibly unchanged) :class:`StackState`.
"""

from __future__ import annotations

import logging
import random
from dataclasses import replace
from typing import Any, Iterable, Mapping, Optional, Sequence

from imaging.geometry import Point, bounding_box, capture_points

from .. import config
from ..filters import apply_filter
from ..history import CommandHistory
from ..models import Layer, Selection, StackState, is_filter_kind, random_color
from ..surface import RenderSurface

LOGGER = logging.getLogger(__name__)

UP = "up"
DOWN = "down"

_LAYER_FIELDS = {"surface", "color"}
_SELECTION_FIELDS = {"start", "points", "area", "filter", "config"}


class LayerStackController:
    """Mutate the layer stack and composite it onto a render surface."""

    def __init__(
        self,
        state: Optional[StackState] = None,
        *,
        rng: Optional[random.Random] = None,
        history_limit: Optional[int] = config.HISTORY_LIMIT,
    ) -> None:
        if history_limit is not None and history_limit <= 0:
            raise ValueError("history_limit must be greater than zero")
        self._state = state or StackState()
        self._rng = rng or random.Random()
        self._history_limit = history_limit

    @property
    def state(self) -> StackState:
        return self._state

    @property
    def current_layer(self) -> Optional[Layer]:
        return self._state.current_layer

    # ------------------------------------------------------------------
    # Image / surface
    # ------------------------------------------------------------------
    def load_image(self, surface: RenderSurface) -> StackState:
        """Attach ``surface`` and capture its pixels as the pristine baseline.

        Layers from a previous image are discarded.
        """

        region = surface.get_region(0, 0, surface.width, surface.height)
        baseline = capture_points(region.data, region.width, region.height)
        self._state = StackState(surface=surface, original_area_data=tuple(baseline))
        LOGGER.info("Loaded %sx%s image", surface.width, surface.height)
        return self._state

    def set_original_area_data(self, points: Iterable[Point]) -> StackState:
        """Install an externally captured baseline."""

        self._state.original_area_data = tuple(points)
        return self._state

    def attach_surface(self, surface: Optional[RenderSurface]) -> StackState:
        self._state.surface = surface
        return self._state

    def clear_layers(self) -> StackState:
        """Return to the initial state, detaching the surface."""

        self._state = StackState()
        return self._state

    # ------------------------------------------------------------------
    # Layer list
    # ------------------------------------------------------------------
    def _new_layer(self, selection: Optional[Selection] = None) -> Layer:
        selection = selection or Selection()
        return Layer(
            selection=selection,
            color=random_color(self._rng),
            commands=CommandHistory(present=selection, limit=self._history_limit),
        )

    def create_layer(self) -> StackState:
        """Append an empty layer (no filter, no selection) and select it."""

        self._state.layers.append(self._new_layer())
        self._state.selected_layer_idx = len(self._state.layers) - 1
        return self._state

    def select_layer(self, idx: int) -> StackState:
        if not self._state.in_bounds(idx):
            LOGGER.debug("select_layer ignored: index %s out of range", idx)
            return self._state
        self._state.selected_layer_idx = idx
        return self._state

    def delete_layer(self, idx: int) -> StackState:
        """Remove layer ``idx``; the selection lands on the layer taking its slot."""

        if not self._state.in_bounds(idx):
            LOGGER.debug("delete_layer ignored: index %s out of range", idx)
            return self._state

        layers = self._state.layers
        del layers[idx]
        if not layers:
            selected = -1
        elif idx >= len(layers):
            selected = len(layers) - 1
        else:
            selected = idx
        self._state.selected_layer_idx = selected
        return self._state

    def move_layer(self, idx: int, direction: str) -> StackState:
        """Swap layer ``idx`` with its neighbour ``"up"`` (towards 0) or ``"down"``.

        The two layers also trade render-surface handles so each on-screen
        preview stays attached to its stack position.
        """

        if direction not in (UP, DOWN):
            LOGGER.warning("Unknown move direction: %s", direction)
            return self._state
        target = idx - 1 if direction == UP else idx + 1
        if not (self._state.in_bounds(idx) and self._state.in_bounds(target)):
            return self._state

        layers = self._state.layers
        moved, displaced = layers[idx], layers[target]
        layers[target] = replace(moved, surface=displaced.surface)
        layers[idx] = replace(displaced, surface=moved.surface)

        selected = self._state.selected_layer_idx
        if selected == idx:
            self._state.selected_layer_idx = target
        elif selected == target:
            self._state.selected_layer_idx = idx
        return self._state

    def duplicate_layer(self, idx: int) -> StackState:
        """Append a copy of layer ``idx`` with a fresh history and select it."""

        if not self._state.in_bounds(idx):
            return self._state
        source = self._state.layers[idx].selection
        # Selections are immutable; rebuilding the tuples still gives the copy
        # its own containers.
        copy = replace(source, points=tuple(source.points), area=tuple(source.area))
        self._state.layers.append(self._new_layer(copy))
        self._state.selected_layer_idx = len(self._state.layers) - 1
        return self._state

    def update_layer(self, idx: int, **fields: Any) -> StackState:
        """Update non-selection layer fields (``surface``, ``color``)."""

        if not self._state.in_bounds(idx):
            return self._state
        unknown = set(fields) - _LAYER_FIELDS
        if unknown:
            LOGGER.warning("Ignoring unsupported layer field(s): %s", ", ".join(sorted(unknown)))
        accepted = {k: v for k, v in fields.items() if k in _LAYER_FIELDS}
        if accepted:
            self._state.layers[idx] = replace(self._state.layers[idx], **accepted)
        return self._state

    # ------------------------------------------------------------------
    # Selection and history
    # ------------------------------------------------------------------
    def set_points(self, start: Point, points: Sequence[Point]) -> StackState:
        """Store the traced path on the selected layer, recording history."""

        return self.update_selection(
            self._state.selected_layer_idx,
            {"start": start, "points": points},
        )

    def update_selection(
        self,
        idx: int,
        partial: Optional[Mapping[str, Any]] = None,
        reset_history_baseline: bool = False,
        **changes: Any,
    ) -> StackState:
        """Merge ``partial`` into layer ``idx``'s selection.

        Switching ``filter`` resets ``config`` to the new filter's defaults.
        With ``reset_history_baseline`` the history's present is overwritten
        without an undo entry (used right after a selection is first drawn);
        otherwise the new selection is recorded.
        """

        if not self._state.in_bounds(idx):
            LOGGER.debug("update_selection ignored: index %s out of range", idx)
            return self._state
        merged = dict(partial or {})
        merged.update(changes)
        unknown = set(merged) - _SELECTION_FIELDS
        if unknown:
            LOGGER.warning("Ignoring unsupported selection field(s): %s", ", ".join(sorted(unknown)))
            merged = {k: v for k, v in merged.items() if k in _SELECTION_FIELDS}
        if "filter" in merged and not is_filter_kind(merged["filter"]):
            LOGGER.warning("Unknown filter type: %s", merged.pop("filter"))

        layer = self._state.layers[idx]
        selection = layer.selection.merge(**merged)
        if reset_history_baseline:
            commands = layer.commands.seed(selection)
        else:
            commands = layer.commands.set(selection)
        self._state.layers[idx] = replace(layer, selection=selection, commands=commands)
        return self._state

    def _step_history(self, idx: Optional[int], forward: bool) -> StackState:
        idx = self._state.selected_layer_idx if idx is None else idx
        if not self._state.in_bounds(idx):
            return self._state
        layer = self._state.layers[idx]
        commands = layer.commands
        if forward and not commands.can_redo():
            LOGGER.debug("Nothing to redo on layer %s", idx)
            return self._state
        if not forward and not commands.can_undo():
            LOGGER.debug("Nothing to undo on layer %s", idx)
            return self._state
        commands = commands.redo() if forward else commands.undo()
        self._state.layers[idx] = replace(layer, selection=commands.current(), commands=commands)
        return self._state

    def undo(self, idx: Optional[int] = None) -> StackState:
        """Restore the previous selection of layer ``idx`` (default: selected)."""

        return self._step_history(idx, forward=False)

    def redo(self, idx: Optional[int] = None) -> StackState:
        return self._step_history(idx, forward=True)

    # ------------------------------------------------------------------
    # Compositing
    # ------------------------------------------------------------------
    def reset_canvas(self) -> StackState:
        """Restore the baseline pixels, discarding every drawn effect."""

        surface = self._state.surface
        baseline = self._state.original_area_data
        if surface is None or not baseline:
            return self._state

        box = bounding_box(baseline)
        x, y, width, height = box.as_rect()
        region = surface.get_region(x, y, width, height)
        data = region.data
        for point in baseline:
            if point.data is None:
                continue
            index = box.local_index(point.x, point.y)
            data[index:index + 4] = bytes(point.data)
        surface.put_region(region, x, y)
        return self._state

    def generate_result(self) -> StackState:
        """Apply every layer's filter, first layer first.

        A layer whose area has no colour-annotated points falls back to the
        whole original image.
        """

        surface = self._state.surface
        if surface is None:
            return self._state

        for idx, layer in enumerate(self._state.layers):
            selection = layer.selection
            points = selection.colored_area() or list(self._state.original_area_data)
            box = bounding_box(points)
            if box.is_empty:
                LOGGER.debug("Layer %s skipped: nothing to render", idx)
                continue
            x, y, width, height = box.as_rect()
            region = surface.get_region(x, y, width, height)
            if apply_filter(selection.filter, region.data, points, box, selection.config, self._rng):
                surface.put_region(region, x, y)
        return self._state

    def refresh(self) -> StackState:
        """Reset the canvas and re-render the whole stack."""

        self.reset_canvas()
        return self.generate_result()


__all__ = ["LayerStackController", "UP", "DOWN"]
