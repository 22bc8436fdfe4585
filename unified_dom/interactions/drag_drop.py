# ================================================================================
# Drag and Drop Interactions
# ================================================================================
#
# Drag gestures that work against both substrates.
#
# Key Features:
#   - Local: canonical dragstart -> dragover -> drop -> dragend sequence sharing
#     one DataTransfer payload
#   - Remote: Playwright's native drag with source/target sub-positions,
#     force and timeout options
#   - Coordinate drags (mouse down/move/up)
#   - Allure step integration
#
# ================================================================================

from dataclasses import dataclass
from typing import Optional

import allure
from loguru import logger

from ..core.assertions import UnifiedDOMAssertions
from ..core.contract import Position, Substrate
from ..errors import UnsupportedOperationError
from ..document import DataTransfer, DOMEvent


@dataclass
class DragDropOptions:
    """
    Options for drag and drop operations.

    Attributes:
        timeout: Seconds allowed for the gesture (remote only)
        force: Skip actionability checks (remote only)
        no_wait_after: Do not wait for navigations triggered by the drop
        source_position: Grab point relative to the source's top-left corner
        target_position: Drop point relative to the target's top-left corner
    """
    timeout: Optional[float] = None
    force: bool = False
    no_wait_after: bool = False
    source_position: Optional[Position] = None
    target_position: Optional[Position] = None


def _point(position: Optional[Position]) -> Optional[dict]:
    if position is None:
        return None
    return {"x": position.x, "y": position.y}


class DragDropInteractions:
    """
    Drag gestures starting at ``source``.

    Example:
        dnd = DragDropInteractions(card)
        await dnd.drag_to(column)
        await dnd.drag_to_coordinates(300, 120)
    """

    def __init__(self, source: UnifiedDOMAssertions):
        self.source = source

    @property
    def environment(self) -> Substrate:
        return self.source.environment

    async def drag_to(self, target: UnifiedDOMAssertions, options: Optional[DragDropOptions] = None) -> None:
        """
        Drag the source element onto ``target``.

        Raises:
            ValueError: If source and target live on different substrates
            UnsupportedOperationError: For pointer sub-positions on Local
        """
        options = options or DragDropOptions()
        if target.environment is not self.environment:
            raise ValueError("Drag source and target must share a substrate")

        with allure.step(f"Drag {self.source.element!r} -> {target.element!r}"):
            if self.environment is Substrate.REMOTE:
                await self._remote_drag_to(target, options)
            else:
                self._local_drag_to(target, options)

    async def drag_to_coordinates(self, x: float, y: float, options: Optional[DragDropOptions] = None) -> None:
        """Drag the source element to viewport coordinates ``(x, y)``."""
        options = options or DragDropOptions()
        with allure.step(f"Drag {self.source.element!r} -> ({x}, {y})"):
            if self.environment is Substrate.REMOTE:
                await self._remote_drag_to_coordinates(x, y, options)
            else:
                self._local_drag_to_coordinates(x, y, options)

    # =========================================================================
    # Remote
    # =========================================================================

    async def _remote_drag_to(self, target: UnifiedDOMAssertions, options: DragDropOptions) -> None:
        source_locator = self.source.element.locator
        target_locator = target.element.locator
        await source_locator.drag_to(
            target_locator,
            force=options.force,
            no_wait_after=options.no_wait_after,
            timeout=options.timeout * 1000 if options.timeout is not None else None,
            source_position=_point(options.source_position),
            target_position=_point(options.target_position),
        )

    async def _remote_drag_to_coordinates(self, x: float, y: float, options: DragDropOptions) -> None:
        locator = self.source.element.locator
        await locator.hover(
            position=_point(options.source_position),
            force=options.force,
            timeout=options.timeout * 1000 if options.timeout is not None else None,
        )
        mouse = locator.page.mouse
        await mouse.down()
        await mouse.move(x, y)
        await mouse.up()

    # =========================================================================
    # Local
    # =========================================================================

    def _require_no_positions(self, options: DragDropOptions, operation: str) -> None:
        if options.source_position is not None or options.target_position is not None:
            raise UnsupportedOperationError(f"{operation} with pointer positions", Substrate.LOCAL)

    def _local_drag_to(self, target: UnifiedDOMAssertions, options: DragDropOptions) -> None:
        self._require_no_positions(options, "drag_to")
        document = self.source.element.document
        source_node = self.source.element.node
        target_node = target.element.node

        transfer = DataTransfer()
        document.dispatch_event(source_node, DOMEvent("dragstart", data_transfer=transfer))
        document.dispatch_event(target_node, DOMEvent("dragover", data_transfer=transfer))
        document.dispatch_event(target_node, DOMEvent("drop", data_transfer=transfer))
        document.dispatch_event(source_node, DOMEvent("dragend", data_transfer=transfer))
        logger.debug(f"Simulated drag {self.source.element!r} -> {target.element!r}")

    def _local_drag_to_coordinates(self, x: float, y: float, options: DragDropOptions) -> None:
        self._require_no_positions(options, "drag_to_coordinates")
        document = self.source.element.document
        node = self.source.element.node

        document.dispatch_event(node, DOMEvent("mousedown", client_x=0, client_y=0))
        document.dispatch_event(node, DOMEvent("mousemove", client_x=x, client_y=y))
        document.dispatch_event(node, DOMEvent("mouseup", client_x=x, client_y=y))


def create_drag_drop_interactions(source: UnifiedDOMAssertions) -> DragDropInteractions:
    return DragDropInteractions(source)


async def simulate_drag_and_drop(draggable: UnifiedDOMAssertions, drop_zone: UnifiedDOMAssertions) -> None:
    """Drag ``draggable`` onto ``drop_zone`` with default options."""
    await DragDropInteractions(draggable).drag_to(drop_zone)
