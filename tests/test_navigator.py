from __future__ import annotations

from datetime import date

import pytest

from capacity_pilot.domain import NavigationFailure
from capacity_pilot.engine.navigator import (
    STRATEGY_CELL,
    STRATEGY_DATE_INPUT,
    STRATEGY_PAGING,
    CalendarNavigator,
    PagingWalk,
)

from .fakes import FakeElement, make_resolution

DAY = date(2025, 3, 10)
CELL = '[data-date="2025-03-10"]'


def test_paging_walk_goes_forward_then_backward() -> None:
    walk = PagingWalk(bound=2)
    steps = []
    step = walk.next_step()
    while step is not None:
        steps.append(step)
        walk.advance(step)
        step = walk.next_step()

    assert steps == [1, 1, -1, -1, -1, -1]
    assert walk.offset == -2
    assert walk.visited == 4


def test_paging_walk_turn_back_skips_forward_leg() -> None:
    walk = PagingWalk(bound=3)
    walk.turn_back()
    assert walk.next_step() == -1
    walk.advance(-1)
    assert walk.on_fresh_page


async def test_date_input_strategy(portal, selectors, resolution) -> None:
    page = portal.page
    page.add(selectors.date_input, FakeElement(on_click=lambda: portal.add_day("2025-03-10")))

    strategy = await CalendarNavigator(selectors, resolution).goto_date(page, DAY)

    assert strategy == STRATEGY_DATE_INPUT
    assert page.elements[selectors.date_input][0].value == "2025-03-10"


async def test_date_input_without_effect_falls_back_to_paging(portal, selectors, resolution) -> None:
    page = portal.page
    field = page.add(selectors.date_input, FakeElement())
    page.add(selectors.next_page, FakeElement("›", on_click=lambda: portal.add_day("2025-03-10")))

    strategy = await CalendarNavigator(selectors, resolution).goto_date(page, DAY)

    assert strategy == STRATEGY_PAGING
    assert field.value == "2025-03-10"


async def test_cell_strategy_clicks_visible_cell(portal, selectors, resolution) -> None:
    cell = portal.add_day("2025-03-10")

    strategy = await CalendarNavigator(selectors, resolution).goto_date(portal.page, DAY)

    assert strategy == STRATEGY_CELL
    assert cell.clicks == 1


async def test_paging_forward_until_cell_appears(portal, selectors, resolution) -> None:
    page = portal.page

    def turn_page() -> None:
        if next_control.clicks == 3:
            portal.add_day("2025-03-10")

    next_control = page.add(selectors.next_page, FakeElement("›", on_click=turn_page))

    strategy = await CalendarNavigator(selectors, resolution).goto_date(page, DAY)

    assert strategy == STRATEGY_PAGING
    assert next_control.clicks == 3
    assert portal.cells["2025-03-10"].clicks == 1


async def test_paging_backward_when_no_forward_control(portal, selectors, resolution) -> None:
    page = portal.page

    def turn_page() -> None:
        if previous.clicks == 2:
            portal.add_day("2025-03-10")

    previous = page.add(selectors.previous_page, FakeElement("‹", on_click=turn_page))

    strategy = await CalendarNavigator(selectors, resolution).goto_date(page, DAY)

    assert strategy == STRATEGY_PAGING
    assert previous.clicks == 2


async def test_paging_back_past_origin(portal, selectors) -> None:
    page = portal.page

    def turn_back() -> None:
        if previous.clicks == 3:
            portal.add_day("2025-03-10")

    forward = page.add(selectors.next_page, FakeElement("›"))
    previous = page.add(selectors.previous_page, FakeElement("‹", on_click=turn_back))

    navigator = CalendarNavigator(selectors, make_resolution(paging_bound=2))
    strategy = await navigator.goto_date(page, DAY)

    assert strategy == STRATEGY_PAGING
    assert forward.clicks == 2
    assert previous.clicks == 3


async def test_navigation_failure_when_bound_exhausted(portal, selectors) -> None:
    page = portal.page
    forward = page.add(selectors.next_page, FakeElement("›"))
    previous = page.add(selectors.previous_page, FakeElement("‹"))

    navigator = CalendarNavigator(selectors, make_resolution(paging_bound=2))
    with pytest.raises(NavigationFailure):
        await navigator.goto_date(page, DAY)

    assert forward.clicks == 2
    assert previous.clicks == 4


async def test_navigation_failure_without_any_control(portal, selectors, resolution) -> None:
    with pytest.raises(NavigationFailure) as excinfo:
        await CalendarNavigator(selectors, resolution).goto_date(portal.page, DAY)
    assert excinfo.value.kind.value == "NavigationFailure"
