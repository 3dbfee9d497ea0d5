"""Tagged action variants describing the user interaction behind a render cycle."""

from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict


class _Action(BaseModel):
    model_config = ConfigDict(frozen=True)


class SortAction(_Action):
    """Header click on a sortable column."""

    kind: Literal["sort"] = "sort"
    field: str


class ClearAction(_Action):
    """Clear button next to a filter control."""

    kind: Literal["clear"] = "clear"
    field: str


class PrevAction(_Action):
    kind: Literal["prev"] = "prev"


class NextAction(_Action):
    kind: Literal["next"] = "next"


class FirstAction(_Action):
    kind: Literal["first"] = "first"


class LastAction(_Action):
    kind: Literal["last"] = "last"


Action = Union[SortAction, ClearAction, PrevAction, NextAction, FirstAction, LastAction]

NAVIGATION_ACTIONS = {
    "prev": PrevAction,
    "next": NextAction,
    "first": FirstAction,
    "last": LastAction,
}


def parse_action(name: Optional[str], field: Optional[str] = None) -> Optional[Action]:
    """
    Build an action from the loose name/field strings a view layer sends.

    Args:
        name: Action name ("sort", "clear", "prev", "next", "first", "last")
        field: Target field for sort/clear

    Returns:
        The matching action, or None for unknown names and sort/clear
        without a field (non-actionable events)
    """
    if not name:
        return None
    name = name.strip().lower()
    if name in NAVIGATION_ACTIONS:
        return NAVIGATION_ACTIONS[name]()
    if name in ("sort", "clear"):
        if not field:
            return None
        return SortAction(field=field) if name == "sort" else ClearAction(field=field)
    return None
