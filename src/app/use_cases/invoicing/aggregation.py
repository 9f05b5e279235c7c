"""Line-Item Aggregator

Turns unbilled time entries into preview line items. Each GroupBy value is
served by one strategy; callers only ever go through aggregate().
"""

from abc import ABC, abstractmethod
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Mapping, Optional

from src.domain.task import Task
from src.domain.time_entry import TimeEntry, MINUTES_PER_HOUR
from .dtos import GroupBy, PreviewLineItemDTO
from .rates import RateResolution
from .totals import CURRENCY_SCALE, line_amount

NO_TASK_DESCRIPTION = "General Services (No Task)"
NOTES_SEPARATOR = "; "


def minutes_to_hours(minutes: int) -> Decimal:
    """Decimal hours rounded to 2 places, half-up"""
    return (Decimal(minutes) / Decimal(MINUTES_PER_HOUR)).quantize(
        CURRENCY_SCALE, rounding=ROUND_HALF_UP
    )


def aggregate_notes(entries: Iterable[TimeEntry]) -> Optional[str]:
    """Distinct non-blank entry notes in order of first occurrence"""
    seen: Dict[str, None] = {}
    for entry in entries:
        note = (entry.description or "").strip()
        if note:
            seen.setdefault(note, None)
    return NOTES_SEPARATOR.join(seen) if seen else None


def _group(entries: Iterable[TimeEntry], key) -> Dict[Optional[str], List[TimeEntry]]:
    groups: Dict[Optional[str], List[TimeEntry]] = {}
    for entry in entries:
        groups.setdefault(key(entry), []).append(entry)
    return groups


class GroupingStrategy(ABC):

    @abstractmethod
    def build(
        self,
        entries: List[TimeEntry],
        rates: RateResolution,
        tasks: Mapping[str, Task],
        include_descriptions: bool,
    ) -> List[PreviewLineItemDTO]:
        pass


class ByContributor(GroupingStrategy):
    """One line per contributor at that contributor's rate, sorted by name"""

    def build(self, entries, rates, tasks, include_descriptions):
        items = []
        for user_id, group in _group(entries, lambda e: e.user_id).items():
            minutes = sum(e.minutes for e in group)
            hours = minutes_to_hours(minutes)
            rate = rates.rate_for(user_id)
            name = rates.name_for(user_id)
            items.append(
                PreviewLineItemDTO(
                    description=f"Services – {name}",
                    quantity_minutes=minutes,
                    quantity_hours=hours,
                    unit_price=rate,
                    amount=line_amount(hours, rate),
                    user_id=user_id,
                    user_name=name,
                    aggregated_notes=aggregate_notes(group) if include_descriptions else None,
                )
            )
        items.sort(key=lambda item: (item.user_name, item.user_id))
        return items


class ByWorkItem(GroupingStrategy):
    """
    One line per work item, plus one for entries without a work item

    Several contributors can log time on the same task, so the unit price is
    the blended rate sum(hours * rate) / sum(hours), rounded to 2 places.
    Lines keep the order in which their work item first appears.
    """

    def build(self, entries, rates, tasks, include_descriptions):
        items = []
        for task_id, group in _group(entries, lambda e: e.task_id).items():
            minutes = sum(e.minutes for e in group)
            hours = minutes_to_hours(minutes)
            weighted = sum(
                (Decimal(e.hours) * rates.rate_for(e.user_id) for e in group),
                Decimal("0"),
            )
            blended_rate = (
                (weighted / hours).quantize(CURRENCY_SCALE, rounding=ROUND_HALF_UP)
                if hours > 0
                else Decimal("0.00")
            )

            if task_id is None:
                description = NO_TASK_DESCRIPTION
                task_title = None
            else:
                task = tasks.get(task_id)
                task_title = task.title if task else f"Task #{task_id[:8]}"
                description = f"Task: {task_title}"

            items.append(
                PreviewLineItemDTO(
                    description=description,
                    quantity_minutes=minutes,
                    quantity_hours=hours,
                    unit_price=blended_rate,
                    amount=line_amount(hours, blended_rate),
                    task_id=task_id,
                    task_title=task_title,
                    aggregated_notes=aggregate_notes(group) if include_descriptions else None,
                )
            )
        return items


STRATEGIES: Dict[GroupBy, GroupingStrategy] = {
    GroupBy.BY_CONTRIBUTOR: ByContributor(),
    GroupBy.BY_WORK_ITEM: ByWorkItem(),
}


def aggregate(
    entries: List[TimeEntry],
    mode: GroupBy,
    rates: RateResolution,
    tasks: Optional[Mapping[str, Task]] = None,
    include_descriptions: bool = False,
) -> List[PreviewLineItemDTO]:
    """Build line items for entries using the strategy registered for mode"""
    return STRATEGIES[GroupBy(mode)].build(entries, rates, tasks or {}, include_descriptions)
