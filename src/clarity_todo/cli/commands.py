# src/clarity_todo/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable

from ..core.errors import InvalidInput
from ..core.state import AppState
from ..sync.controller import MutationState, PendingMutation
from ..tasks.task_models import Priority, Task, parse_timestamp
from ..views.projector import (
    Flat,
    GroupBy,
    Grouped,
    SortBy,
    StatusFilter,
    can_reorder,
    project,
    reorder_disabled_reason,
    summarize,
)

CommandHandler = Callable[[AppState, list[str]], Awaitable[str]]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console connector (/add, /list, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    async def handle(self, state: AppState, line: str) -> str | None:
        """
        Handle a string like "/command args".
        Returns a reply string or None if not a command.
        """
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."

        try:
            return await handler(state, args)
        except InvalidInput as e:
            return f"Invalid input: {e.message}"

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()


# ---- rendering ----


def format_task_line(position: int, task: Task) -> str:
    mark = "x" if task.completed else " "
    parts = [f"{position:>3}. [{mark}] {task.text}"]
    if task.priority is not None and task.priority != Priority.NONE:
        parts.append(f"!{task.priority.value}")
    for tag in task.tags or ():
        parts.append(f"#{tag}")
    due = parse_timestamp(task.due_date)
    if due is not None:
        parts.append(f"due {due.strftime('%b')} {due.day}")
    if task.start_time or task.end_time:
        parts.append(f"{task.start_time or ''}-{task.end_time or ''}")
    return "  ".join(parts)


def render(state: AppState) -> str:
    """Project the cached list with the current view settings and remember the shown ids."""
    view = state.view
    tasks = state.controller.tasks
    if not tasks:
        view.shown_ids = []
        return "All clear! Your task list is empty. Add a task with /add <text>."

    result = project(tasks, view.status, view.search, view.sort_by, view.group_by)

    lines: list[str] = []
    shown: list[str] = []
    match result:
        case Flat(tasks=flat):
            for t in flat:
                shown.append(t.id)
                lines.append(format_task_line(len(shown), t))
        case Grouped(groups=groups):
            for label, bucket in groups.items():
                lines.append(f"{label}:")
                for t in bucket:
                    shown.append(t.id)
                    lines.append(format_task_line(len(shown), t))

    if not shown:
        lines.append("No tasks match the current filter.")
    view.shown_ids = shown

    summary = summarize(tasks)
    footer = f"{summary.items_left_label} | filter={view.status.value} sort={view.sort_by.value}"
    if view.group_by != GroupBy.NONE:
        footer += f" group={view.group_by.value}"
    if view.search.strip():
        footer += f" search={view.search!r}"
    lines.append(footer)
    hint = reorder_disabled_reason(view.sort_by)
    if hint:
        lines.append(hint)
    return "\n".join(lines)


def _resolve(state: AppState, ref: str) -> str:
    """1-based position in the last rendered list, or a task id (prefix)."""
    if ref.isdigit():
        index = int(ref) - 1
        if 0 <= index < len(state.view.shown_ids):
            return state.view.shown_ids[index]
        raise InvalidInput(f"No task at position {ref}. Use /list first.")
    matches = [t.id for t in state.controller.tasks if t.id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        raise InvalidInput(f"No task with id {ref!r}.")
    raise InvalidInput(f"Ambiguous task id {ref!r}.")


def _outcome(state: AppState, mutation: PendingMutation | None, done: str) -> str:
    if mutation is None:
        return "Nothing to change."
    if mutation.state == MutationState.ROLLED_BACK:
        return "Change was not saved; list reloaded from the server.\n" + render(state)
    return f"{done}\n{render(state)}"


def _parse_add_args(args: list[str]) -> dict:
    """`/add text words #tag !high @2024-01-05 ~09:00-10:00`."""
    words: list[str] = []
    tags: list[str] = []
    fields: dict = {}
    for token in args:
        if token.startswith("#") and len(token) > 1:
            tags.append(token[1:])
        elif token.startswith("!") and len(token) > 1:
            fields["priority"] = Priority.parse(token[1:])
        elif token.startswith("@") and len(token) > 1:
            if parse_timestamp(token[1:]) is None:
                raise InvalidInput(f"Invalid due date {token[1:]!r} (use YYYY-MM-DD).")
            fields["due_date"] = token[1:]
        elif token.startswith("~") and "-" in token:
            start, _, end = token[1:].partition("-")
            fields["start_time"] = start or None
            fields["end_time"] = end or None
        else:
            words.append(token)
    fields["text"] = " ".join(words)
    if tags:
        fields["tags"] = tags
    return fields


# ---- handlers ----


async def cmd_help(state: AppState, args: list[str]) -> str:
    return registry.build_help()


async def cmd_list(state: AppState, args: list[str]) -> str:
    return render(state)


async def cmd_refresh(state: AppState, args: list[str]) -> str:
    if not await state.controller.refresh():
        return "Could not reach the server."
    return render(state)


async def cmd_add(state: AppState, args: list[str]) -> str:
    fields = _parse_add_args(args)
    text = fields.pop("text")
    mutation = await state.controller.add(text, **fields)
    return _outcome(state, mutation, "Task added.")


async def cmd_done(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /done <n>"
    mutation = await state.controller.toggle(_resolve(state, args[0]))
    return _outcome(state, mutation, "Task updated.")


async def cmd_edit(state: AppState, args: list[str]) -> str:
    if len(args) < 2:
        return "Usage: /edit <n> <new text>"
    mutation = await state.controller.edit(_resolve(state, args[0]), text=" ".join(args[1:]))
    return _outcome(state, mutation, "Task updated.")


async def cmd_priority(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /prio <n> none|low|medium|high"
    mutation = await state.controller.edit(_resolve(state, args[0]), priority=args[1])
    return _outcome(state, mutation, "Priority updated.")


async def cmd_due(state: AppState, args: list[str]) -> str:
    if len(args) != 2:
        return "Usage: /due <n> YYYY-MM-DD|none"
    raw = "" if args[1].lower() == "none" else args[1]
    if raw and parse_timestamp(raw) is None:
        return f"Invalid due date {raw!r} (use YYYY-MM-DD)."
    mutation = await state.controller.edit(_resolve(state, args[0]), due_date=raw)
    return _outcome(state, mutation, "Due date updated.")


async def cmd_tags(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /tags <n> [tag ...]"
    tags = [a.lstrip("#") for a in args[1:] if a.lstrip("#")]
    mutation = await state.controller.edit(_resolve(state, args[0]), tags=tags)
    return _outcome(state, mutation, "Tags updated.")


async def cmd_delete(state: AppState, args: list[str]) -> str:
    if not args:
        return "Usage: /rm <n>"
    mutation = await state.controller.delete(_resolve(state, args[0]))
    return _outcome(state, mutation, "Task deleted.")


async def cmd_clear(state: AppState, args: list[str]) -> str:
    if not summarize(state.controller.tasks).clear_completed_enabled:
        return "No completed tasks to clear."
    mutation = await state.controller.clear_completed()
    return _outcome(state, mutation, "Completed tasks cleared.")


async def cmd_move(state: AppState, args: list[str]) -> str:
    if not can_reorder(state.view.sort_by):
        return reorder_disabled_reason(state.view.sort_by) or ""
    if len(args) != 2:
        return "Usage: /move <from n> <to n>"
    active_id = _resolve(state, args[0])
    over_id = _resolve(state, args[1])
    mutation = await state.controller.move(active_id, over_id)
    return _outcome(state, mutation, "Task moved.")


async def cmd_filter(state: AppState, args: list[str]) -> str:
    try:
        state.view.status = StatusFilter(args[0].lower() if args else "")
    except ValueError:
        return "Usage: /filter all|active|completed"
    return render(state)


async def cmd_search(state: AppState, args: list[str]) -> str:
    state.view.search = " ".join(args)
    return render(state)


async def cmd_sort(state: AppState, args: list[str]) -> str:
    try:
        state.view.sort_by = SortBy(args[0] if args else "")
    except ValueError:
        return "Usage: /sort manual|dueDate|priority|createdAt"
    return render(state)


async def cmd_group(state: AppState, args: list[str]) -> str:
    try:
        state.view.group_by = GroupBy(args[0] if args else "")
    except ValueError:
        return "Usage: /group none|priority|dueDate"
    return render(state)


registry.register("help", cmd_help, help_text="Show available commands.", aliases=["h", "?"])
registry.register("list", cmd_list, help_text="Show tasks with the current view.", aliases=["ls"])
registry.register("refresh", cmd_refresh, help_text="Reload the list from the server.")
registry.register(
    "add", cmd_add, help_text="Add a task: /add text #tag !high @2024-01-05 ~09:00-10:00."
)
registry.register("done", cmd_done, help_text="Toggle completed: /done <n>.", aliases=["toggle"])
registry.register("edit", cmd_edit, help_text="Change text: /edit <n> <text>.")
registry.register("prio", cmd_priority, help_text="Set priority: /prio <n> none|low|medium|high.")
registry.register("due", cmd_due, help_text="Set due date: /due <n> YYYY-MM-DD|none.")
registry.register("tags", cmd_tags, help_text="Replace tags: /tags <n> [tag ...].")
registry.register("rm", cmd_delete, help_text="Delete a task: /rm <n>.", aliases=["delete"])
registry.register("clear", cmd_clear, help_text="Remove all completed tasks.")
registry.register("move", cmd_move, help_text="Reorder (manual sort only): /move <from> <to>.")
registry.register("filter", cmd_filter, help_text="Status filter: /filter all|active|completed.")
registry.register("search", cmd_search, help_text="Search text and tags: /search [term].")
registry.register("sort", cmd_sort, help_text="Sort: /sort manual|dueDate|priority|createdAt.")
registry.register("group", cmd_group, help_text="Group: /group none|priority|dueDate.")
