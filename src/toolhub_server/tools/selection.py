"""Enabled-tool selection helpers.

An enabled set is a plain ``set[str]`` of tool names. It is either the
registry-wide default or a session override. By convention an empty set
means "no filter". Names that are not in the catalog are allowed and
simply match nothing.

Every function here is pure: it never mutates its arguments and returns a
new set (or a value derived from its inputs).
"""

from collections.abc import Iterable

from toolhub_server.tools.types import Tool, ToggleState


def filter_enabled(tools: list[Tool], enabled_names: Iterable[str] | None) -> list[Tool]:
    """Return the tools selected by ``enabled_names``, keeping catalog order.

    An empty or missing selection returns every tool.
    """
    names = set(enabled_names or ())
    if not names:
        return list(tools)
    return [tool for tool in tools if tool.name in names]


def set_enabled(enabled_names: Iterable[str], name: str, enabled: bool) -> set[str]:
    """Add or remove a single tool name."""
    result = set(enabled_names)
    if enabled:
        result.add(name)
    else:
        result.discard(name)
    return result


def enable_all(tools: list[Tool]) -> set[str]:
    """Select every tool currently in the catalog."""
    return {tool.name for tool in tools}


def disable_all() -> set[str]:
    return set()


def provider_tool_names(tools: list[Tool], provider_name: str) -> set[str]:
    """Names of the tools owned by one provider."""
    return {tool.name for tool in tools if tool.provider_name == provider_name}


def enable_provider(
    enabled_names: Iterable[str], tools: list[Tool], provider_name: str
) -> set[str]:
    """Add every tool owned by ``provider_name``."""
    return set(enabled_names) | provider_tool_names(tools, provider_name)


def disable_provider(
    enabled_names: Iterable[str], tools: list[Tool], provider_name: str
) -> set[str]:
    """Remove every tool owned by ``provider_name``."""
    return set(enabled_names) - provider_tool_names(tools, provider_name)


def all_enabled_for_provider(
    enabled_names: Iterable[str], tools: list[Tool], provider_name: str
) -> bool:
    """True when the provider owns at least one tool and all of them are enabled."""
    owned = provider_tool_names(tools, provider_name)
    return bool(owned) and owned <= set(enabled_names)


def any_enabled_for_provider(
    enabled_names: Iterable[str], tools: list[Tool], provider_name: str
) -> bool:
    return bool(provider_tool_names(tools, provider_name) & set(enabled_names))


def provider_toggle_state(
    enabled_names: Iterable[str], tools: list[Tool], provider_name: str
) -> ToggleState:
    """Collapse a provider's tools into a tri-state toggle value."""
    names = set(enabled_names)
    if all_enabled_for_provider(names, tools, provider_name):
        return ToggleState.ON
    if any_enabled_for_provider(names, tools, provider_name):
        return ToggleState.MIXED
    return ToggleState.OFF


def search_tools(tools: list[Tool], query: str) -> list[Tool]:
    """Case-insensitive substring search over name, description and provider.

    An empty or whitespace-only query returns every tool.
    """
    needle = query.strip().casefold()
    if not needle:
        return list(tools)

    return [
        tool
        for tool in tools
        if needle in tool.name.casefold()
        or needle in tool.description.casefold()
        or (tool.provider_name is not None and needle in tool.provider_name.casefold())
    ]
