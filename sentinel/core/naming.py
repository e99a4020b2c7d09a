"""Helpers for Move fully-qualified type names (``0x1::coin::CoinStore<...>``)."""

from __future__ import annotations


def _split_type_params(params: str) -> list[str]:
    """Split ``A, B<C, D>`` on top-level commas only."""
    parts: list[str] = []
    depth = 0
    current: list[str] = []
    for ch in params:
        if ch == "<":
            depth += 1
        elif ch == ">":
            depth -= 1
        if ch == "," and depth == 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(ch)
    tail = "".join(current).strip()
    if tail:
        parts.append(tail)
    return parts


def short_resource_name(full_name: str) -> str:
    """Drop address and module qualifiers from a type and its generic params.

    >>> short_resource_name("0x1::coin::CoinStore<0x1::aptos_coin::AptosCoin>")
    'CoinStore<AptosCoin>'
    """
    start = full_name.find("<")
    end = full_name.rfind(">")
    if start == -1 or end < start:
        return full_name.split("::")[-1]

    outer = full_name[:start].split("::")[-1]
    params = [short_resource_name(p) for p in _split_type_params(full_name[start + 1:end])]
    return f"{outer}<{', '.join(params)}>"


def module_of_type(type_name: str) -> str | None:
    """Return the module segment of ``addr::module::Name``, if there is one."""
    parts = type_name.split("::")
    if len(parts) >= 2:
        return parts[1]
    return None
