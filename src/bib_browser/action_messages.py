"""Message copy for popups and CLI errors."""

from __future__ import annotations


def _sentence(text: str) -> str:
    cleaned = " ".join(text.split())
    if not cleaned or cleaned.endswith((".", "!", "?", ":")):
        return cleaned
    return f"{cleaned}."


def build_actionable_error(
    action: str,
    *,
    next_step: str,
    why: str | None = None,
) -> str:
    """Three-part error: what failed, why (optional), what to try next."""
    lines = [f"Could not {action.strip()}."]
    if why:
        lines.append(f"Why: {_sentence(why)}")
    lines.append(f"Next step: {_sentence(next_step)}")
    return "\n".join(lines)


def build_actionable_success(message: str, *, detail: str | None = None) -> str:
    lines = [_sentence(message)]
    if detail:
        lines.append(_sentence(detail))
    return "\n".join(lines)


def build_missing_citekey_notice(citekey: str, path: str) -> str:
    """Notice shown when the editor could not be placed on the entry."""
    return build_actionable_success(
        f"Opened {path} at line 1",
        detail=f"No line containing {{{citekey}, was found",
    )


def build_no_bibliography_error(why: str, next_step: str) -> str:
    return build_actionable_error("find a bibliography", why=why, next_step=next_step)


__all__ = [
    "build_actionable_error",
    "build_actionable_success",
    "build_missing_citekey_notice",
    "build_no_bibliography_error",
]
