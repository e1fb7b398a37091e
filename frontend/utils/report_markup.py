import html

# Marker prefixes, longest first so "### " is never read as "# ".
_HEADING_PREFIXES = (("### ", "h3"), ("## ", "h2"), ("# ", "h1"))


def parse_report_lines(full_report: str) -> list[tuple[str, str]]:
    """
    Split a Markdown-ish report into ``(kind, text)`` blocks.

    ``kind`` is ``h1``/``h2``/``h3`` for lines starting with one, two or three
    ``#`` markers followed by a space, and ``p`` for everything else. Blank
    lines are dropped.
    """
    blocks: list[tuple[str, str]] = []
    for line in (full_report or "").splitlines():
        if not line.strip():
            continue
        for prefix, kind in _HEADING_PREFIXES:
            if line.startswith(prefix):
                blocks.append((kind, line[len(prefix):].strip()))
                break
        else:
            blocks.append(("p", line))
    return blocks


def render_report_html(full_report: str, classes: dict[str, str] | None = None) -> str:
    classes = classes or {}
    parts = []
    for kind, text in parse_report_lines(full_report):
        css = f' class="{classes[kind]}"' if kind in classes else ""
        parts.append(f"<{kind}{css}>{html.escape(text)}</{kind}>")
    return "\n".join(parts)
