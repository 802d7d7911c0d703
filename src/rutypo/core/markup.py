"""
HTML tag rendering for typographic rules.
Отрисовка HTML-тегов для типографских правил.

Rules never build markup by hand: they call ``TagRenderer.tag`` so that the
layout (CSS class, inline style or ``<nobr>``) is decided in one place.
Правила не собирают разметку вручную: они вызывают ``TagRenderer.tag``,
поэтому способ оформления (класс, инлайн-стиль или ``<nobr>``) задаётся в одном месте.
"""
from __future__ import annotations

import html
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Tuple

# Known style classes and their inline CSS
# Известные классы оформления и их инлайн-CSS
DEFAULT_CLASSES: Dict[str, str] = {
    "nowrap": "word-spacing:nowrap;",
}

LAYOUTS = ("class", "style", "both")

NOWRAP = "nowrap"


@dataclass(frozen=True)
class TagRenderer:
    """
    Renders ``<tag attrs>content</tag>`` according to the configured layout.
    Отрисовывает ``<tag attrs>content</tag>`` согласно выбранному оформлению.

    Attributes / Атрибуты:
        layout: "class", "style" or "both" / способ оформления классов
        class_prefix: prefix for generated class names / префикс имён классов
        nowrap: if False, nowrap spans become ``<nobr>`` / если False — ``<nobr>``
        classes: class name → inline CSS / имя класса → инлайн-CSS
    """

    layout: str = "class"
    class_prefix: str = ""
    nowrap: bool = True
    classes: Mapping[str, str] = field(default_factory=lambda: dict(DEFAULT_CLASSES))

    def __post_init__(self) -> None:
        if self.layout not in LAYOUTS:
            raise ValueError(f"layout должен быть одним из {LAYOUTS}, получено {self.layout!r}")

    def tag(
        self,
        content: str,
        tag_name: str = "span",
        attributes: Optional[Mapping[str, str]] = None,
    ) -> str:
        attrs: Dict[str, str] = dict(attributes or {})
        classname = attrs.pop("class", None)

        if classname == NOWRAP and not self.nowrap:
            return f"<nobr>{content}</nobr>"

        if classname:
            style = self.classes.get(classname)
            if self.layout in ("class", "both") or not style:
                attrs = {"class": self.class_prefix + classname, **attrs}
            if self.layout in ("style", "both") and style:
                attrs["style"] = style

        rendered = "".join(f' {name}="{html.escape(str(value), quote=True)}"' for name, value in attrs.items())
        return f"<{tag_name}{rendered}>{content}</{tag_name}>"

    def bounds(
        self,
        tag_name: str = "span",
        attributes: Optional[Mapping[str, str]] = None,
    ) -> Tuple[str, str]:
        """Return the opening and closing tag the renderer would produce."""
        marker = "\x00"
        opening, closing = self.tag(marker, tag_name, attributes).split(marker)
        return opening, closing

    def nowrap_bounds(self) -> Tuple[str, str]:
        return self.bounds("span", {"class": NOWRAP})
