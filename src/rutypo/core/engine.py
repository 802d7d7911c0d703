"""
Typographic rule engine.
Движок типографских правил.

``Typograph.process`` threads a text buffer through every rule of a ``RuleSet``
in declared order: the output of rule *i* is the input of rule *i+1*.
``Typograph.process`` пропускает текст через все правила ``RuleSet`` в объявленном
порядке: результат правила *i* — вход правила *i+1*.

The engine keeps no state between calls; handlers receive and return the buffer.
Движок не хранит состояния между вызовами; обработчики получают и возвращают буфер.
"""
from __future__ import annotations

import logging
import time
from typing import Iterable, Mapping, Optional

from .config import TypographConfig
from .diagnostics import ProcessDiagnostics, RuleTrace, utc_now_iso
from .markup import TagRenderer
from .misc import HANDLERS as MISC_HANDLERS
from .misc import build_misc_ruleset
from .rules import (
    ENTITY_SYMBOLS,
    UNICODE_SYMBOLS,
    Handler,
    RuleContext,
    RuleSet,
    Symbols,
)

logger = logging.getLogger(__name__)


class Typograph:
    """
    Applies an ordered rule set to HTML fragments.
    Применяет упорядоченный набор правил к HTML-фрагментам.

    Parameters / Параметры:
        ruleset: rules to apply (default: the misc group) / набор правил
        renderer: tag renderer shared by all rules / общий рендерер тегов
        symbols: em dash and acute accent to emit / выводимые тире и ударение
        handlers: handler id → callable for ``CustomHandler`` rules / реестр обработчиков
        disabled: names of rules to skip / имена отключённых правил
    """

    def __init__(
        self,
        ruleset: Optional[RuleSet] = None,
        *,
        renderer: Optional[TagRenderer] = None,
        symbols: Symbols = UNICODE_SYMBOLS,
        handlers: Optional[Mapping[str, Handler]] = None,
        disabled: Iterable[str] = (),
    ) -> None:
        rules = ruleset if ruleset is not None else build_misc_ruleset()
        disabled = list(disabled)
        self.ruleset = rules.without(disabled) if disabled else rules
        self.context = RuleContext(
            renderer=renderer or TagRenderer(),
            symbols=symbols,
            handlers=dict(MISC_HANDLERS if handlers is None else handlers),
        )

    @classmethod
    def from_config(cls, config: TypographConfig, ruleset: Optional[RuleSet] = None) -> "Typograph":
        renderer = TagRenderer(
            layout=config.layout,
            class_prefix=config.class_prefix,
            nowrap=config.nowrap,
        )
        return cls(
            ruleset,
            renderer=renderer,
            symbols=ENTITY_SYMBOLS if config.entities else UNICODE_SYMBOLS,
            disabled=config.disabled_rules,
        )

    def process(self, text: str) -> str:
        """Apply every rule in order and return the transformed text."""
        buffer = text
        for rule in self.ruleset:
            updated = rule.apply(buffer, self.context)
            if updated != buffer:
                logger.debug("Правило %s изменило текст (%d → %d символов)", rule.name, len(buffer), len(updated))
            buffer = updated
        return buffer

    def process_with_trace(self, text: str, *, source: Optional[str] = None) -> ProcessDiagnostics:
        """Same as ``process`` but records which rules changed the text."""
        started = time.perf_counter()
        traces = []
        buffer = text
        for rule in self.ruleset:
            updated = rule.apply(buffer, self.context)
            traces.append(
                RuleTrace(
                    name=rule.name,
                    description=rule.description,
                    kind=rule.kind,
                    changed=updated != buffer,
                    length_before=len(buffer),
                    length_after=len(updated),
                )
            )
            buffer = updated

        return ProcessDiagnostics(
            text=buffer,
            timestamp_utc=utc_now_iso(),
            duration_ms=(time.perf_counter() - started) * 1000.0,
            source=source,
            rules=traces,
        )


def typograph(text: str, config: Optional[TypographConfig] = None) -> str:
    """Shortcut: process ``text`` with a fresh engine built from ``config``."""
    engine = Typograph.from_config(config) if config is not None else Typograph()
    return engine.process(text)
