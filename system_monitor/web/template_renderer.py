"""Minimal template renderer for the dashboard page."""

from __future__ import annotations

import re
from html import escape
from pathlib import Path
from typing import Any, Mapping

_EXTENDS = re.compile(r"{% extends ['\"](.+?)['\"] %}")
_BLOCK = re.compile(r"{% block (\w+) %}(.*?){% endblock %}", re.DOTALL)
_INCLUDE = re.compile(r"{% include ['\"](.+?)['\"] %}")
_VARIABLE = re.compile(r"{{\s*(\w+)\s*}}")


class SimpleTemplateRenderer:
    """Supports ``extends``/``block``, ``include`` and ``{{ name }}`` variables."""

    def __init__(self, templates_dir: Path) -> None:
        self.templates_dir = templates_dir

    def render(self, template_name: str, context: Mapping[str, Any] | None = None) -> str:
        context = context or {}
        content = self._load(template_name)
        return self._substitute(self._expand(content, context), context)

    def _load(self, template_name: str) -> str:
        template_path = self.templates_dir / template_name
        if not template_path.exists():
            raise FileNotFoundError(f"Template {template_name} not found")
        return template_path.read_text(encoding="utf-8")

    def _expand(self, content: str, context: Mapping[str, Any]) -> str:
        extends_match = _EXTENDS.search(content)
        if not extends_match:
            return self._process_includes(content, context)

        base_content = self._expand(self._load(extends_match.group(1)), context)
        blocks = {match.group(1): match.group(2).strip() for match in _BLOCK.finditer(content)}

        def replace_block(match: re.Match[str]) -> str:
            name = match.group(1)
            if name in blocks:
                return self._process_includes(blocks[name], context)
            return match.group(2)

        return _BLOCK.sub(replace_block, base_content)

    def _process_includes(self, content: str, context: Mapping[str, Any]) -> str:
        def replace_include(match: re.Match[str]) -> str:
            include_path = match.group(1)
            try:
                return self._expand(self._load(include_path), context)
            except FileNotFoundError:
                return f"<!-- Template {include_path} not found -->"

        return _INCLUDE.sub(replace_include, content)

    @staticmethod
    def _substitute(content: str, context: Mapping[str, Any]) -> str:
        def replace_variable(match: re.Match[str]) -> str:
            name = match.group(1)
            if name not in context:
                return match.group(0)
            return escape(str(context[name]))

        return _VARIABLE.sub(replace_variable, content)
