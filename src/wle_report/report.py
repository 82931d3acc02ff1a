import os
from dataclasses import dataclass, field
from typing import List
from datetime import datetime


@dataclass
class Section:
    title: str
    level: int = 2
    blocks: List[str] = field(default_factory=list)


class Report:
    """Markdown document built section by section; figures are linked relative to the report."""

    def __init__(self, title: str, path: str):
        self.title = title
        self.path = path
        self.base_dir = os.path.dirname(os.path.abspath(path))
        self.sections: List[Section] = []
        # blocks added before the first section sit directly under the title
        self.preamble = Section(title, level=1)

    def section(self, title: str, level: int = 2) -> 'Report':
        self.sections.append(Section(title, level))
        return self

    def _current(self) -> Section:
        return self.sections[-1] if self.sections else self.preamble

    def text(self, paragraph: str) -> 'Report':
        self._current().blocks.append(paragraph.strip())
        return self

    def bullets(self, items) -> 'Report':
        self._current().blocks.append("\n".join(f"- {item}" for item in items))
        return self

    def table(self, df, caption: str = None, float_format: str = "{:.4f}", index: bool = True) -> 'Report':
        html = df.to_html(index=index, float_format=float_format.format, border=0)
        block = html if caption is None else f"**{caption}**\n\n{html}"
        self._current().blocks.append(block)
        return self

    def code(self, content: str) -> 'Report':
        self._current().blocks.append(f"```\n{content.rstrip()}\n```")
        return self

    def figure(self, image_path: str, caption: str) -> 'Report':
        rel_path = os.path.relpath(os.path.abspath(image_path), self.base_dir)
        self._current().blocks.append(f"![{caption}]({rel_path})\n\n*{caption}*")
        return self

    def render(self) -> str:
        lines = [f"# {self.title}", "", f"*Generated {datetime.now().strftime('%Y-%m-%d %H:%M')}*", ""]
        lines.extend(line for block in self.preamble.blocks for line in (block, ""))
        for section in self.sections:
            lines.append(f"{'#' * section.level} {section.title}")
            lines.append("")
            for block in section.blocks:
                lines.append(block)
                lines.append("")
        return "\n".join(lines)

    def save(self) -> str:
        with open(self.path, "w") as f:
            f.write(self.render())
        print(f"Report written to {self.path}")
        return self.path
