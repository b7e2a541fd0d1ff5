"""Text rendering of struct layouts and optimization reports."""
from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

from struct_tetris.layout.fields import FieldDescriptor
from struct_tetris.layout.sizing import Layout

if TYPE_CHECKING:
    from struct_tetris.pipeline import StructReport


def render_struct(fields: Sequence[FieldDescriptor], size: int) -> str:
    """Fields one per line, followed by the memory they use."""
    lines = [f"\t{field.text}" for field in fields]
    lines.append(f"Memory used = {size} bytes")
    return "\n".join(lines) + "\n\n"


def render_layout(layout: Layout) -> str:
    """Like render_struct, with offset, size and trailing padding per field."""
    width = max((len(field.text) for field in layout.fields), default=0)
    lines = []
    for i, field in enumerate(layout.fields):
        pad = layout.padding_after(i)
        note = f"  +{pad} padding" if pad else ""
        lines.append(f"\t{field.text:<{width}}  // offset {layout.offsets[i]:>3}, "
                     f"size {layout.sizes[i]:>2}{note}")
    lines.append(f"Memory used = {layout.total_size} bytes ({layout.padding} bytes padding)")
    return "\n".join(lines) + "\n\n"


def _render(layout: Layout, explain: bool) -> str:
    if explain:
        return render_layout(layout)
    return render_struct(layout.fields, layout.total_size)


def render_report(report: StructReport, explain: bool = False) -> str:
    out: List[str] = ["TETRIS:\n"]
    if report.name:
        out.append(f"Struct {report.name}:\n")
    out.append("Initial struct:\n")
    out.append(_render(report.baseline, explain))
    out.append("Best solution by greedy algorithm:\n")
    out.append(_render(report.greedy, explain))

    if report.candidates is not None:
        out.append(f"Top {len(report.candidates)} solutions by brute force:\n")
        for layout in report.candidate_layouts():
            out.append(_render(layout, explain))

    if report.abi_sizes:
        sizes = ", ".join(f"{label} = {size}" for label, size in report.abi_sizes.items())
        out.append(f"Native ABI sizes: {sizes} bytes\n")

    return "".join(out)
