from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, List, Mapping, Sequence, Union

from comicfuse.pipeline.adapter import Adapter
from comicfuse.pipeline.ocr.model import BBox, CanvasBlock, CanvasBox, TextBlock

BlockLike = Union[TextBlock, Mapping[str, Any]]


def _as_block(block: BlockLike) -> TextBlock:
    return block if isinstance(block, TextBlock) else TextBlock.from_dict(block)


def are_in_same_column(block1: TextBlock, block2: TextBlock, overlap_threshold: float = 0.5) -> bool:
    """Whether two blocks share a column.

    The horizontal overlap is measured against the narrower of the two blocks;
    no overlap is never the same column. Callers going through
    ``merge_column_blocks`` get its 0.3 threshold; 0.5 applies to direct calls.
    """
    overlap_start = max(block1.bbox.x0, block2.bbox.x0)
    overlap_end = min(block1.bbox.x1, block2.bbox.x1)
    if overlap_end <= overlap_start:
        return False

    min_width = min(block1.bbox.width, block2.bbox.width)
    if min_width <= 0:
        return False
    return (overlap_end - overlap_start) / min_width >= overlap_threshold


def _vertical_gap(seed: BBox, other: BBox) -> float:
    if other.y0 > seed.y1:
        return other.y0 - seed.y1  # other is below
    return seed.y0 - other.y1  # other is above or overlapping


def _join(first: str, second: str) -> str:
    space = "" if first.endswith((" ", "\n", "\t")) or second.startswith((" ", "\n", "\t")) else " "
    return first + space + second


def _most_common(values: Iterable[float]) -> float:
    # Ties go to the smallest coordinate
    counts = Counter(values)
    return min(counts, key=lambda v: (-counts[v], v))


def merge_column_blocks(
    ocr_data: Sequence[BlockLike],
    vertical_distance_threshold: float = 20,
    overlap_threshold: float = 0.3,
    preserve_column_width: bool = True,
) -> List[TextBlock]:
    """Merge OCR blocks that sit in the same column and are close vertically.

    Single greedy pass: blocks are visited top to bottom and each unmerged
    seed absorbs every other unmerged block that shares its column and lies
    within ``vertical_distance_threshold`` of the seed's original box.
    Absorbed blocks never seed or join again. The result is sorted by top
    edge; equal tops keep their input order.

    With ``preserve_column_width`` the merged box uses the most frequent left
    and right edges among its members instead of their min/max, so a single
    overhanging line does not widen the column.
    """
    if not ocr_data:
        return []

    blocks = sorted((_as_block(b) for b in ocr_data), key=lambda b: b.bbox.y0)
    merged = set()
    result: List[TextBlock] = []

    for i, seed in enumerate(blocks):
        if i in merged:
            continue

        text = seed.text
        x0_values = [seed.bbox.x0]
        x1_values = [seed.bbox.x1]
        y_min = seed.bbox.y0
        y_max = seed.bbox.y1
        did_merge = False

        for j, other in enumerate(blocks):
            if i == j or j in merged:
                continue
            if not are_in_same_column(seed, other, overlap_threshold):
                continue
            if _vertical_gap(seed.bbox, other.bbox) > vertical_distance_threshold:
                continue

            x0_values.append(other.bbox.x0)
            x1_values.append(other.bbox.x1)
            y_min = min(y_min, other.bbox.y0)
            y_max = max(y_max, other.bbox.y1)
            if other.bbox.y0 < seed.bbox.y0:
                text = _join(other.text, text)
            else:
                text = _join(text, other.text)
            merged.add(j)
            did_merge = True

        if not did_merge:
            bbox = seed.bbox
        elif preserve_column_width:
            bbox = BBox(_most_common(x0_values), y_min, _most_common(x1_values), y_max)
        else:
            bbox = BBox(min(x0_values), y_min, max(x1_values), y_max)

        result.append(TextBlock(bbox=bbox, text=text.strip()))
        merged.add(i)

    result.sort(key=lambda b: b.bbox.y0)
    return result


def to_canvas_blocks(blocks: Sequence[TextBlock], scale: float = 1.4) -> List[CanvasBlock]:
    """Grow each block by ``scale`` around its own center for drawing padding."""
    out: List[CanvasBlock] = []
    for block in blocks:
        width = block.bbox.width * scale
        height = block.bbox.height * scale
        left = block.bbox.x0 - (width - block.bbox.width) / 2
        top = block.bbox.y0 - (height - block.bbox.height) / 2
        out.append(CanvasBlock(text=block.text, box=CanvasBox(top=top, left=left, width=width, height=height)))
    return out


def merge_to_canvas_blocks(
    ocr_data: Sequence[BlockLike],
    vertical_distance_threshold: float = 20,
    overlap_threshold: float = 0.3,
    preserve_column_width: bool = True,
    scale: float = 1.4,
) -> List[CanvasBlock]:
    merged = merge_column_blocks(
        ocr_data,
        vertical_distance_threshold=vertical_distance_threshold,
        overlap_threshold=overlap_threshold,
        preserve_column_width=preserve_column_width,
    )
    return to_canvas_blocks(merged, scale=scale)


class ColumnMergeAdapter(Adapter[Sequence[BlockLike], List[CanvasBlock]]):
    def __init__(
        self,
        vertical_distance_threshold: float = 20,
        overlap_threshold: float = 0.3,
        preserve_column_width: bool = True,
        scale: float = 1.4,
    ) -> None:
        self.vertical_distance_threshold = vertical_distance_threshold
        self.overlap_threshold = overlap_threshold
        self.preserve_column_width = preserve_column_width
        self.scale = scale

    def convert(self, src: Sequence[BlockLike]) -> List[CanvasBlock]:
        return merge_to_canvas_blocks(
            src,
            vertical_distance_threshold=self.vertical_distance_threshold,
            overlap_threshold=self.overlap_threshold,
            preserve_column_width=self.preserve_column_width,
            scale=self.scale,
        )
