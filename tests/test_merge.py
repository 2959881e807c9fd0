from __future__ import annotations

import unittest

from comicfuse.pipeline.ocr.merge import (
    ColumnMergeAdapter,
    are_in_same_column,
    merge_column_blocks,
    merge_to_canvas_blocks,
    to_canvas_blocks,
)
from comicfuse.pipeline.ocr.model import BBox, TextBlock


def block(x0, y0, x1, y1, text="") -> TextBlock:
    return TextBlock(bbox=BBox(x0, y0, x1, y1), text=text)


class TestSameColumn(unittest.TestCase):
    def test_disjoint_ranges_are_not_same_column(self) -> None:
        self.assertFalse(are_in_same_column(block(0, 0, 100, 10), block(110, 0, 200, 10), 0.3))

    def test_touching_ranges_are_not_same_column(self) -> None:
        self.assertFalse(are_in_same_column(block(0, 0, 100, 10), block(100, 0, 200, 10), 0.0))

    def test_half_overlap(self) -> None:
        a, b = block(0, 0, 100, 10), block(50, 0, 150, 10)
        self.assertTrue(are_in_same_column(a, b, 0.3))
        self.assertTrue(are_in_same_column(a, b, 0.5))
        self.assertFalse(are_in_same_column(a, b, 0.6))

    def test_ratio_uses_narrower_block(self) -> None:
        wide, narrow = block(0, 0, 400, 10), block(350, 0, 400, 10)
        self.assertTrue(are_in_same_column(wide, narrow, 1.0))

    def test_default_threshold_is_half(self) -> None:
        a, b = block(0, 0, 100, 10), block(60, 0, 160, 10)
        self.assertFalse(are_in_same_column(a, b))
        self.assertTrue(are_in_same_column(a, b, 0.3))
        self.assertEqual(len(merge_column_blocks([a, block(60, 15, 160, 25)])), 1)


class TestMergeColumnBlocks(unittest.TestCase):
    def test_empty_input(self) -> None:
        self.assertEqual(merge_column_blocks([]), [])

    def test_two_lines_merge(self) -> None:
        merged = merge_column_blocks([block(0, 0, 100, 20, "Hello"), block(0, 25, 100, 45, "World")])

        self.assertEqual(len(merged), 1)
        self.assertEqual(merged[0].text, "Hello World")
        self.assertEqual(merged[0].bbox, BBox(0, 0, 100, 45))

    def test_input_order_does_not_matter_for_text(self) -> None:
        merged = merge_column_blocks([block(0, 25, 100, 45, "World"), block(0, 0, 100, 20, "Hello")])
        self.assertEqual([b.text for b in merged], ["Hello World"])

    def test_accepts_ocr_mappings(self) -> None:
        merged = merge_column_blocks(
            [
                {"bbox": {"x0": 0, "y0": 0, "x1": 100, "y1": 20}, "text": "Hello"},
                {"bbox": {"x0": 0, "y0": 25, "x1": 100, "y1": 45}, "text": "World"},
            ]
        )
        self.assertEqual(merged[0].text, "Hello World")

    def test_no_double_space_at_seam(self) -> None:
        merged = merge_column_blocks([block(0, 0, 100, 20, "Hello "), block(0, 25, 100, 45, "World ")])
        self.assertEqual(merged[0].text, "Hello World")

    def test_far_blocks_stay_separate(self) -> None:
        merged = merge_column_blocks([block(0, 0, 100, 20, "A"), block(0, 41, 100, 60, "B")])
        self.assertEqual([b.text for b in merged], ["A", "B"])

    def test_other_column_stays_separate(self) -> None:
        merged = merge_column_blocks([block(0, 0, 100, 20, "left"), block(200, 5, 300, 25, "right")])
        self.assertEqual([b.text for b in merged], ["left", "right"])

    def test_gap_is_measured_from_seed_box(self) -> None:
        blocks = [block(0, 0, 100, 20, "A"), block(0, 25, 100, 45, "B"), block(0, 50, 100, 70, "C")]

        merged = merge_column_blocks(blocks)

        self.assertEqual([b.text for b in merged], ["A B", "C"])
        self.assertEqual(merged[0].bbox, BBox(0, 0, 100, 45))

    def test_preserve_column_width_uses_modal_edges(self) -> None:
        blocks = [
            block(10, 0, 110, 20, "one"),
            block(10, 25, 110, 45, "two"),
            block(0, 50, 130, 70, "three"),
        ]

        kept = merge_column_blocks(blocks, vertical_distance_threshold=40)
        widened = merge_column_blocks(blocks, vertical_distance_threshold=40, preserve_column_width=False)

        self.assertEqual(kept[0].bbox, BBox(10, 0, 110, 70))
        self.assertEqual(widened[0].bbox, BBox(0, 0, 130, 70))
        self.assertEqual(kept[0].text, "one two three")

    def test_modal_edge_ties_pick_smallest(self) -> None:
        merged = merge_column_blocks([block(20, 0, 120, 20, "a"), block(10, 25, 110, 45, "b")])
        self.assertEqual(merged[0].bbox, BBox(10, 0, 110, 45))

    def test_unmerged_block_keeps_box(self) -> None:
        merged = merge_column_blocks([block(3, 4, 50, 60, "  solo  ")])
        self.assertEqual(merged, [block(3, 4, 50, 60, "solo")])

    def test_output_sorted_by_top(self) -> None:
        merged = merge_column_blocks(
            [block(300, 90, 400, 110, "c"), block(0, 50, 100, 70, "b"), block(150, 10, 250, 30, "a")]
        )
        self.assertEqual([b.text for b in merged], ["a", "b", "c"])

    def test_second_run_is_stable(self) -> None:
        blocks = [
            block(0, 0, 100, 20, "Hello"),
            block(0, 25, 100, 45, "World"),
            block(0, 100, 100, 120, "Later"),
            block(300, 0, 400, 20, "Aside"),
        ]

        once = merge_column_blocks(blocks)
        twice = merge_column_blocks(once)

        self.assertEqual(once, twice)
        self.assertEqual([b.text for b in once], ["Hello World", "Aside", "Later"])


class TestCanvasBlocks(unittest.TestCase):
    def test_scale_keeps_box_centered(self) -> None:
        canvas = to_canvas_blocks([block(0, 0, 100, 50, "hi")], scale=1.4)[0]

        self.assertAlmostEqual(canvas.box.width, 140)
        self.assertAlmostEqual(canvas.box.left, -20)
        self.assertAlmostEqual(canvas.box.height, 70)
        self.assertAlmostEqual(canvas.box.top, -10)
        self.assertEqual(canvas.text, "hi")

    def test_merge_to_canvas_blocks_shape(self) -> None:
        out = merge_to_canvas_blocks([block(0, 0, 100, 20, "Hello"), block(0, 25, 100, 45, "World")], scale=1.0)
        self.assertEqual(
            [b.to_dict() for b in out],
            [{"text": "Hello World", "box": {"top": 0, "left": 0, "width": 100, "height": 45}}],
        )

    def test_adapter_uses_its_parameters(self) -> None:
        adapter = ColumnMergeAdapter(vertical_distance_threshold=50, scale=1.0)
        out = adapter.convert([block(0, 0, 100, 20, "A"), block(0, 60, 100, 80, "B")])
        self.assertEqual([b.text for b in out], ["A B"])


if __name__ == "__main__":
    unittest.main()
