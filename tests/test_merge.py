import unittest

from referee.merge import merge_candidates
from referee.models import ConciseCandidate, TextPart


def record(statement_id, url, texts, property_id=None, external_id=None, language="en"):
    return ConciseCandidate(
        statement_id=statement_id,
        url=url,
        property=property_id,
        external_id=external_id,
        language=language,
        texts=[TextPart(*text) for text in texts],
    )


class MergeCandidatesTests(unittest.TestCase):
    def test_same_key_is_merged_with_union_of_texts(self) -> None:
        records = [
            record("Q1$b", "https://a.example", [("x ", "1990", " y")]),
            record("Q1$b", "https://a.example", [("a ", "May 17, 1990", " b"), ("x ", "1990", " y")]),
        ]
        merged = merge_candidates(records)
        self.assertEqual(len(merged), 1)
        self.assertEqual(
            merged[0].texts,
            [TextPart("a ", "May 17, 1990", " b"), TextPart("x ", "1990", " y")],
        )

    def test_language_is_not_part_of_the_key(self) -> None:
        records = [
            record("Q1$a", "https://a.example", [("", "1990", "")], language="en"),
            record("Q1$a", "https://a.example", [("", "1990", " x")], language="de"),
        ]
        merged = merge_candidates(records)
        self.assertEqual(len(merged), 1)
        self.assertEqual(len(merged[0].texts), 2)
        self.assertEqual(merged[0].language, "de")

    def test_distinct_keys_stay_separate_and_sorted(self) -> None:
        records = [
            record("Q1$b", "https://b.example", [("", "x", "")]),
            record("Q1$a", "https://b.example", [("", "x", "")], property_id="P214", external_id="1"),
            record("Q1$a", "https://b.example", [("", "x", "")]),
            record("Q1$a", "https://a.example", [("", "x", "")]),
        ]
        merged = merge_candidates(records)
        keys = [(r.statement_id, r.url, r.property) for r in merged]
        self.assertEqual(
            keys,
            [
                ("Q1$a", "https://a.example", None),
                ("Q1$a", "https://b.example", None),
                ("Q1$a", "https://b.example", "P214"),
                ("Q1$b", "https://b.example", None),
            ],
        )

    def test_merge_is_idempotent(self) -> None:
        records = [
            record("Q1$b", "https://a.example", [("", "b", "")]),
            record("Q1$a", "https://a.example", [("", "a", "")], language="fr"),
            record("Q1$a", "https://a.example", [("", "a", ""), ("", "c", "")]),
            record("Q1$a", "https://z.example", [("", "a", "")], property_id="P1", external_id="9"),
        ]
        once = merge_candidates(records)
        twice = merge_candidates(once)
        self.assertEqual([r.to_dict() for r in once], [r.to_dict() for r in twice])

    def test_inputs_are_not_mutated(self) -> None:
        first = record("Q1$a", "https://a.example", [("", "b", "")])
        second = record("Q1$a", "https://a.example", [("", "a", "")])
        merge_candidates([first, second])
        self.assertEqual(first.texts, [TextPart("", "b", "")])
        self.assertEqual(second.texts, [TextPart("", "a", "")])

    def test_empty(self) -> None:
        self.assertEqual(merge_candidates([]), [])


if __name__ == "__main__":
    unittest.main()
