import unittest

from app.pdf_questions.parser import clean_question_line, is_question_line, parse_questions


class TestParseQuestions(unittest.TestCase):
    def test_enumerated_questions_and_noise(self):
        raw = "1. What is attention?\n2. Why use multi-head?\n- not a question\nSome prose."
        self.assertEqual(
            parse_questions(raw),
            ["What is attention?", "Why use multi-head?"],
        )

    def test_caps_at_ten_in_original_order(self):
        raw = "\n".join(f"{i}. What is concept number {i}?" for i in range(1, 13))
        questions = parse_questions(raw)
        self.assertEqual(len(questions), 10)
        self.assertEqual(questions[0], "What is concept number 1?")
        self.assertEqual(questions[-1], "What is concept number 10?")

    def test_never_more_than_ten_for_large_input(self):
        raw = "\n".join("Is this a long enough question?" for _ in range(500))
        self.assertEqual(len(parse_questions(raw)), 10)

    def test_drops_short_cleaned_lines(self):
        raw = "1. Why?\n2) Who?\nWhat?\n3. How does it work?"
        questions = parse_questions(raw)
        self.assertEqual(questions, ["How does it work?"])
        self.assertTrue(all(len(q) > 5 for q in questions))

    def test_exactly_six_characters_is_kept(self):
        self.assertEqual(parse_questions("Why so?"), ["Why so?"])
        self.assertEqual(parse_questions("1. Why?!"), [])  # "Why?!" is 5

    def test_question_mark_or_enumeration_is_enough(self):
        raw = "1) Explain the encoder stack\nDoes the decoder attend to itself?"
        self.assertEqual(
            parse_questions(raw),
            ["Explain the encoder stack", "Does the decoder attend to itself?"],
        )

    def test_both_enumeration_and_question_mark(self):
        self.assertEqual(parse_questions("3. What is a residual?"), ["What is a residual?"])

    def test_bullet_only_line_without_marker_is_dropped(self):
        self.assertEqual(parse_questions("- Explain positional encodings"), [])
        self.assertEqual(parse_questions("* Explain positional encodings"), [])

    def test_bullets_are_stripped_from_kept_lines(self):
        raw = "- What is a token?\n* What is a layer norm?\n• What is dropout?"
        self.assertEqual(
            parse_questions(raw),
            ["What is a token?", "What is a layer norm?", "What is dropout?"],
        )

    def test_mojibake_bullet_is_stripped(self):
        self.assertEqual(
            parse_questions("â€¢ What is beam search?"),
            ["What is beam search?"],
        )

    def test_enumeration_then_bullet(self):
        self.assertEqual(parse_questions("1. - What is softmax?"), ["What is softmax?"])

    def test_blank_and_whitespace_lines_ignored(self):
        raw = "\n\n   \n\t1.   What is a query vector?   \n\n"
        self.assertEqual(parse_questions(raw), ["What is a query vector?"])

    def test_empty_input(self):
        self.assertEqual(parse_questions(""), [])

    def test_custom_limits(self):
        raw = "1. What is A?\n2. What is B?\n3. What is C?"
        self.assertEqual(parse_questions(raw, max_questions=2), ["What is A?", "What is B?"])
        self.assertEqual(parse_questions(raw, min_length=10), [])


class TestParseIdempotence(unittest.TestCase):
    def test_reparse_of_clean_questions_is_stable(self):
        raw = (
            "Here are your questions:\n"
            "1. What is attention?\n"
            "2) - Why use multi-head attention?\n"
            "• How are positions encoded?\n"
        )
        first = parse_questions(raw)
        self.assertEqual(parse_questions("\n".join(first)), first)

    def test_reparse_is_subset_when_enumeration_was_the_only_marker(self):
        raw = "1. Explain the encoder stack\n2. What does the decoder do?"
        first = parse_questions(raw)
        self.assertEqual(first, ["Explain the encoder stack", "What does the decoder do?"])

        second = parse_questions("\n".join(first))
        # The first line lost its enumeration and has no '?', so it is dropped
        self.assertEqual(second, ["What does the decoder do?"])
        self.assertTrue(set(second).issubset(first))


class TestLineHelpers(unittest.TestCase):
    def test_is_question_line(self):
        self.assertTrue(is_question_line("anything?"))
        self.assertTrue(is_question_line("12) statement"))
        self.assertTrue(is_question_line("4.statement"))
        self.assertFalse(is_question_line("- statement"))
        self.assertFalse(is_question_line("Section 1. intro"))

    def test_clean_question_line(self):
        self.assertEqual(clean_question_line("10.   * Why?  "), "Why?")
        self.assertEqual(clean_question_line("Plain?"), "Plain?")


if __name__ == "__main__":
    unittest.main()
