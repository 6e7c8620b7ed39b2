from decimal import Decimal

from django.test import SimpleTestCase

from results.services.grading import compute, grade_for, remark_for, summarize
from schools.exceptions import ValidationError


class GradeBandTests(SimpleTestCase):
    def test_grade_boundaries(self):
        cases = [
            (80, "A"), (79, "B"), (70, "B"), (69, "C"), (60, "C"),
            (59, "D"), (50, "D"), (49, "E"), (40, "E"), (39, "F"), (0, "F"),
        ]
        for total, grade in cases:
            with self.subTest(total=total):
                self.assertEqual(grade_for(total), grade)

    def test_remark_boundaries(self):
        cases = [
            (70, "Excellent"), (69, "Very Good"), (60, "Very Good"), (59, "Good"),
            (50, "Good"), (49, "Fair"), (40, "Fair"), (39, "Poor"),
        ]
        for total, remark in cases:
            with self.subTest(total=total):
                self.assertEqual(remark_for(total), remark)

    def test_fractional_total_just_below_band(self):
        self.assertEqual(grade_for(Decimal("79.99")), "B")


class ComputeTests(SimpleTestCase):
    def test_subject_derived_fields(self):
        graded = compute([{"subject_name": "Mathematics", "ca1": 8, "ca2": 9, "exam": 70}])
        self.assertEqual(
            graded,
            [{"subject_name": "Mathematics", "ca1": 8, "ca2": 9, "exam": 70, "total": 87, "grade": "A", "remark": "Excellent"}],
        )

    def test_caller_supplied_derived_fields_are_ignored(self):
        graded = compute([{"subject_name": "English", "exam": 30, "total": 99, "grade": "A", "remark": "Excellent"}])
        self.assertEqual(graded[0]["total"], 30)
        self.assertEqual(graded[0]["grade"], "F")
        self.assertEqual(graded[0]["remark"], "Poor")

    def test_missing_scores_count_as_zero(self):
        graded = compute([{"subject_name": "Biology", "ca1": None, "exam": 45}])
        self.assertEqual(graded[0]["ca1"], 0)
        self.assertEqual(graded[0]["ca2"], 0)
        self.assertEqual(graded[0]["total"], 45)

    def test_out_of_range_scores_are_rejected(self):
        bad = [
            {"subject_name": "Math", "ca1": 11},
            {"subject_name": "Math", "ca2": -1},
            {"subject_name": "Math", "exam": 81},
            {"subject_name": "Math", "exam": "abc"},
            {"subject_name": "Math", "exam": True},
            {"subject_name": "", "exam": 50},
        ]
        for entry in bad:
            with self.subTest(entry=entry):
                with self.assertRaises(ValidationError):
                    compute([entry])


class SummarizeTests(SimpleTestCase):
    def test_empty_list_is_zero(self):
        self.assertEqual(summarize([]), (Decimal("0.00"), Decimal("0.00")))

    def test_average_rounds_half_up(self):
        graded = compute([{"subject_name": "A", "ca1": "0.01", "exam": 50}, {"subject_name": "B", "exam": 50}])
        total, average = summarize(graded)
        self.assertEqual(total, Decimal("100.01"))
        self.assertEqual(average, Decimal("50.01"))

    def test_total_and_average(self):
        graded = compute(
            [
                {"subject_name": "Math", "ca1": 8, "ca2": 9, "exam": 70},
                {"subject_name": "English", "ca1": 5, "ca2": 5, "exam": 50},
                {"subject_name": "Science", "ca1": 10, "ca2": 10, "exam": 20},
            ]
        )
        total, average = summarize(graded)
        self.assertEqual(total, Decimal("187.00"))
        self.assertEqual(average, Decimal("62.33"))
