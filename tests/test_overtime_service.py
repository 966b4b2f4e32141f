from __future__ import annotations

import random
import unittest
from datetime import date, timedelta

from timekeeping.models import DailyTotal, OvertimePolicy
from timekeeping.services.overtime import calculate_weekly_overtime, split_day
from timekeeping.services.policy_registry import CA_OVERTIME_POLICY, DEFAULT_OVERTIME_POLICY


def _week(minutes_per_day: list[int], start: date = date(2026, 1, 26)) -> list[DailyTotal]:
    return [
        DailyTotal(date=start + timedelta(days=index), total_minutes=minutes)
        for index, minutes in enumerate(minutes_per_day)
    ]


def _assert_balanced(test: unittest.TestCase, days: list[DailyTotal], policy: OvertimePolicy) -> None:
    result = calculate_weekly_overtime(days, policy)
    test.assertEqual(
        result.regular_minutes + result.overtime_minutes + result.double_time_minutes,
        result.total_minutes,
    )
    test.assertEqual(result.total_minutes, sum(day.total_minutes for day in days))
    for value in (result.regular_minutes, result.overtime_minutes, result.double_time_minutes):
        test.assertGreaterEqual(value, 0)


class WeeklyOvertimeTests(unittest.TestCase):
    def test_under_forty_hours_has_no_overtime(self) -> None:
        result = calculate_weekly_overtime(_week([480, 480, 480, 480, 0, 0, 0]))

        self.assertEqual(result.regular_minutes, 1920)
        self.assertEqual(result.overtime_minutes, 0)
        self.assertEqual(result.double_time_minutes, 0)

    def test_weekly_overtime_over_forty_hours(self) -> None:
        result = calculate_weekly_overtime(_week([600, 600, 600, 600, 600, 0, 0]))

        self.assertEqual(result.regular_minutes, 2400)
        self.assertEqual(result.overtime_minutes, 600)
        self.assertEqual(result.total_minutes, 3000)

    def test_empty_week(self) -> None:
        result = calculate_weekly_overtime(_week([0] * 7))

        self.assertEqual(result.regular_minutes, 0)
        self.assertEqual(result.overtime_minutes, 0)
        self.assertEqual(result.total_minutes, 0)

    def test_no_days_at_all(self) -> None:
        result = calculate_weekly_overtime([])

        self.assertEqual(result.total_minutes, 0)
        self.assertEqual(result.daily_breakdown, [])

    def test_daily_overtime_with_california_policy(self) -> None:
        result = calculate_weekly_overtime(_week([600, 480, 480, 480, 480, 0, 0]), CA_OVERTIME_POLICY)

        self.assertEqual(result.overtime_minutes, 120)
        self.assertEqual(result.regular_minutes, 2400)

    def test_daily_double_time_with_california_policy(self) -> None:
        result = calculate_weekly_overtime(_week([780, 0, 0, 0, 0, 0, 0]), CA_OVERTIME_POLICY)

        self.assertEqual(result.double_time_minutes, 60)
        self.assertEqual(result.overtime_minutes, 240)
        self.assertEqual(result.regular_minutes, 480)

    def test_weekly_threshold_applies_only_to_regular_pool(self) -> None:
        # Six 600-minute days under CA: 480 regular + 120 daily OT each, pool of 2880 capped at 2400.
        result = calculate_weekly_overtime(_week([600, 600, 600, 600, 600, 600, 0]), CA_OVERTIME_POLICY)

        self.assertEqual(result.regular_minutes, 2400)
        self.assertEqual(result.overtime_minutes, 6 * 120 + 480)
        self.assertEqual(result.double_time_minutes, 0)
        self.assertEqual(result.total_minutes, 3600)

    def test_daily_breakdown_keeps_pre_weekly_split(self) -> None:
        result = calculate_weekly_overtime(_week([600, 600, 600, 600, 600, 0, 0]))

        self.assertEqual(len(result.daily_breakdown), 7)
        self.assertEqual(result.daily_breakdown[0].regular_minutes, 600)
        self.assertEqual(result.daily_breakdown[0].overtime_minutes, 0)
        self.assertEqual(result.daily_breakdown[5].regular_minutes, 0)
        self.assertEqual(result.daily_breakdown[0].date, date(2026, 1, 26))

    def test_seventh_consecutive_day_rule(self) -> None:
        result = calculate_weekly_overtime(_week([300, 300, 300, 300, 300, 300, 600]), CA_OVERTIME_POLICY)
        seventh = result.daily_breakdown[6]

        self.assertEqual(seventh.regular_minutes, 0)
        self.assertEqual(seventh.overtime_minutes, 480)
        self.assertEqual(seventh.double_time_minutes, 120)
        self.assertEqual(result.regular_minutes, 1800)
        self.assertEqual(result.overtime_minutes, 480)
        self.assertEqual(result.double_time_minutes, 120)

    def test_seventh_day_short_shift_is_all_overtime(self) -> None:
        result = calculate_weekly_overtime(_week([60] * 7), CA_OVERTIME_POLICY)

        self.assertEqual(result.daily_breakdown[6].overtime_minutes, 60)
        self.assertEqual(result.daily_breakdown[6].regular_minutes, 0)
        self.assertEqual(result.regular_minutes, 360)

    def test_seventh_day_rule_needs_all_seven_days(self) -> None:
        result = calculate_weekly_overtime(_week([300, 300, 300, 0, 300, 300, 300]), CA_OVERTIME_POLICY)

        self.assertEqual(result.overtime_minutes, 0)
        self.assertEqual(result.regular_minutes, 1800)

    def test_seventh_day_rule_off_by_default(self) -> None:
        result = calculate_weekly_overtime(_week([300] * 7), DEFAULT_OVERTIME_POLICY)

        self.assertEqual(result.regular_minutes, 2100)
        self.assertEqual(result.overtime_minutes, 0)

    def test_zero_weekly_threshold_disables_weekly_rule(self) -> None:
        policy = OvertimePolicy(weekly_threshold_minutes=0)
        result = calculate_weekly_overtime(_week([720] * 5), policy)

        self.assertEqual(result.regular_minutes, 3600)
        self.assertEqual(result.overtime_minutes, 0)

    def test_negative_input_is_clamped(self) -> None:
        result = calculate_weekly_overtime(_week([-30, 60]))

        self.assertEqual(result.regular_minutes, 60)
        self.assertEqual(result.daily_breakdown[0].regular_minutes, 0)


class SplitDayTests(unittest.TestCase):
    def test_daily_rules_disabled(self) -> None:
        policy = OvertimePolicy(daily_threshold_minutes=0, daily_double_time_minutes=720)

        self.assertEqual(split_day(800, policy), (800, 0, 0))

    def test_double_time_below_daily_threshold(self) -> None:
        policy = OvertimePolicy(daily_threshold_minutes=600, daily_double_time_minutes=500)

        self.assertEqual(split_day(700, policy), (500, 0, 200))
        self.assertEqual(split_day(450, policy), (450, 0, 0))

    def test_exactly_at_double_time_threshold(self) -> None:
        self.assertEqual(split_day(720, CA_OVERTIME_POLICY), (480, 240, 0))


class OvertimePropertyTests(unittest.TestCase):
    POLICIES = [
        DEFAULT_OVERTIME_POLICY,
        CA_OVERTIME_POLICY,
        OvertimePolicy(weekly_threshold_minutes=1800, daily_threshold_minutes=540),
        OvertimePolicy(weekly_threshold_minutes=0, daily_threshold_minutes=600, daily_double_time_minutes=500),
        OvertimePolicy(weekly_threshold_minutes=2400, seventh_day_rule=True),
    ]

    def test_minutes_are_never_double_counted(self) -> None:
        rng = random.Random(7)
        for policy in self.POLICIES:
            for _ in range(100):
                days = _week([rng.choice([0, rng.randint(1, 960)]) for _ in range(7)])
                _assert_balanced(self, days, policy)

    def test_raising_one_day_never_lowers_premium_minutes(self) -> None:
        rng = random.Random(11)
        for policy in self.POLICIES:
            for _ in range(100):
                minutes = [rng.choice([0, rng.randint(1, 960)]) for _ in range(7)]
                before = calculate_weekly_overtime(_week(minutes), policy)
                index = rng.randrange(7)
                raised = list(minutes)
                raised[index] += rng.randint(1, 240)
                after = calculate_weekly_overtime(_week(raised), policy)

                self.assertGreaterEqual(
                    after.overtime_minutes + after.double_time_minutes,
                    before.overtime_minutes + before.double_time_minutes,
                )


if __name__ == "__main__":
    unittest.main()
